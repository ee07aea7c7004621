"""Test module for robust_string_parser package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    import robust_string_parser

    assert robust_string_parser is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import robust_string_parser

    assert robust_string_parser.__version__ == "0.1.0"
    assert robust_string_parser.__author__ == "Robust String Parser Team"


def test_public_api_exports() -> None:
    """Test that the main entry points are exported at the top level."""
    import robust_string_parser

    for name in ("ParseEngine", "Grammar", "Node", "RootNode", "TextNode", "ParserConfig"):
        assert name in robust_string_parser.__all__
        assert hasattr(robust_string_parser, name)


def test_quick_parse() -> None:
    """Test the smallest possible end-to-end use."""
    from robust_string_parser import ParseEngine

    result = ParseEngine().parse("plain")

    assert result.success
    assert result.tree.first_child().content == "plain"
