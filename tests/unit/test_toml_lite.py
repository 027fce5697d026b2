"""Tests for the tolerant TOML reader."""

from core.toml_lite import load_toml, parse_toml_lite


class TestTomlLite:
    """Test the line-based TOML fallback reader."""

    def test_tables_strings_and_scalars(self):
        """Headers, strings, numbers and booleans are read."""
        data = parse_toml_lite(
            """
title = "demo"
[server]
port = 8080
debug = true
ratio = 0.5
name = 'literal'
"""
        )

        assert data == {
            "title": "demo",
            "server": {"port": 8080, "debug": True, "ratio": 0.5, "name": "literal"},
        }

    def test_inline_tables_and_arrays(self):
        """Inline tables and arrays, including multi-line arrays."""
        data = parse_toml_lite(
            """
[dependencies]
tokio = { version = "1.28", features = ["full", "macros"] }
list = [
    "a",  # first
    "b",
]
"""
        )

        assert data["dependencies"]["tokio"] == {"version": "1.28", "features": ["full", "macros"]}
        assert data["dependencies"]["list"] == ["a", "b"]

    def test_dotted_headers_and_keys(self):
        """Dotted names create nested tables."""
        data = parse_toml_lite('[tool.poetry.dependencies]\nrequests = "^2.31"\nsite."host" = "x"\n')

        assert data["tool"]["poetry"]["dependencies"]["requests"] == "^2.31"
        assert data["tool"]["poetry"]["dependencies"]["site"] == {"host": "x"}

    def test_array_of_tables(self):
        """``[[bin]]`` headers append tables to a list."""
        data = parse_toml_lite('[[bin]]\nname = "a"\n[[bin]]\nname = "b"\n')

        assert data["bin"] == [{"name": "a"}, {"name": "b"}]

    def test_malformed_lines_skipped(self):
        """Unparseable lines are dropped, the rest is kept."""
        data = parse_toml_lite('[dependencies]\nserde = "1.0\nrand = "0.8"\nnot a pair\n')

        assert data == {"dependencies": {"rand": "0.8"}}

    def test_load_toml_prefers_strict_parser(self):
        """Valid documents go through tomllib unchanged."""
        assert load_toml('a = 1979-05-27T07:32:00Z\n')["a"].year == 1979

    def test_load_toml_falls_back_on_errors(self):
        """Invalid documents still yield their readable keys."""
        data = load_toml('[dependencies]\nserde = "1.0"\nserde = "1.1"\n= broken\n')

        assert data["dependencies"]["serde"] == "1.1"
