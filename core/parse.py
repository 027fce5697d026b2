"""Manifest parser dispatch."""

from collections.abc import Callable
from pathlib import Path

from .models import Manifest
from .parse_go import parse_go_mod
from .parse_node import parse_package_json
from .parse_python import parse_pyproject, parse_requirements
from .parse_ruby import parse_gemfile
from .parse_rust import parse_cargo_toml

PARSERS: dict[str, Callable[[str], Manifest]] = {
    "package.json": parse_package_json,
    "Cargo.toml": parse_cargo_toml,
    "requirements.txt": parse_requirements,
    "pyproject.toml": parse_pyproject,
    "go.mod": parse_go_mod,
    "Gemfile": parse_gemfile,
}


def decode_manifest(contents: bytes | str) -> str:
    """Return manifest text, decoding bytes as UTF-8."""
    if isinstance(contents, bytes):
        return contents.decode("utf-8", errors="replace").lstrip("\ufeff")
    return contents


def load_manifest(ecosystem_id: str, contents: bytes | str, filename: str) -> Manifest:
    """Parse a manifest into a :class:`Manifest`.

    Unknown filenames yield an empty manifest for ``ecosystem_id``.
    """
    text = decode_manifest(contents)
    parser = PARSERS.get(Path(filename).name)
    if parser is None:
        return Manifest(ecosystem=ecosystem_id, raw=text, entries=[])
    return parser(text)


def parse_manifest(ecosystem_id: str, contents: bytes | str, filename: str) -> dict[str, str]:
    """Parse a manifest into ``{name: constraint}``.

    Args:
        ecosystem_id: Ecosystem the manifest belongs to
        contents: Raw file contents
        filename: Manifest filename, used to choose the grammar

    Returns:
        Map of package name to the constraint as written, or ``"latest"``
    """
    return load_manifest(ecosystem_id, contents, filename).as_dict()
