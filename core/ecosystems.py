"""Static description of every supported ecosystem.

Each ecosystem is described once: which manifest files identify it, which
registry client answers version queries, and how its package managers are
invoked. Detection, parsing, lookups and updates all resolve through this
table instead of switching on ecosystem names.

Command templates are tuples of argument tokens. ``{name}`` and ``{version}``
are substituted inside individual tokens so package names never reach a shell.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

# Global detection order; the first manifest present wins
MANIFEST_PRIORITY: tuple[str, ...] = (
    "package.json",
    "Cargo.toml",
    "requirements.txt",
    "pyproject.toml",
    "go.mod",
    "Gemfile",
)

DEFAULT_ECOSYSTEM_ID = "javascript"


@dataclass(frozen=True)
class PackageManager:
    """A package manager executable and its argument templates."""

    name: str
    install: tuple[str, ...]
    update_all: tuple[tuple[str, ...], ...]
    applies: Callable[[Path], bool] | None = None

    def install_args(self, package: str, version: str) -> list[str]:
        return render_args(self.install, package, version)

    def update_all_args(self) -> list[list[str]]:
        return [list(command) for command in self.update_all]


@dataclass(frozen=True)
class EcosystemDescriptor:
    """One supported language and package manager pairing."""

    id: str
    display_name: str
    manifest_files: tuple[str, ...]
    package_manager_name: str
    registry_id: str
    package_managers: tuple[PackageManager, ...]
    latest_lookup: tuple[str, ...] | None = None
    parse_latest: Callable[[str, str], str | None] | None = field(default=None, compare=False)

    @property
    def default_package_manager(self) -> PackageManager:
        return self.package_managers[-1]

    def select_package_manager(self, project_dir: Path) -> PackageManager:
        """Pick the package manager a project uses from its lockfiles."""
        for manager in self.package_managers:
            if manager.applies is None or manager.applies(project_dir):
                return manager
        return self.default_package_manager


def render_args(template: tuple[str, ...], package: str, version: str = "") -> list[str]:
    """Substitute ``{name}``/``{version}`` into each argument token."""
    return [token.replace("{name}", package).replace("{version}", version) for token in template]


def _has_file(*names: str) -> Callable[[Path], bool]:
    def check(project_dir: Path) -> bool:
        return any((project_dir / name).is_file() for name in names)

    return check


def _uses_poetry(project_dir: Path) -> bool:
    if (project_dir / "poetry.lock").is_file():
        return True
    pyproject = project_dir / "pyproject.toml"
    if not pyproject.is_file():
        return False
    try:
        return "[tool.poetry" in pyproject.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def _last_line(stdout: str, package: str) -> str | None:
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    return lines[-1] if lines else None


def _cargo_search(stdout: str, package: str) -> str | None:
    # cargo search prints: serde = "1.0.197"    # A serialization framework
    match = re.search(rf'^{re.escape(package)}\s*=\s*"([^"]+)"', stdout, re.MULTILINE)
    return match.group(1) if match else None


def _pip_index(stdout: str, package: str) -> str | None:
    match = re.search(r"Available versions:\s*([^,\s]+)", stdout)
    if match:
        return match.group(1)
    match = re.search(r"^\S+\s+\(([^)]+)\)", stdout, re.MULTILINE)
    return match.group(1) if match else None


def _go_list_versions(stdout: str, package: str) -> str | None:
    tokens = stdout.split()
    # First token is the module path itself
    return tokens[-1] if len(tokens) > 1 else None


def _gem_search(stdout: str, package: str) -> str | None:
    match = re.search(rf"^{re.escape(package)} \(([^,\s)]+)", stdout, re.MULTILINE)
    return match.group(1) if match else None


JAVASCRIPT = EcosystemDescriptor(
    id="javascript",
    display_name="JavaScript/TypeScript",
    manifest_files=("package.json",),
    package_manager_name="npm/pnpm/yarn",
    registry_id="npm",
    package_managers=(
        PackageManager("pnpm", ("pnpm", "add", "{name}@{version}"), (("pnpm", "update"),), _has_file("pnpm-lock.yaml")),
        PackageManager("yarn", ("yarn", "add", "{name}@{version}"), (("yarn", "upgrade"),), _has_file("yarn.lock")),
        PackageManager("bun", ("bun", "add", "{name}@{version}"), (("bun", "update"),), _has_file("bun.lockb", "bun.lock")),
        PackageManager("npm", ("npm", "install", "{name}@{version}"), (("npm", "update"),)),
    ),
    latest_lookup=("npm", "view", "{name}", "version"),
    parse_latest=_last_line,
)

RUST = EcosystemDescriptor(
    id="rust",
    display_name="Rust",
    manifest_files=("Cargo.toml",),
    package_manager_name="cargo",
    registry_id="crates",
    package_managers=(
        PackageManager("cargo", ("cargo", "add", "{name}@{version}"), (("cargo", "update"),)),
    ),
    latest_lookup=("cargo", "search", "{name}", "--limit", "1"),
    parse_latest=_cargo_search,
)

PYTHON = EcosystemDescriptor(
    id="python",
    display_name="Python",
    manifest_files=("requirements.txt", "pyproject.toml"),
    package_manager_name="pip/poetry",
    registry_id="pypi",
    package_managers=(
        PackageManager("poetry", ("poetry", "add", "{name}@{version}"), (("poetry", "update"),), _uses_poetry),
        PackageManager(
            "pip",
            ("pip", "install", "{name}=={version}"),
            (("pip", "install", "--upgrade", "-r", "requirements.txt"),),
        ),
    ),
    latest_lookup=("pip", "index", "versions", "{name}"),
    parse_latest=_pip_index,
)

GO = EcosystemDescriptor(
    id="go",
    display_name="Go",
    manifest_files=("go.mod",),
    package_manager_name="go",
    registry_id="goproxy",
    package_managers=(
        PackageManager("go", ("go", "get", "{name}@v{version}"), (("go", "get", "-u", "./..."), ("go", "mod", "tidy"))),
    ),
    latest_lookup=("go", "list", "-m", "-versions", "{name}"),
    parse_latest=_go_list_versions,
)

RUBY = EcosystemDescriptor(
    id="ruby",
    display_name="Ruby",
    manifest_files=("Gemfile",),
    package_manager_name="bundler",
    registry_id="rubygems",
    package_managers=(
        PackageManager("bundle", ("bundle", "add", "{name}", "--version", "{version}"), (("bundle", "update"),)),
    ),
    latest_lookup=("gem", "search", "--remote", "--exact", "{name}"),
    parse_latest=_gem_search,
)

ECOSYSTEMS: dict[str, EcosystemDescriptor] = {
    descriptor.id: descriptor for descriptor in (JAVASCRIPT, RUST, PYTHON, GO, RUBY)
}


def get_ecosystem(ecosystem_id: str) -> EcosystemDescriptor | None:
    """Look up a descriptor by id (case-insensitive)."""
    return ECOSYSTEMS.get(ecosystem_id.lower())


def ecosystem_for_manifest(filename: str) -> EcosystemDescriptor | None:
    """Return the ecosystem owning a manifest filename."""
    name = Path(filename).name
    for descriptor in ECOSYSTEMS.values():
        if name in descriptor.manifest_files:
            return descriptor
    return None


__all__ = [
    "DEFAULT_ECOSYSTEM_ID",
    "ECOSYSTEMS",
    "EcosystemDescriptor",
    "MANIFEST_PRIORITY",
    "PackageManager",
    "ecosystem_for_manifest",
    "get_ecosystem",
    "render_args",
]
