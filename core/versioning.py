"""Version normalization and update classification."""

import re
from dataclasses import dataclass, field

from .models import LATEST, UpdateType

_RE_OPERATORS = re.compile(r"^[\^~><=!\s]+")
_RE_SEMVER = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True)
class SemVer:
    """A parsed ``MAJOR.MINOR.PATCH[-prerelease][+build]`` version."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def precedes(self, other: "SemVer") -> bool:
        """Return True if ``self`` has lower precedence than ``other``."""
        if self.core != other.core:
            return self.core < other.core
        if not self.prerelease or not other.prerelease:
            # A release outranks any prerelease of the same core
            return bool(self.prerelease) and not other.prerelease
        return _prerelease_key(self.prerelease) < _prerelease_key(other.prerelease)


def _prerelease_key(identifiers: tuple[str, ...]) -> tuple:
    # Numeric identifiers sort before alphanumeric ones
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in identifiers)


@dataclass
class Classification:
    """How ``current`` relates to ``latest`` when an update exists."""

    update_type: UpdateType
    has_breaking_change: bool
    notes: list[str] = field(default_factory=list)


def clean_version(constraint: str | None) -> str:
    """Strip range operators from a manifest constraint.

    ``^1.2.3`` -> ``1.2.3``, ``>=2.0, <3`` -> ``2.0``, ``v1.4.0`` -> ``1.4.0``.
    The literal ``latest`` and wildcards are returned unchanged.
    """
    if not constraint:
        return LATEST
    value = constraint.strip()
    if value in (LATEST, "*", "x"):
        return value
    # Only the first clause of a compound range carries the baseline
    value = re.split(r"\|\||,", value, maxsplit=1)[0].strip()
    value = _RE_OPERATORS.sub("", value)
    value = value.split()[0] if value.split() else value
    if len(value) > 1 and value[0] in "vV" and value[1].isdigit():
        value = value[1:]
    return value or constraint.strip()


def parse_semver(version: str) -> SemVer | None:
    """Parse a strict semantic version, tolerating a leading ``v`` or ``=``."""
    value = version.strip().lstrip("=")
    if value[:1] in ("v", "V"):
        value = value[1:]
    match = _RE_SEMVER.match(value)
    if not match:
        return None
    major, minor, patch, pre = match.groups()
    prerelease = tuple(pre.split(".")) if pre else ()
    return SemVer(int(major), int(minor), int(patch), prerelease)


def classify_update(current: str, latest: str) -> Classification | None:
    """Classify the move from ``current`` to ``latest``.

    Returns None when there is nothing to update. Versions that are not both
    valid semver are compared as strings and any difference is treated as
    potentially breaking.
    """
    if current == latest:
        return None

    current_semver = parse_semver(current)
    latest_semver = parse_semver(latest)

    if current_semver is None or latest_semver is None:
        return Classification(
            update_type=UpdateType.UNKNOWN,
            has_breaking_change=True,
            notes=[
                f"Versions {current} and {latest} are not semantic versions; "
                "compatibility could not be verified."
            ],
        )

    if not current_semver.precedes(latest_semver):
        return None

    if latest_semver.major != current_semver.major:
        return Classification(
            update_type=UpdateType.MAJOR,
            has_breaking_change=True,
            notes=[
                f"Major version change: {current_semver.major}.x.x → {latest_semver.major}.x.x",
                "This usually indicates breaking changes. Check the package changelog.",
            ],
        )
    if latest_semver.minor != current_semver.minor:
        return Classification(UpdateType.MINOR, False)
    if latest_semver.patch != current_semver.patch:
        return Classification(UpdateType.PATCH, False)
    # Same release line, only the prerelease tag moved
    return Classification(UpdateType.UNKNOWN, False)
