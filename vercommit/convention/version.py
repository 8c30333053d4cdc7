"""Version Model - Parse, compare and bump semantic versions."""

import re
from dataclasses import dataclass
from enum import Enum

from vercommit.convention.errors import MalformedVersion, VersionOverflow

VERSION_RE = re.compile(r'^v?([0-9]+)\.([0-9]+)\.([0-9]+)$')

# Largest integer a JSON consumer reads back exactly
MAX_COMPONENT = 2 ** 53 - 1


class BumpKind(str, Enum):
    """Which component of a version a commit type increments."""
    MAJOR = 'MAJOR'
    MINOR = 'MINOR'
    PATCH = 'PATCH'


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """An immutable (major, minor, patch) triple."""
    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for name in ('major', 'minor', 'patch'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {type(value).__name__}")
            if value < 0:
                raise MalformedVersion(f"{name} must be non-negative, got {value}")
            if value > MAX_COMPONENT:
                raise VersionOverflow(f"{name} exceeds {MAX_COMPONENT}")

    def __str__(self) -> str:
        return format_version(self)

    def bump(self, kind: 'BumpKind | str') -> 'SemanticVersion':
        return bump_version(self, kind)


@dataclass(frozen=True)
class VersionSuggestion:
    """Next version for one commit type."""
    type_name: str
    kind: BumpKind
    version: SemanticVersion


def parse_version(text: str) -> SemanticVersion:
    """Parse 'v1.2.3' or '1.2.3'. Raises MalformedVersion otherwise."""
    if not isinstance(text, str):
        raise TypeError(f"version must be a string, got {type(text).__name__}")

    match = VERSION_RE.match(text.strip())
    if not match:
        raise MalformedVersion(f"Invalid version '{text}'. Expected vX.Y.Z")

    major, minor, patch = (int(part) for part in match.groups())
    if max(major, minor, patch) > MAX_COMPONENT:
        raise MalformedVersion(f"Invalid version '{text}'. Components must not exceed {MAX_COMPONENT}")
    return SemanticVersion(major, minor, patch)


def format_version(version: SemanticVersion) -> str:
    return f"v{version.major}.{version.minor}.{version.patch}"


def _coerce(version: 'SemanticVersion | str') -> SemanticVersion:
    if isinstance(version, SemanticVersion):
        return version
    return parse_version(version)


def compare_versions(a: 'SemanticVersion | str', b: 'SemanticVersion | str') -> int:
    """Return -1, 0 or 1 comparing (major, minor, patch) lexicographically."""
    left, right = _coerce(a), _coerce(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def bump_version(version: 'SemanticVersion | str', kind: 'BumpKind | str') -> SemanticVersion:
    """Return the next version for a bump kind.

    MAJOR resets minor and patch, MINOR resets patch. A component that would
    pass MAX_COMPONENT raises VersionOverflow instead of saturating.
    """
    current = _coerce(version)
    kind = BumpKind(kind)

    if kind is BumpKind.MAJOR:
        target = ('major', current.major + 1, 0, 0)
    elif kind is BumpKind.MINOR:
        target = ('minor', current.major, current.minor + 1, 0)
    else:
        target = ('patch', current.major, current.minor, current.patch + 1)

    name, major, minor, patch = target
    if max(major, minor, patch) > MAX_COMPONENT:
        raise VersionOverflow(f"Cannot bump {name} of {format_version(current)}: exceeds {MAX_COMPONENT}")
    return SemanticVersion(major, minor, patch)


def get_version_suggestions(current: 'SemanticVersion | str', rule_set) -> list[VersionSuggestion]:
    """One suggestion per commit type, in the RuleSet's type order."""
    if rule_set is None:
        raise TypeError("rule_set is required")
    base = _coerce(current)
    return [
        VersionSuggestion(type_name=name, kind=commit_type.bump, version=bump_version(base, commit_type.bump))
        for name, commit_type in rule_set.types.items()
    ]
