"""
RuleSet - Validation configuration for the Versioned Release Convention.

Commit types are a data-driven table (name -> CommitType) so new categories
need no code change. default_rule_set() builds a fresh value on every call;
there is no shared default instance.

JSON shape accepted by RuleSet.from_dict (camelCase or snake_case keys):
{
    "types": {"PATCH": {"description": "...", "emoji": "...",
                        "semverBump": "PATCH", "format": "PATCH: {project} - {version}"}},
    "rules": {"subjectMinLength": 10, "subjectMaxLength": 100, ...},
    "amend": {"enabled": true, "maxAmends": 10, "allowedForTypes": ["PATCH"], ...}
}
"""

import re
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Mapping

from vercommit.convention.errors import ConventionError
from vercommit.convention.version import BumpKind

DEFAULT_TYPES = (
    ('RELEASE', 'Major release - Breaking changes, new major version', '🚀', BumpKind.MAJOR),
    ('UPDATE', 'Minor update - New features, enhancements', '✨', BumpKind.MINOR),
    ('PATCH', 'Patch - Bug fixes, small improvements', '🔧', BumpKind.PATCH),
)

DEFAULT_VERSION_PATTERN = r'v[0-9]+\.[0-9]+\.[0-9]+'

# Type names sit before the first ': ' of a subject
TYPE_NAME_RE = re.compile(r'^[^\s:]+$')


def default_format(type_name: str) -> str:
    return f"{type_name}: {{project}} - {{version}}"


def is_valid_format(type_name: str, template: str) -> bool:
    """Only templates the parser can read back: 'NAME: {project} - {version}'
    (a literal v before {version} is tolerated)."""
    if not isinstance(template, str):
        return False
    pattern = rf'{re.escape(type_name)}: \{{project\}} - v?\{{version\}}'
    return re.fullmatch(pattern, template) is not None


@dataclass(frozen=True)
class CommitType:
    """One category of change and how it is written and versioned."""
    name: str
    description: str = ""
    emoji: str = ""
    bump: BumpKind = BumpKind.PATCH
    format: str = ""

    def __post_init__(self):
        if not self.format:
            object.__setattr__(self, 'format', default_format(self.name))
        elif not is_valid_format(self.name, self.format):
            raise ConventionError(
                f"Format for {self.name} must be '{default_format(self.name)}', got '{self.format}'"
            )
        object.__setattr__(self, 'bump', BumpKind(self.bump))

    def to_dict(self) -> dict:
        return {
            'description': self.description,
            'emoji': self.emoji,
            'semverBump': self.bump.value,
            'format': self.format,
        }


@dataclass(frozen=True)
class AmendRules:
    """When the previous commit may be amended instead of adding a new one."""
    enabled: bool = True
    max_amends: int = 10
    require_same_day: bool = True
    auto_increment_patch: bool = False
    keep_version: bool = True
    allowed_for_types: frozenset = frozenset({'PATCH', 'UPDATE'})

    def __post_init__(self):
        object.__setattr__(self, 'allowed_for_types', frozenset(self.allowed_for_types))


def _default_types() -> Mapping[str, CommitType]:
    return MappingProxyType({
        name: CommitType(name=name, description=description, emoji=emoji, bump=bump)
        for name, description, emoji, bump in DEFAULT_TYPES
    })


@dataclass(frozen=True)
class RuleSet:
    """Thresholds, commit types and amend policy consulted by the engine."""
    types: Mapping[str, CommitType] = field(default_factory=_default_types)
    subject_min_length: int = 10
    subject_max_length: int = 100
    body_line_length: int = 100
    require_version: bool = True
    require_project_name: bool = True
    version_pattern: str = DEFAULT_VERSION_PATTERN
    project_name_max_length: int = 50
    amend: AmendRules = field(default_factory=AmendRules)

    def __post_init__(self):
        if not isinstance(self.types, MappingProxyType):
            object.__setattr__(self, 'types', MappingProxyType(dict(self.types)))

    @property
    def type_names(self) -> list[str]:
        return list(self.types)

    def get_type(self, name: str | None) -> CommitType | None:
        """Exact, case-sensitive lookup."""
        if name is None:
            return None
        return self.types.get(name)

    def compiled_version_pattern(self) -> re.Pattern:
        return re.compile(self.version_pattern, re.ASCII)

    def to_dict(self) -> dict:
        """Serialize using the camelCase keys of the config file."""
        return {
            'types': {name: t.to_dict() for name, t in self.types.items()},
            'rules': {
                'subjectMinLength': self.subject_min_length,
                'subjectMaxLength': self.subject_max_length,
                'bodyLineLength': self.body_line_length,
                'requireVersion': self.require_version,
                'requireProjectName': self.require_project_name,
                'versionPattern': self.version_pattern,
                'projectNameMaxLength': self.project_name_max_length,
            },
            'amend': {
                'enabled': self.amend.enabled,
                'maxAmends': self.amend.max_amends,
                'requireSameDay': self.amend.require_same_day,
                'autoIncrementPatch': self.amend.auto_increment_patch,
                'keepVersion': self.amend.keep_version,
                'allowedForTypes': sorted(self.amend.allowed_for_types),
            },
        }

    @classmethod
    def from_dict(cls, data: dict | None, warnings: list[str] | None = None) -> 'RuleSet':
        """Build a RuleSet from a config 'commit' section, merged over defaults.

        Missing keys keep their defaults and unknown keys are ignored. Invalid
        values are replaced with defaults; a message for each is appended to
        `warnings` when a list is given.
        """
        if warnings is None:
            warnings = []
        data = data or {}
        if not isinstance(data, dict):
            warnings.append(f"Commit config must be an object, got {type(data).__name__}; using defaults")
            return default_rule_set()

        defaults = cls()
        types = _types_from_dict(data.get('types'), defaults, warnings)

        rules = _normalize_keys(data.get('rules') or {})
        values = {}
        for f in fields(cls):
            if f.name in ('types', 'amend') or f.name not in rules:
                continue
            values[f.name] = _checked(f.name, rules[f.name], getattr(defaults, f.name), warnings)

        if 'version_pattern' in values:
            try:
                re.compile(values['version_pattern'], re.ASCII)
            except re.error as e:
                warnings.append(f"Invalid versionPattern '{values['version_pattern']}' ({e}), using default")
                values['version_pattern'] = defaults.version_pattern

        low = values.get('subject_min_length', defaults.subject_min_length)
        high = values.get('subject_max_length', defaults.subject_max_length)
        if low > high:
            warnings.append(f"subjectMinLength {low} exceeds subjectMaxLength {high}, using defaults")
            values['subject_min_length'] = defaults.subject_min_length
            values['subject_max_length'] = defaults.subject_max_length

        amend = _amend_from_dict(data.get('amend') or {}, types, warnings)
        return cls(types=types, amend=amend, **values)


def default_rule_set() -> RuleSet:
    """Return a fresh RuleSet holding the built-in defaults."""
    return RuleSet()


def _camel_to_snake(key: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def _normalize_keys(data: dict) -> dict:
    if not isinstance(data, dict):
        return {}
    return {_camel_to_snake(k): v for k, v in data.items()}


def _checked(name: str, value: Any, default: Any, warnings: list[str]) -> Any:
    """Return value if it has the same kind as default, else default with a warning."""
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
    else:
        ok = isinstance(value, type(default)) and bool(value)
    if not ok:
        warnings.append(f"Invalid {name} '{value}', using {default!r}")
        return default
    return value


def _types_from_dict(raw: Any, defaults: RuleSet, warnings: list[str]) -> Mapping[str, CommitType]:
    if raw is None:
        return defaults.types
    if not isinstance(raw, dict) or not raw:
        warnings.append("Commit types must be a non-empty object, using defaults")
        return defaults.types

    types = {}
    for name, spec in raw.items():
        if not isinstance(name, str) or not TYPE_NAME_RE.match(name):
            warnings.append(f"Invalid commit type name '{name}', skipping")
            continue
        base = defaults.types.get(name) or CommitType(name=name)
        spec = _normalize_keys(spec) if isinstance(spec, dict) else {}

        bump = spec.get('semver_bump', spec.get('bump', base.bump))
        try:
            bump = BumpKind(bump)
        except ValueError:
            warnings.append(f"Invalid semverBump '{bump}' for {name}, using {base.bump.value}")
            bump = base.bump

        template = spec.get('format', base.format)
        if not is_valid_format(name, template):
            warnings.append(f"Format for {name} must be '{default_format(name)}', got '{template}'; using default")
            template = base.format

        types[name] = CommitType(
            name=name,
            description=str(spec.get('description', base.description)),
            emoji=str(spec.get('emoji', base.emoji)),
            bump=bump,
            format=template,
        )
    if not types:
        warnings.append("No usable commit types, using defaults")
        return defaults.types
    return MappingProxyType(types)


def _amend_from_dict(raw: dict, types: Mapping[str, CommitType], warnings: list[str]) -> AmendRules:
    defaults = AmendRules()
    raw = _normalize_keys(raw)
    values = {}
    for f in fields(AmendRules):
        if f.name not in raw:
            continue
        if f.name == 'allowed_for_types':
            allowed = raw[f.name]
            if not isinstance(allowed, (list, tuple, set, frozenset)):
                warnings.append(f"Invalid allowedForTypes '{allowed}', using defaults")
                continue
            names = [name for name in allowed if isinstance(name, str)]
            if len(names) != len(allowed):
                dropped = [name for name in allowed if not isinstance(name, str)]
                warnings.append(f"allowedForTypes entries must be type names, dropping {dropped!r}")
            unknown = [name for name in names if name not in types]
            if unknown:
                warnings.append(f"allowedForTypes lists unknown types: {', '.join(map(str, unknown))}")
            values[f.name] = frozenset(names)
        else:
            values[f.name] = _checked(f.name, raw[f.name], getattr(defaults, f.name), warnings)
    return AmendRules(**values)
