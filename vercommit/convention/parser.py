"""
Message Parser - Split a raw commit message into its convention fields.

Subject grammar:  <TYPE>: <project> - <version>
The project runs up to the last ' - v' so hyphens inside project names survive.
A project name that itself contains ' - v' cannot be told apart from the
version separator; the last occurrence always wins.

Parsing is purely syntactic and never fails on string input. Unknown types,
missing fields and malformed versions are left for the validator to report.
"""

import re
from dataclasses import dataclass

from vercommit.convention.errors import MalformedVersion
from vercommit.convention.rules import CommitType, RuleSet
from vercommit.convention.version import SemanticVersion, parse_version

TYPE_SEPARATOR = ': '
VERSION_SEPARATOR = ' - '
VERSION_CORE_RE = re.compile(r'v[0-9]+\.[0-9]+\.[0-9]+')


@dataclass(frozen=True)
class ParsedMessage:
    """Structured view of a commit message. Missing fields are None."""
    raw: str
    subject: str | None = None
    type: CommitType | None = None
    type_token: str | None = None
    project: str | None = None
    version: SemanticVersion | None = None
    version_token: str | None = None
    body: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.raw.strip()

    @property
    def type_name(self) -> str | None:
        return self.type.name if self.type else None


def _split_subject_body(text: str) -> tuple[str, str | None]:
    lines = text.strip('\n').split('\n')
    subject = lines[0].rstrip('\r')
    rest = lines[1:]

    # Body starts after the first blank line
    for i, line in enumerate(rest):
        if not line.strip():
            rest = rest[i + 1:]
            break

    body = '\n'.join(line.rstrip('\r') for line in rest).strip()
    return subject, body or None


def _split_project_version(rest: str) -> tuple[str | None, str | None]:
    """Split '<project> - <version>' at the last ' - v', else the last ' - '."""
    idx = rest.rfind(VERSION_SEPARATOR + 'v')
    if idx < 0:
        idx = rest.rfind(VERSION_SEPARATOR)
    if idx < 0:
        return rest.strip() or None, None

    project = rest[:idx].strip() or None
    version = rest[idx + len(VERSION_SEPARATOR):].strip() or None
    return project, version


def _resolve_version(token: str | None, pattern: re.Pattern) -> SemanticVersion | None:
    if token is None or not token.startswith('v'):
        return None
    if not pattern.fullmatch(token):
        return None
    # Custom patterns may allow suffixes; the triple is always the leading part
    core = VERSION_CORE_RE.match(token)
    if not core:
        return None
    try:
        return parse_version(core.group(0))
    except MalformedVersion:
        return None


def parse_commit_message(raw: str, rule_set: RuleSet) -> ParsedMessage:
    """Decompose a raw commit message using the RuleSet's grammar."""
    if rule_set is None:
        raise TypeError("rule_set is required")
    if raw is None:
        raw = ''
    if not isinstance(raw, str):
        raise TypeError(f"commit message must be a string, got {type(raw).__name__}")

    if not raw.strip():
        return ParsedMessage(raw=raw)

    subject, body = _split_subject_body(raw)

    if TYPE_SEPARATOR not in subject:
        return ParsedMessage(raw=raw, subject=subject, body=body)

    type_token, rest = subject.split(TYPE_SEPARATOR, 1)
    type_token = type_token or None
    project, version_token = _split_project_version(rest)

    return ParsedMessage(
        raw=raw,
        subject=subject,
        type=rule_set.get_type(type_token),
        type_token=type_token,
        project=project,
        version=_resolve_version(version_token, rule_set.compiled_version_pattern()),
        version_token=version_token,
        body=body,
    )
