"""Message Generator - Compose a commit message from structured input."""

from vercommit.convention.errors import UnknownType
from vercommit.convention.rules import RuleSet, default_rule_set
from vercommit.convention.version import SemanticVersion, format_version, parse_version


def generate_commit_message(
    type_name: str,
    project: str,
    version: 'SemanticVersion | str',
    body: str | None = None,
    rule_set: RuleSet | None = None,
) -> str:
    """Render TYPE's format template, then a blank line and the body if any.

    Raises UnknownType when type_name is not in the RuleSet.
    """
    rule_set = rule_set or default_rule_set()
    commit_type = rule_set.get_type(type_name)
    if commit_type is None:
        raise UnknownType(type_name, rule_set.type_names)

    if not isinstance(version, SemanticVersion):
        version = parse_version(version)

    rendered = format_version(version)
    # Older templates spell the prefix themselves: 'v{version}'
    template = commit_type.format.replace('v{version}', '{version}')
    message = template.replace('{project}', project.strip()).replace('{version}', rendered)

    if body and body.strip():
        message += f"\n\n{body.strip()}"
    return message
