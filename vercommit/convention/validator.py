"""Message Validator - Apply RuleSet constraints to a commit message."""

from dataclasses import dataclass

from vercommit.convention.parser import ParsedMessage, parse_commit_message
from vercommit.convention.rules import RuleSet

FORMAT_HINT = "TYPE: Project Name - vX.Y.Z"


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one message. `error` is None only when valid."""
    valid: bool
    error: str | None = None
    parsed: ParsedMessage | None = None

    def __bool__(self) -> bool:
        return self.valid


def _fail(error: str, parsed: ParsedMessage) -> ValidationResult:
    return ValidationResult(valid=False, error=error, parsed=parsed)


def _check_type(parsed: ParsedMessage, rule_set: RuleSet) -> str | None:
    if parsed.type_token is None:
        return f"Commit type is missing. Expected format: {FORMAT_HINT}"
    if parsed.type is None:
        return f"Invalid commit type '{parsed.type_token}'. Valid types: {', '.join(rule_set.type_names)}"
    return None


def _check_project(parsed: ParsedMessage, rule_set: RuleSet) -> str | None:
    if not rule_set.require_project_name:
        return None
    if not parsed.project:
        return "Project name is required"
    if len(parsed.project) > rule_set.project_name_max_length:
        return f"Project name must be {rule_set.project_name_max_length} characters or less"
    return None


def _check_version(parsed: ParsedMessage, rule_set: RuleSet) -> str | None:
    if not rule_set.require_version:
        return None
    if parsed.version_token is None:
        return "Version is required (expected format vX.Y.Z)"
    if parsed.version is None:
        return f"Invalid version '{parsed.version_token}'. Version must match vX.Y.Z"
    return None


def _check_subject(parsed: ParsedMessage, rule_set: RuleSet) -> str | None:
    length = len(parsed.subject)
    if length < rule_set.subject_min_length:
        return f"Subject line must be at least {rule_set.subject_min_length} characters"
    if length > rule_set.subject_max_length:
        return f"Subject line must be {rule_set.subject_max_length} characters or less"
    return None


def _check_body(parsed: ParsedMessage, rule_set: RuleSet) -> str | None:
    if not parsed.body:
        return None
    for number, line in enumerate(parsed.body.split('\n'), 1):
        if len(line) > rule_set.body_line_length:
            return f"Body line {number} exceeds {rule_set.body_line_length} characters"
    return None


CHECKS = (_check_type, _check_project, _check_version, _check_subject, _check_body)


def validate_commit_message(message: 'str | ParsedMessage', rule_set: RuleSet) -> ValidationResult:
    """Validate raw text (or an already parsed message).

    Checks run in a fixed order and the first failure is reported. Malformed
    input never raises; a missing rule_set does.
    """
    if rule_set is None:
        raise TypeError("rule_set is required")

    if isinstance(message, ParsedMessage):
        parsed = message
    else:
        parsed = parse_commit_message(message, rule_set)

    if parsed.is_empty:
        return _fail("Message is required", parsed)

    for check in CHECKS:
        error = check(parsed, rule_set)
        if error:
            return _fail(error, parsed)

    return ValidationResult(valid=True, error=None, parsed=parsed)
