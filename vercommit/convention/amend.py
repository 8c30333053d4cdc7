"""
Amend Policy - Decide whether HEAD may be amended instead of committing anew.

Rules run in order; the first that denies supplies the reason:
1. amend disabled
2. type not amendable
3. not same day
4. amend limit reached

keep_version / auto_increment_patch do not affect the decision. They only
say which version the caller should write into the amended message, see
next_amend_version().
"""

from dataclasses import dataclass
from datetime import datetime

from vercommit.convention.rules import RuleSet
from vercommit.convention.version import BumpKind, SemanticVersion, bump_version


@dataclass(frozen=True)
class AmendContext:
    """Facts about the previous commit, supplied by the caller per call."""
    previous_type: str
    previous_timestamp: datetime
    amend_count_today: int
    proposed_type: str
    now: datetime | None = None


@dataclass(frozen=True)
class AmendDecision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


def _local_date(moment: datetime):
    # Aware timestamps are compared in local time; naive ones are taken as local
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def can_amend(context: AmendContext, rule_set: RuleSet) -> AmendDecision:
    if rule_set is None:
        raise TypeError("rule_set is required")
    rules = rule_set.amend

    if not rules.enabled:
        return AmendDecision(False, "amend disabled")

    if context.proposed_type not in rules.allowed_for_types:
        return AmendDecision(False, "type not amendable")

    if rules.require_same_day:
        now = context.now or datetime.now()
        if _local_date(context.previous_timestamp) != _local_date(now):
            return AmendDecision(False, "not same day")

    if context.amend_count_today >= rules.max_amends:
        return AmendDecision(False, "amend limit reached")

    return AmendDecision(True, None)


def next_amend_version(current: SemanticVersion, rule_set: RuleSet) -> SemanticVersion:
    """Version to write when amending a commit that carried `current`."""
    rules = rule_set.amend
    if rules.keep_version:
        return current
    if rules.auto_increment_patch:
        return bump_version(current, BumpKind.PATCH)
    return current
