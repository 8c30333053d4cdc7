"""
Release Analysis - Summarize commits since the last release and pick its version.

Subjects are counted by the type the parser finds; anything else is an
"other" commit. The recommended bump is the largest bump among counted
types, PATCH when there are none.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from vercommit.convention.parser import parse_commit_message
from vercommit.convention.rules import RuleSet
from vercommit.convention.version import BumpKind, SemanticVersion, bump_version

BUMP_RANK = {BumpKind.PATCH: 0, BumpKind.MINOR: 1, BumpKind.MAJOR: 2}


@dataclass(frozen=True)
class CommitAnalysis:
    total: int
    counts: Mapping[str, int]
    others: int
    recommended_type: str | None
    recommended_bump: BumpKind


def analyze_commits(subjects: Iterable[str], rule_set: RuleSet) -> CommitAnalysis:
    """Count commit subjects per type, in the RuleSet's type order."""
    if rule_set is None:
        raise TypeError("rule_set is required")

    counts = dict.fromkeys(rule_set.type_names, 0)
    total = others = 0
    for subject in subjects:
        total += 1
        parsed = parse_commit_message(subject, rule_set)
        if parsed.type is None:
            others += 1
        else:
            counts[parsed.type.name] += 1

    seen = [rule_set.types[name] for name, count in counts.items() if count]
    if seen:
        # max() keeps the first of equal bumps, so type order breaks ties
        chosen = max(seen, key=lambda t: BUMP_RANK[t.bump])
        recommended_type, recommended_bump = chosen.name, chosen.bump
    else:
        recommended_bump = BumpKind.PATCH
        recommended_type = next(
            (name for name, t in rule_set.types.items() if t.bump is BumpKind.PATCH), None
        )

    return CommitAnalysis(
        total=total,
        counts=counts,
        others=others,
        recommended_type=recommended_type,
        recommended_bump=recommended_bump,
    )


def next_release_version(
    tagged: SemanticVersion | None,
    committed: SemanticVersion | None,
    analysis: CommitAnalysis,
) -> SemanticVersion:
    """Version to tag next.

    Commits in this convention already carry their version, so when history
    has moved past the last tag the newest committed version is released
    as-is. Otherwise the tagged version (v0.0.0 if untagged) gets the
    recommended bump.
    """
    base = tagged or SemanticVersion(0, 0, 0)
    if committed is not None and committed > base:
        return committed
    return bump_version(base, analysis.recommended_bump)
