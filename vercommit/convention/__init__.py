"""Convention Engine Package

Pure functions for the Versioned Release Convention: parse, validate and
generate commit messages, compute version bumps, decide amend eligibility
and summarize the commits going into a release.
Nothing here touches the filesystem, git or logging.
"""

from vercommit.convention.errors import ConventionError, MalformedVersion, UnknownType, VersionOverflow
from vercommit.convention.version import (
    BumpKind, SemanticVersion, VersionSuggestion, MAX_COMPONENT,
    parse_version, format_version, compare_versions, bump_version, get_version_suggestions,
)
from vercommit.convention.rules import AmendRules, CommitType, RuleSet, default_rule_set
from vercommit.convention.parser import ParsedMessage, parse_commit_message
from vercommit.convention.validator import ValidationResult, validate_commit_message
from vercommit.convention.generator import generate_commit_message
from vercommit.convention.amend import AmendContext, AmendDecision, can_amend, next_amend_version
from vercommit.convention.analysis import CommitAnalysis, analyze_commits, next_release_version

__all__ = [
    "ConventionError",
    "MalformedVersion",
    "UnknownType",
    "VersionOverflow",
    "BumpKind",
    "SemanticVersion",
    "VersionSuggestion",
    "MAX_COMPONENT",
    "parse_version",
    "format_version",
    "compare_versions",
    "bump_version",
    "get_version_suggestions",
    "AmendRules",
    "CommitType",
    "RuleSet",
    "default_rule_set",
    "ParsedMessage",
    "parse_commit_message",
    "ValidationResult",
    "validate_commit_message",
    "generate_commit_message",
    "AmendContext",
    "AmendDecision",
    "can_amend",
    "next_amend_version",
    "CommitAnalysis",
    "analyze_commits",
    "next_release_version",
]
