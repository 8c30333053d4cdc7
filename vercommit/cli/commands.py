"""CLI Commands"""

import os
import sys

from vercommit.config import CONFIG_ENV_VAR, Config, get_config_path
from vercommit.convention import (
    ConventionError, MalformedVersion, RuleSet, SemanticVersion, analyze_commits, get_version_suggestions,
    next_release_version, parse_version, validate_commit_message,
)
from vercommit.git import GitError, GitRepository
from vercommit.output import ARROW, bold, dim, info, print_error, print_success, print_warning, colorize_commit_type
from vercommit.cli.utils import read_message_file, report_invalid


def display_config(config: Config) -> int:
    """Display current configuration."""
    config_path = get_config_path()
    rule_set = config.rule_set

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .vcrc found)")

    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        print(f"  {dim('Environment override:')} {CONFIG_ENV_VAR}={env_config}")

    print()
    print(f"  {bold('Project:')} {info(config.project_name)}")
    print()
    print(f"  {bold('Commit types:')}")
    for name, commit_type in rule_set.types.items():
        print(f"    {commit_type.emoji} {info(f'{name:<10}')} {commit_type.bump.value:<6} {dim(commit_type.description)}")

    print()
    print(f"  {bold('Rules:')}")
    print(f"    subject length:     {info(f'{rule_set.subject_min_length}-{rule_set.subject_max_length}')}")
    print(f"    body line length:   {info(str(rule_set.body_line_length))}")
    print(f"    require version:    {info(str(rule_set.require_version).lower())}")
    print(f"    require project:    {info(str(rule_set.require_project_name).lower())}")
    print(f"    version pattern:    {info(rule_set.version_pattern)}")

    amend = rule_set.amend
    print()
    print(f"  {bold('Amend:')}")
    print(f"    enabled:            {info(str(amend.enabled).lower())}")
    print(f"    max per day:        {info(str(amend.max_amends))}")
    print(f"    same day only:      {info(str(amend.require_same_day).lower())}")
    print(f"    allowed types:      {info(', '.join(sorted(amend.allowed_for_types)))}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .vcrc (in current directory)")
    print(f"    Global: ~/.vcrc\n")

    return 0


def run_check(path: str, rule_set: RuleSet) -> int:
    """commit-msg hook: validate the message file git hands us."""
    try:
        message = read_message_file(path)
    except OSError as e:
        print_error(f"Could not read commit message file: {e}")
        return 1

    result = validate_commit_message(message, rule_set)
    if not result.valid:
        report_invalid(result, rule_set.type_names)
        return 1
    return 0


def run_validate(text: str, rule_set: RuleSet) -> int:
    result = validate_commit_message(text, rule_set)
    if not result.valid:
        report_invalid(result, rule_set.type_names)
        return 1

    parsed = result.parsed
    print_success(f"Valid: {colorize_commit_type(parsed.subject)}")
    print(dim(f"  type={parsed.type_name} project={parsed.project} version={parsed.version}"))
    return 0


def resolve_current_version(requested: str | None, rule_set: RuleSet) -> SemanticVersion:
    """Explicit version if given, else the higher of the latest tag and the
    latest version in git history, else v0.0.0."""
    if requested:
        return parse_version(requested)
    try:
        repo = GitRepository()
        found = [v for v in (repo.tagged_version(), repo.latest_version(rule_set)) if v is not None]
    except GitError as e:
        print_warning(f"Could not read git history ({str(e).splitlines()[0]}), starting from v0.0.0")
        found = []
    return max(found) if found else SemanticVersion(0, 0, 0)


def run_suggest(requested: str, rule_set: RuleSet) -> int:
    try:
        current = resolve_current_version(requested, rule_set)
    except MalformedVersion as e:
        print_error(str(e))
        return 1

    print(f"\n{bold('Current version:')} {info(str(current))}\n")
    for suggestion in get_version_suggestions(current, rule_set):
        commit_type = rule_set.types[suggestion.type_name]
        print(f"  {commit_type.emoji} {suggestion.type_name:<10} {ARROW} {bold(str(suggestion.version))}  "
              f"{dim(commit_type.description)}")
    print()
    return 0


def _release_plan(repo: GitRepository, rule_set: RuleSet):
    """(last tag, analysis of commits since it, version to release next)."""
    tag = repo.latest_tag()
    analysis = analyze_commits(repo.subjects_since(tag), rule_set)
    version = next_release_version(repo.tagged_version(), repo.latest_version(rule_set), analysis)
    return tag, analysis, version


def run_analyze(rule_set: RuleSet) -> int:
    try:
        tag, analysis, upcoming = _release_plan(GitRepository(), rule_set)
    except (GitError, ConventionError) as e:
        print_error(str(e))
        return 1

    heading = f"Commits since {tag}" if tag else "Commits (no tags yet)"
    print(f"\n{bold(heading)}\n")
    for name, count in analysis.counts.items():
        commit_type = rule_set.types[name]
        print(f"  {commit_type.emoji} {name:<10} {info(str(count))}")
    print(f"    {'other':<10} {dim(str(analysis.others))}")
    print(f"    {'total':<10} {analysis.total}")

    recommended = analysis.recommended_type or analysis.recommended_bump.value
    print(f"\n{bold('Recommended:')} {recommended} ({analysis.recommended_bump.value}) {ARROW} {bold(str(upcoming))}\n")
    return 0


def run_release(requested: str, rule_set: RuleSet) -> int:
    """Tag HEAD as a release: the given version, else the one --analyze recommends."""
    try:
        repo = GitRepository()
        if not repo.has_commits():
            print_error("Nothing to release: repository has no commits")
            return 1
        if requested:
            version = parse_version(requested)
        else:
            tag, analysis, version = _release_plan(repo, rule_set)
            if tag is not None and analysis.total == 0:
                print_error(f"Nothing to release: no commits since {tag}")
                return 1
        name = str(version)
        repo.create_tag(name, f"Release {name[1:]}")
    except (GitError, ConventionError) as e:
        print_error(str(e))
        return 1

    print_success(f"Tagged {bold(name)}")
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        line = 'eval "$(register-python-argcomplete vc)"'
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell vc | Out-String | Invoke-Expression\n")
        print("To make it permanent, add to your $PROFILE")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete vc)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish vc | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags and commit types.')}")
    return 0
