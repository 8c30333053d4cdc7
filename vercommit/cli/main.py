"""CLI Main Entry Point"""

import logging
import sys

from vercommit.config import load_config
from vercommit.convention import (
    ConventionError, can_amend, generate_commit_message, get_version_suggestions,
    next_amend_version, parse_commit_message, parse_version, validate_commit_message,
)
from vercommit.git import GitError, GitRepository
from vercommit.output import CHECK, bold, dim, disable_colors, print_box, print_error, success
from vercommit.state import StateError, StateStore

from vercommit.cli.args import parse_args
from vercommit.cli.commands import (
    display_config, resolve_current_version, run_analyze, run_check, run_install_completion, run_release, run_suggest,
    run_validate,
)
from vercommit.cli.utils import report_invalid

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def _display_message(message, is_pipe):
    if is_pipe:
        print(message)
    else:
        print()
        print_box(message)


def _suggested_version(args, rule_set):
    """Version for a new commit: -V as given, else the TYPE bump of the latest version."""
    if args.version_number:
        return parse_version(args.version_number)
    current = resolve_current_version(None, rule_set)
    for suggestion in get_version_suggestions(current, rule_set):
        if suggestion.type_name == args.type:
            return suggestion.version
    return current


def _generate_flow(args, config, rule_set, store):
    """Compose a message from -t/-p/-V/-b and optionally commit it.

    Returns:
        int: Exit code
    """
    is_pipe = not sys.stdout.isatty()
    project = args.project or config.project_name

    try:
        version = _suggested_version(args, rule_set)
        message = generate_commit_message(args.type, project, version, args.body, rule_set)
    except ConventionError as e:
        print_error(str(e))
        return 1

    result = validate_commit_message(message, rule_set)
    if not result.valid:
        report_invalid(result, rule_set.type_names)
        return 1

    _display_message(message, is_pipe and not args.commit)
    if not args.commit:
        return 0

    try:
        repo = GitRepository()
        repo.commit(message)
        store.record_commit(repo.root(), args.type)
    except (GitError, StateError, ValueError) as e:
        print_error(str(e))
        return 1

    print(f"{success(CHECK)} Committed {bold(str(version))}")
    return 0


def _amend_flow(args, config, rule_set, store):
    """Amend HEAD with a new message if the amend policy allows it.

    Returns:
        int: Exit code
    """
    if not args.type:
        print_error("--amend needs a commit type: vc --amend -t PATCH")
        return 1

    try:
        repo = GitRepository()
        if not repo.has_commits():
            print_error("Nothing to amend: repository has no commits")
            return 1
        root = repo.root()
        previous = parse_commit_message(repo.head_message(), rule_set)
        context = store.amend_context(
            root,
            args.type,
            previous_type=previous.type_token,
            previous_timestamp=repo.head_timestamp(),
        )
    except GitError as e:
        print_error(str(e))
        return 1

    decision = can_amend(context, rule_set)
    logger.debug("Amend check for %s: %s", root, decision)
    if not decision.allowed:
        print_error(f"Cannot amend: {decision.reason}")
        return 1

    try:
        if args.version_number:
            version = parse_version(args.version_number)
        elif previous.version is not None:
            version = next_amend_version(previous.version, rule_set)
        else:
            print_error("HEAD has no version to keep; pass one with -V")
            return 1
        project = args.project or previous.project or config.project_name
        body = args.body if args.body is not None else previous.body
        message = generate_commit_message(args.type, project, version, body, rule_set)
    except ConventionError as e:
        print_error(str(e))
        return 1

    result = validate_commit_message(message, rule_set)
    if not result.valid:
        report_invalid(result, rule_set.type_names)
        return 1

    try:
        repo.amend(message)
        entry = store.record_amend(root, args.type)
    except (GitError, StateError, ValueError) as e:
        print_error(str(e))
        return 1

    _display_message(message, not sys.stdout.isatty())
    count = f"({entry['amendCount']}/{rule_set.amend.max_amends} today)"
    print(f"{success(CHECK)} Amended {dim(count)}")
    return 0


def _handle_subcommands(args, config):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(config), True
    return 0, False


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.no_color:
        disable_colors()

    config = load_config()
    exit_code, should_exit = _handle_subcommands(args, config)
    if should_exit:
        return exit_code

    rule_set = config.rule_set
    store = StateStore()

    if args.check:
        return run_check(args.check, rule_set)
    if args.validate is not None:
        return run_validate(args.validate, rule_set)
    if args.suggest is not None:
        return run_suggest(args.suggest, rule_set)
    if args.analyze:
        return run_analyze(rule_set)
    if args.release is not None:
        return run_release(args.release, rule_set)
    if args.amend:
        return _amend_flow(args, config, rule_set, store)
    if args.type:
        return _generate_flow(args, config, rule_set, store)

    print_error("Nothing to do. Try: vc -t PATCH, vc --analyze or vc --help")
    return 2
