"""CLI Argument Parsing"""

import argparse
import argcomplete

from vercommit import __version__


def _type_completer(**kwargs) -> list[str]:
    """Complete commit types from the loaded config."""
    from vercommit.config import load_config
    return load_config().rule_set.type_names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vc',
        description='Write and enforce versioned commit messages (TYPE: Project - vX.Y.Z)',
        epilog='Example: vc -t PATCH -b "- Fix login redirect" --commit'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Validation
    parser.add_argument('--check', type=str, metavar='FILE', help='Validate a commit message file (commit-msg hook)')
    parser.add_argument('--validate', type=str, metavar='TEXT', help='Validate a commit message string')

    # Generation options
    type_arg = parser.add_argument('-t', '--type', type=str, metavar='TYPE', help='Commit type, e.g. RELEASE, UPDATE, PATCH')
    type_arg.completer = _type_completer
    parser.add_argument('-p', '--project', type=str, metavar='NAME', help='Project name (default: from config)')
    parser.add_argument('-V', '--set-version', dest='version_number', type=str, metavar='VERSION',
                        help='Version to write (default: suggested from git history)')
    parser.add_argument('-b', '--body', type=str, metavar='TEXT', help='Commit body')
    parser.add_argument('--commit', action='store_true', help='Create the commit instead of printing the message')
    parser.add_argument('--amend', action='store_true', help='Amend HEAD if the amend policy allows it')
    parser.add_argument('--suggest', type=str, nargs='?', const='', default=None, metavar='VERSION',
                        help='Show next versions per commit type (default: latest in git history)')

    # Releases
    parser.add_argument('--analyze', action='store_true', help='Count commits per type since the last tag and recommend a bump')
    parser.add_argument('--release', type=str, nargs='?', const='', default=None, metavar='VERSION',
                        help='Tag HEAD as a release (default: the recommended version)')

    # Output options
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging')

    # Setup/config
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
