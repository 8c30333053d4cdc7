"""
Terminal output for vc.

Styles are looked up by role (ok, fail, warn, ...) rather than by color so the
palette lives in one table. Messages go to stdout; errors and warnings go to
stderr so that `vc -t PATCH | git commit -F -` only ever pipes the message.
"""

import os
import re
import sys

RESET = '\033[0m'

STYLES = {
    'ok': '\033[32m',
    'fail': '\033[31m',
    'warn': '\033[33m',
    'note': '\033[36m',
    'muted': '\033[2m',
    'strong': '\033[1m',
}

# Unknown types fall back to the 'note' style
COMMIT_TYPE_COLORS = {
    'RELEASE': '\033[35m',
    'UPDATE': STYLES['ok'],
    'PATCH': STYLES['warn'],
}

_TYPE_PREFIX_RE = re.compile(r'^([^\s:]+):')


def _color_wanted(stream) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    return hasattr(stream, 'isatty') and stream.isatty() and sys.platform != 'win32'


def _can_encode(text: str) -> bool:
    try:
        text.encode(sys.stdout.encoding or 'utf-8')
    except (UnicodeEncodeError, LookupError):
        return False
    return True


COLORS_ENABLED = _color_wanted(sys.stdout)
_FANCY = _can_encode('✓✗→⚠┌─┐│└┘')

CHECK, CROSS, ARROW, BANG = ('✓', '✗', '→', '⚠') if _FANCY else ('[OK]', '[X]', '->', '[!]')
BOX = '┌─┐│└┘' if _FANCY else '+-+|++'


def disable_colors() -> None:
    global COLORS_ENABLED
    COLORS_ENABLED = False


def paint(text: str, *codes: str) -> str:
    """Wrap text in the given ANSI codes when colors are on."""
    if not COLORS_ENABLED or not codes:
        return text
    return f"{''.join(codes)}{text}{RESET}"


def success(text: str) -> str:
    return paint(text, STYLES['ok'])


def info(text: str) -> str:
    return paint(text, STYLES['note'])


def dim(text: str) -> str:
    return paint(text, STYLES['muted'])


def bold(text: str) -> str:
    return paint(text, STYLES['strong'])


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(paint(f"{CROSS} {message}", STYLES['fail']), file=sys.stderr)


def print_warning(message: str) -> None:
    print(paint(f"{BANG} {message}", STYLES['warn']), file=sys.stderr)


def colorize_commit_type(message: str) -> str:
    """Color the TYPE prefix on the first line of a commit message."""
    match = _TYPE_PREFIX_RE.match(message)
    if not COLORS_ENABLED or not match:
        return message
    color = COMMIT_TYPE_COLORS.get(match.group(1), STYLES['note'])
    prefix = match.group(0)
    return paint(prefix, STYLES['strong'], color) + message[len(prefix):]


def print_box(text: str) -> None:
    """Frame a commit message; only its subject line is type-colored."""
    top_left, edge, top_right, side, bottom_left, bottom_right = BOX
    lines = text.split('\n')
    width = max(len(line) for line in lines)

    print(dim(top_left + edge * (width + 2) + top_right))
    for i, line in enumerate(lines):
        shown = colorize_commit_type(line) if i == 0 else line
        print(f"{dim(side)} {shown}{' ' * (width - len(line))} {dim(side)}")
    print(dim(bottom_left + edge * (width + 2) + bottom_right))
