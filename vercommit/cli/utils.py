"""CLI Utility Functions"""

from pathlib import Path

from vercommit.convention import ValidationResult
from vercommit.output import dim, print_error


def read_message_file(path: str) -> str:
    """Read a commit message file the way git does: drop '#' comment lines
    and everything below the scissors line."""
    text = Path(path).read_text(encoding='utf-8')
    lines = []
    for line in text.split('\n'):
        if line.startswith('# ------------------------ >8 ------------------------'):
            break
        if line.startswith('#'):
            continue
        lines.append(line)
    return '\n'.join(lines).strip()


def report_invalid(result: ValidationResult, type_names: list[str]) -> None:
    """Print a validation failure with a format reminder."""
    print_error(result.error)
    example = type_names[0] if type_names else 'TYPE'
    print(dim(f"  Expected: TYPE: Project Name - vX.Y.Z  (types: {', '.join(type_names)})"))
    print(dim(f"  Example:  {example}: My Project - v1.0.0"))
