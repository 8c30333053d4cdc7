"""Convention Engine Errors"""


class ConventionError(ValueError):
    """Base class for errors raised by the convention engine."""
    pass


class MalformedVersion(ConventionError):
    """Raised when a string is not a vX.Y.Z semantic version."""
    pass


class VersionOverflow(ConventionError):
    """Raised when a version component would exceed MAX_COMPONENT."""
    pass


class UnknownType(ConventionError):
    """Raised when a commit type is not defined in the RuleSet."""

    def __init__(self, type_name: str, valid_types: list[str] | None = None):
        self.type_name = type_name
        self.valid_types = valid_types or []
        message = f"Unknown commit type '{type_name}'"
        if self.valid_types:
            message += f". Valid types: {', '.join(self.valid_types)}"
        super().__init__(message)
