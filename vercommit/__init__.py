"""
Versioned Commit

Enforces the Versioned Release Convention for git commit messages:
    TYPE: Project Name - vX.Y.Z
"""

__version__ = "1.0.0"
