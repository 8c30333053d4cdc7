"""Git Operations Package"""

from vercommit.git.repository import GitRepository, GitError, sanitize_commit_message, MAX_MESSAGE_LENGTH

__all__ = [
    "GitRepository",
    "GitError",
    "sanitize_commit_message",
    "MAX_MESSAGE_LENGTH",
]
