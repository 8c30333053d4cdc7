"""Git Repository - Read history and write commits through the git CLI."""

import logging
import re
import subprocess
from datetime import datetime

from vercommit.convention import MalformedVersion, RuleSet, SemanticVersion, parse_commit_message, parse_version

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000

# Control characters except tab and newline
CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')


class GitError(Exception):
    """Raised when git operations fail."""
    pass


def sanitize_commit_message(message: str) -> str:
    """Strip control characters and cap length before handing text to git."""
    if not message or not isinstance(message, str):
        raise ValueError("Commit message must be a non-empty string")

    sanitized = CONTROL_CHARS_RE.sub('', message.replace('\r\n', '\n'))
    if len(sanitized) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Commit message too long (max {MAX_MESSAGE_LENGTH} characters)")
    return sanitized.strip()


class GitRepository:
    """Thin wrapper over the git commands the convention workflow needs."""

    def __init__(self, path: str | None = None):
        self.path = path
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        cmd = ['git', *args]
        if self.path:
            cmd = ['git', '-C', self.path, *args]
        logger.debug("Running %s", ' '.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def root(self) -> str:
        return self._run_git('rev-parse', '--show-toplevel').strip()

    def has_commits(self) -> bool:
        try:
            self._run_git('rev-parse', '--verify', 'HEAD')
            return True
        except GitError:
            return False

    def head_message(self) -> str:
        return self._run_git('log', '-1', '--format=%B').strip()

    def head_timestamp(self) -> datetime:
        """Commit time of HEAD as an aware datetime."""
        output = self._run_git('log', '-1', '--format=%cI').strip()
        try:
            return datetime.fromisoformat(output)
        except ValueError:
            raise GitError(f"Unexpected commit date from git: {output!r}")

    def recent_subjects(self, limit: int = 100) -> list[str]:
        if not self.has_commits():
            return []
        output = self._run_git('log', f'-n{limit}', '--format=%s')
        return [line for line in output.split('\n') if line.strip()]

    def latest_version(self, rule_set: RuleSet, limit: int = 100) -> SemanticVersion | None:
        """Highest version found in recent convention-style subjects."""
        versions = []
        for subject in self.recent_subjects(limit):
            parsed = parse_commit_message(subject, rule_set)
            if parsed.version is not None:
                versions.append(parsed.version)
        return max(versions) if versions else None

    def latest_tag(self) -> str | None:
        """Nearest tag reachable from HEAD, None when there is none."""
        try:
            tag = self._run_git('describe', '--tags', '--abbrev=0').strip()
        except GitError:
            return None
        return tag or None

    def tagged_version(self) -> SemanticVersion | None:
        tag = self.latest_tag()
        if tag is None:
            return None
        try:
            return parse_version(tag)
        except MalformedVersion:
            logger.debug("Latest tag %s is not a version, ignoring it", tag)
            return None

    def subjects_since(self, ref: str | None = None) -> list[str]:
        """Subjects of commits after ref (all of HEAD when ref is None), newest first."""
        if not self.has_commits():
            return []
        revision = f'{ref}..HEAD' if ref else 'HEAD'
        output = self._run_git('log', revision, '--format=%s')
        return [line for line in output.split('\n') if line.strip()]

    def tag_exists(self, name: str) -> bool:
        return self._run_git('tag', '--list', name).strip() == name

    def create_tag(self, name: str, message: str) -> str:
        """Create an annotated tag on HEAD."""
        if self.tag_exists(name):
            raise GitError(f"Tag {name} already exists")
        return self._run_git('tag', '-a', name, '-m', message)

    def commit(self, message: str) -> str:
        return self._run_git('commit', '-m', sanitize_commit_message(message))

    def amend(self, message: str) -> str:
        return self._run_git('commit', '--amend', '-m', sanitize_commit_message(message))
