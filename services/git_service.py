"""
Git Service Module

This module reads the working tree's history through the git command line.
It provides the recent commits shown in the commit browser and the per-commit
change summaries used when building AI prompts.
"""

import re
import subprocess
from datetime import datetime
from typing import Callable, List, Optional

from config import settings
from data.models import Commit
from utils.exceptions import (
    CommitLoadError, InvalidCommitHashError, NoCommitsError, NotARepositoryError
)
from utils.logger import get_logger

logger = get_logger(__name__)

# Unit and record separators keep multi-line commit bodies intact
FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
LOG_FORMAT = "%H%x1f%s%x1f%b%x1f%an%x1f%at%x1e"

_valid_hash = re.compile(settings.COMMIT_HASH_PATTERN)


def is_valid_commit_hash(commit_hash: str) -> bool:
    """Return True if the string is a 7-40 character hex object name."""
    return bool(commit_hash) and bool(_valid_hash.match(commit_hash))


def time_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format a timestamp as a short relative age.

    Args:
        timestamp: When the commit was made
        now: Reference time (defaults to the current time)

    Returns:
        str: e.g. "just now", "1 min ago", "3 days ago", "2 weeks ago"
    """
    if timestamp is None:
        return ""

    now = now or datetime.now(timestamp.tzinfo)
    seconds = (now - timestamp).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        mins = int(seconds // 60)
        return "1 min ago" if mins == 1 else f"{mins} mins ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    if seconds < 7 * 86400:
        days = int(seconds // 86400)
        return "1 day ago" if days == 1 else f"{days} days ago"
    weeks = int(seconds // (7 * 86400))
    return "1 week ago" if weeks == 1 else f"{weeks} weeks ago"


class GitService:
    """Service for reading commits from the current git working tree."""

    def __init__(self, cwd: Optional[str] = None, runner: Callable = subprocess.run):
        """
        Initialize the git service.

        Args:
            cwd: Directory to run git in (defaults to the process working directory)
            runner: subprocess.run compatible callable, replaceable in tests
        """
        self.cwd = cwd
        self._run = runner

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        return self._run(
            ["git", *args],
            cwd=self.cwd,
            capture_output=True,
            text=True,
            check=False,
        )

    def is_repository(self) -> bool:
        """
        Check whether the working directory is inside a git repository.

        Returns:
            bool: False when git is not installed or the directory is not tracked.
        """
        try:
            result = self._git("rev-parse", "--git-dir")
        except OSError as e:
            logger.warning(f"git is not available: {e}")
            return False
        return result.returncode == 0

    def get_recent_commits(self, limit: int = settings.COMMIT_LOAD_LIMIT) -> List[Commit]:
        """
        Return the most recent non-merge commits, newest first.

        Args:
            limit: Maximum number of commits

        Returns:
            List[Commit]: The commits

        Raises:
            NotARepositoryError: If the directory is not a git repository
            NoCommitsError: If the history is empty
            CommitLoadError: If git log fails for another reason
        """
        if not self.is_repository():
            raise NotARepositoryError()

        try:
            result = self._git("log", f"-{limit}", f"--format={LOG_FORMAT}", "--no-merges")
        except OSError as e:
            raise CommitLoadError(f"Failed to get commits: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if "does not have any commits" in stderr:
                raise NoCommitsError()
            raise CommitLoadError(f"Failed to get commits: {stderr or 'git log failed'}")

        commits = self._parse_log(result.stdout or "")
        if not commits:
            raise NoCommitsError()

        logger.info(f"Loaded {len(commits)} recent commits")
        return commits

    def _parse_log(self, output: str) -> List[Commit]:
        commits = []
        now = datetime.now()
        for record in output.split(RECORD_SEPARATOR):
            record = record.strip("\n")
            if not record.strip():
                continue

            parts = record.split(FIELD_SEPARATOR)
            if len(parts) < 5:
                logger.debug(f"Skipping malformed log record: {record[:40]!r}")
                continue

            full_hash, subject, body, author, unix_time = parts[:5]
            try:
                timestamp = datetime.fromtimestamp(int(unix_time.strip()))
            except ValueError:
                timestamp = None

            commits.append(Commit(
                hash=full_hash.strip()[:settings.SHORT_HASH_LENGTH],
                subject=subject,
                author=author,
                timestamp=timestamp,
                ago=time_ago(timestamp, now),
                body=body.strip(),
            ))
        return commits

    def get_diff_summary(self, commit_hash: str) -> str:
        """
        Return `git show --stat` output for one commit.

        The hash is validated before it reaches the command line so that user
        or repository data can never be read as an option.

        Args:
            commit_hash: 7-40 character hex object name

        Returns:
            str: The changed-file summary

        Raises:
            InvalidCommitHashError: If the hash is not hex
            CommitLoadError: If git show fails
        """
        if not is_valid_commit_hash(commit_hash):
            raise InvalidCommitHashError(f"Invalid commit hash: {commit_hash!r}")

        try:
            result = self._git("show", "--stat", "--no-color", commit_hash)
        except OSError as e:
            raise CommitLoadError(f"Failed to get diff: {e}") from e

        if result.returncode != 0:
            raise CommitLoadError(f"Failed to get diff: {(result.stderr or '').strip()}")
        return result.stdout
