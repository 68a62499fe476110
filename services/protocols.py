"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the services used by the
shippost terminal UI. These protocols enable loose coupling, dependency
injection, and easier testing.

Protocols defined:
- CommitSource: Interface for reading recent commits and diffs
- DraftGenerator: Interface for AI-drafted post text
- Publisher: Interface for posting to X
"""

from typing import List, Optional, Protocol, Sequence

from data.models import Commit, PostItem, PublishedPost


class CommitSource(Protocol):
    """Protocol defining the interface for source-control access.

    Implementations should provide methods for:
    - Probing whether the working directory is a repository
    - Listing recent commits in history order
    - Summarizing the files changed by one commit
    """

    def is_repository(self) -> bool:
        """Return True if the working directory is inside a repository."""
        ...

    def get_recent_commits(self, limit: int = 50) -> List[Commit]:
        """List the most recent commits, newest first.

        Args:
            limit: Maximum number of commits to return.

        Returns:
            Ordered list of Commit records.

        Raises:
            NotARepositoryError: If the directory is not under source control.
            NoCommitsError: If the history is empty.
        """
        ...

    def get_diff_summary(self, commit_hash: str) -> str:
        """Return the changed-file summary for one commit.

        Args:
            commit_hash: Hex object name; validated before use.

        Returns:
            The summary text.
        """
        ...


class DraftGenerator(Protocol):
    """Protocol defining the interface for AI-drafted posts.

    Both drafting methods return one string per post; a single-element list
    is a single post, more than one is a thread.
    """

    def is_available(self) -> bool:
        """Return True if the external oracle can be run."""
        ...

    def draft_from_commits(
        self,
        commits: Sequence[Commit],
        style_hint: str = "",
        allow_thread: bool = True
    ) -> List[str]:
        """Draft a post (or thread) about the given commits.

        Args:
            commits: Commits the user selected.
            style_hint: Optional guidance from the user.
            allow_thread: Whether a 2-4 post thread may be returned.

        Returns:
            The drafted segments.
        """
        ...

    def draft_from_query(
        self,
        query: str,
        commits: Sequence[Commit],
        allow_thread: bool = True
    ) -> List[str]:
        """Draft a post (or thread) answering a free-text request.

        Args:
            query: What the user wants to post about.
            commits: Recent history to draw from.
            allow_thread: Whether a 2-4 post thread may be returned.

        Returns:
            The drafted segments.
        """
        ...


class Publisher(Protocol):
    """Protocol defining the interface for posting to X."""

    def publish(
        self,
        text: str,
        media_ids: Optional[Sequence[str]] = None,
        reply_to: Optional[str] = None
    ) -> PublishedPost:
        """Publish one post, optionally with media and as a reply."""
        ...

    def upload_media(self, path: str) -> str:
        """Upload an image and return its media identifier."""
        ...

    def publish_thread(
        self,
        items: Sequence[PostItem],
        reply_to: Optional[str] = None
    ) -> List[PublishedPost]:
        """Publish posts in order, each replying to the previous one."""
        ...
