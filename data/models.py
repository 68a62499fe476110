"""
Data Models for shippost

This module contains data classes and models used throughout the application:
commits read from git, the editable thread, and published post records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Commit:
    """A single commit from the working tree's history."""
    hash: str                          # Short hash
    subject: str                       # First line of the message
    author: str
    timestamp: Optional[datetime]
    ago: str                           # Relative age label, e.g. "3 days ago"
    body: str = ""                     # Rest of the message, trimmed


@dataclass(frozen=True)
class MediaAttachment:
    """An uploaded image attached to a post."""
    media_id: str                      # Remote media identifier
    path: str                          # Local source path, for display


@dataclass
class PostItem:
    """One post of the thread being composed."""
    text: str = ""
    media: List[MediaAttachment] = field(default_factory=list)

    @property
    def media_ids(self) -> List[str]:
        return [m.media_id for m in self.media]

    def has_content(self) -> bool:
        return bool(self.text.strip()) or bool(self.media)


@dataclass(frozen=True)
class PublishedPost:
    """A post accepted by the remote API."""
    id: str
    text: str


@dataclass(frozen=True)
class DraftRequest:
    """What to ask the Draft Generator for.

    Either ``commits`` are the user's selection, or ``query`` is set and
    ``commits`` is the full recent history.
    """
    commits: List[Commit]
    style_hint: str = ""
    allow_thread: bool = True
    query: Optional[str] = None

    @property
    def is_query(self) -> bool:
        return self.query is not None
