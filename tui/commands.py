"""
Background Task Module

Tasks are plain descriptions of blocking work (load commits, draft a post,
upload an image, publish a thread). The update function returns them without
running them; TaskRunner executes one off the UI loop and turns the outcome
into a completion event that is fed back into the same event queue.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config import settings
from data.models import Commit, DraftRequest, MediaAttachment, PostItem, PublishedPost
from services.protocols import CommitSource, DraftGenerator, Publisher
from utils.exceptions import ShippostError, TaskFailureError, ThreadPostError
from utils.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# Tasks
# =============================================================================

@dataclass(frozen=True)
class LoadCommits:
    limit: int = settings.COMMIT_LOAD_LIMIT


@dataclass(frozen=True)
class GenerateDraft:
    request: DraftRequest


@dataclass(frozen=True)
class UploadMedia:
    path: str
    post_index: int


@dataclass(frozen=True)
class PublishThread:
    items: Tuple[PostItem, ...]
    reply_to: Optional[str] = None


# =============================================================================
# Completion events
# =============================================================================

@dataclass(frozen=True)
class CommitsLoaded:
    commits: List[Commit] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass(frozen=True)
class DraftGenerated:
    posts: List[str] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass(frozen=True)
class MediaUploaded:
    post_index: int
    attachment: Optional[MediaAttachment] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PostsPublished:
    posts: List[PublishedPost] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


class TaskRunner:
    """Executes tasks against the three service adapters."""

    def __init__(self, commit_source: CommitSource, generator: DraftGenerator, publisher: Publisher):
        self.commit_source = commit_source
        self.generator = generator
        self.publisher = publisher

    def execute(self, task):
        """
        Run a task to completion and return its completion event.

        Failures are returned inside the event rather than raised, so the
        caller can always hand the result to the update function.

        Args:
            task: One of LoadCommits, GenerateDraft, UploadMedia, PublishThread

        Returns:
            The matching completion event
        """
        if isinstance(task, LoadCommits):
            return self._guard(lambda: CommitsLoaded(commits=self.commit_source.get_recent_commits(task.limit)),
                               lambda e: CommitsLoaded(error=e))
        if isinstance(task, GenerateDraft):
            return self._guard(lambda: DraftGenerated(posts=self._draft(task.request)),
                               lambda e: DraftGenerated(error=e))
        if isinstance(task, UploadMedia):
            return self._guard(
                lambda: MediaUploaded(
                    post_index=task.post_index,
                    attachment=MediaAttachment(self.publisher.upload_media(task.path), task.path),
                ),
                lambda e: MediaUploaded(post_index=task.post_index, error=e),
            )
        if isinstance(task, PublishThread):
            return self._publish(task)
        raise TypeError(f"Unknown task: {task!r}")

    def _draft(self, request: DraftRequest) -> List[str]:
        if request.is_query:
            return self.generator.draft_from_query(request.query, request.commits, request.allow_thread)
        return self.generator.draft_from_commits(request.commits, request.style_hint, request.allow_thread)

    def _publish(self, task: PublishThread) -> PostsPublished:
        try:
            posts = self.publisher.publish_thread(list(task.items), reply_to=task.reply_to)
        except ThreadPostError as e:
            return PostsPublished(posts=list(e.posted), error=e)
        except ShippostError as e:
            return PostsPublished(error=e)
        except Exception as e:
            logger.error(f"Unexpected error while posting: {e}", exc_info=True)
            return PostsPublished(error=TaskFailureError(str(e)))
        return PostsPublished(posts=posts)

    def _guard(self, work, on_error):
        try:
            return work()
        except ShippostError as e:
            return on_error(e)
        except Exception as e:
            logger.error(f"Unexpected error in background task: {e}", exc_info=True)
            return on_error(TaskFailureError(str(e)))
