"""
Shared Test Fixtures for shippost

This module provides common fixtures used across all test modules.
Fixtures include fake subprocess results, service mocks, and data
factories for commits, thread items and application state.
"""

import pytest
from unittest.mock import MagicMock
from datetime import datetime
from typing import List, Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import Commit, MediaAttachment, PostItem, PublishedPost
from services.ai_service import AIService
from services.git_service import GitService
from services.twitter_service import TwitterService
from tui.state import AppState, Capabilities, create_state


# =============================================================================
# Subprocess Fixtures
# =============================================================================

def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    """Build a fake subprocess.CompletedProcess."""
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


@pytest.fixture
def fake_runner():
    """
    A subprocess.run replacement that returns a successful empty result.

    Usage:
        def test_something(fake_runner):
            fake_runner.return_value = completed(stdout="...")
    """
    runner = MagicMock()
    runner.return_value = completed()
    return runner


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def mock_git_service():
    """Mock commit source with a working repository."""
    service = MagicMock(spec=GitService)
    service.is_repository.return_value = True
    service.get_recent_commits.return_value = []
    service.get_diff_summary.return_value = ""
    return service


@pytest.fixture
def mock_ai_service():
    """Mock draft generator that is installed."""
    service = MagicMock(spec=AIService)
    service.is_available.return_value = True
    service.draft_from_commits.return_value = ["Drafted post"]
    service.draft_from_query.return_value = ["Drafted post"]
    return service


@pytest.fixture
def mock_twitter_service():
    """Mock publisher that accepts everything."""
    service = MagicMock(spec=TwitterService)
    service.publish.return_value = PublishedPost(id="1001", text="posted")
    service.upload_media.return_value = "media-1"
    service.publish_thread.return_value = [PublishedPost(id="1001", text="posted")]
    return service


# =============================================================================
# Data Factories
# =============================================================================

@pytest.fixture
def commit_factory():
    """
    Factory fixture for creating Commit objects.

    Usage:
        def test_something(commit_factory):
            commit = commit_factory(subject="Fix the login bug")
    """
    counter = [0]

    def _create(
        subject: str = "Add feature",
        hash: Optional[str] = None,
        author: str = "Test Author",
        ago: str = "2 hours ago",
        body: str = ""
    ) -> Commit:
        counter[0] += 1
        return Commit(
            hash=hash or f"{counter[0]:07x}",
            subject=subject,
            author=author,
            timestamp=datetime(2024, 1, 15, 10, 30, 0),
            ago=ago,
            body=body,
        )

    return _create


@pytest.fixture
def sample_commits(commit_factory) -> List[Commit]:
    """Five commits, two of which mention "fix"."""
    return [
        commit_factory(subject="Add search to the commit browser"),
        commit_factory(subject="Fix crash when history is empty"),
        commit_factory(subject="Refactor prompt building"),
        commit_factory(subject="fix typo in README"),
        commit_factory(subject="Bump version"),
    ]


@pytest.fixture
def post_item_factory():
    """Factory fixture for thread items, optionally with attached media."""
    def _create(text: str = "Hello world", media_count: int = 0) -> PostItem:
        media = [MediaAttachment(media_id=f"m{i}", path=f"/tmp/image{i}.png") for i in range(media_count)]
        return PostItem(text=text, media=media)

    return _create


@pytest.fixture
def app_state() -> AppState:
    """Fresh state with every capability available and a roomy terminal."""
    return create_state(Capabilities(oracle_available=True, in_repository=True), width=100, height=40)
