"""
Tests for the Screen State Machine

Tests drive update() with key presses and task completion events and check
the resulting screen, state and issued background task. No task is ever
executed here; completions are fed in by hand.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import MediaAttachment, PostItem, PublishedPost
from tui.commands import (
    CommitsLoaded, DraftGenerated, GenerateDraft, LoadCommits, MediaUploaded,
    PostsPublished, PublishThread, Resize, UploadMedia
)
from tui.keys import KeyEvent
from tui.state import Capabilities, Screen, create_state
from tui.update import update
from tui.view import render
from utils.exceptions import (
    MediaUploadError, NoCommitsError, OracleError, RemoteError, ThreadPostError
)


def press(state, *keys):
    """Send key names (or single characters) and return the last task."""
    task = None
    for key in keys:
        event = KeyEvent.char(key) if len(key) == 1 else KeyEvent(key)
        task = update(state, event)
    return task


def type_text(state, text):
    for ch in text:
        update(state, KeyEvent.char(ch))


def open_compose(state):
    press(state, "enter")
    assert state.screen == Screen.COMPOSE


def open_browser(state, commits):
    press(state, "down", "enter")
    assert state.screen == Screen.SMART_MENU
    task = press(state, "enter")
    assert isinstance(task, LoadCommits)
    update(state, CommitsLoaded(commits=commits))
    return task


# =============================================================================
# Home Tests
# =============================================================================

class TestHome:
    """Tests for the home menu."""

    def test_quick_post_opens_composer(self, app_state):
        open_compose(app_state)
        assert app_state.is_ai_draft is False
        assert len(app_state.thread) == 1

    def test_smart_post_disabled_without_oracle(self):
        state = create_state(Capabilities(oracle_available=False, in_repository=True), 100, 40)

        press(state, "down", "enter")

        assert state.screen == Screen.HOME
        assert "Claude Code" in state.error

    def test_smart_post_disabled_outside_repository(self):
        state = create_state(Capabilities(oracle_available=True, in_repository=False), 100, 40)

        assert state.menu_items[1].enabled is False
        assert "git repository" in state.menu_items[1].description

    def test_quit_keys(self, app_state):
        press(app_state, "q")
        assert app_state.should_quit

    def test_ctrl_c_quits_anywhere(self, app_state):
        open_compose(app_state)
        press(app_state, "ctrl+c")
        assert app_state.should_quit

    def test_cursor_clamped(self, app_state):
        press(app_state, "up", "up", "down", "down", "down")
        assert app_state.menu_cursor == 1


# =============================================================================
# Commit Browser Tests
# =============================================================================

class TestCommitBrowser:
    """Tests for browsing, searching and selecting commits."""

    def test_loading_status_then_list(self, app_state, sample_commits):
        press(app_state, "down", "enter")
        press(app_state, "enter")

        assert app_state.screen == Screen.COMMIT_BROWSER
        assert app_state.status == "Loading commits..."

        update(app_state, CommitsLoaded(commits=sample_commits))

        assert app_state.status == ""
        assert app_state.filtered == [0, 1, 2, 3, 4]

    def test_load_failure_shows_error(self, app_state):
        press(app_state, "down", "enter", "enter")
        update(app_state, CommitsLoaded(error=NoCommitsError()))

        assert app_state.screen == Screen.COMMIT_BROWSER
        assert app_state.error == "No commits found"

    def test_search_filters_and_resets_cursor(self, app_state, sample_commits):
        """Searching "fix" over five commits keeps [1, 3] and puts the cursor on original index 1."""
        open_browser(app_state, sample_commits)
        press(app_state, "down", "down")

        press(app_state, "/")
        type_text(app_state, "fix")

        assert app_state.filtered == [1, 3]
        assert app_state.commit_cursor == 0
        assert app_state.commit_scroll == 0
        assert app_state.cursor_commit_index() == 1

    def test_search_enter_keeps_filter_esc_clears(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "/")
        type_text(app_state, "fix")
        press(app_state, "enter")

        assert app_state.search_active is False
        assert app_state.filtered == [1, 3]

        press(app_state, "/", "esc")
        assert app_state.filtered == [0, 1, 2, 3, 4]

    def test_space_toggles_selection(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "down", "space")
        assert app_state.selected == [1]

        press(app_state, "space")
        assert app_state.selected == []

    def test_select_all_over_filtered(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "/")
        type_text(app_state, "fix")
        press(app_state, "enter", "a")
        assert sorted(app_state.selected) == [1, 3]

        press(app_state, "a")
        assert app_state.selected == []

    def test_selection_survives_filter_change(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "space")
        press(app_state, "/")
        type_text(app_state, "fix")

        assert app_state.selected == [0]

    def test_enter_with_empty_selection_uses_cursor(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "down", "down")

        task = press(app_state, "enter")

        assert isinstance(task, GenerateDraft)
        assert task.request.commits == [sample_commits[2]]
        assert task.request.allow_thread is True
        assert app_state.screen == Screen.GENERATING

    def test_hint_and_thread_toggle_passed(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "space", "ctrl+t", "tab")
        type_text(app_state, "be brief")
        task = press(app_state, "enter")

        assert task.request.style_hint == "be brief"
        assert task.request.allow_thread is False

    def test_hint_focus_captures_navigation_letters(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "tab")
        type_text(app_state, "jk a/")

        assert app_state.hint.value == "jk a/"
        assert app_state.commit_cursor == 0
        assert app_state.selected == []

    def test_cursor_scrolls_window(self, app_state, commit_factory):
        commits = [commit_factory(subject=f"Commit {i}") for i in range(40)]
        app_state.height = 21            # three visible rows
        open_browser(app_state, commits)

        press(app_state, "down", "down", "down", "down")

        assert app_state.commit_cursor == 4
        assert app_state.commit_scroll == 2

        press(app_state, "up", "up", "up")
        assert app_state.commit_scroll == 1

    def test_resize_keeps_cursor_visible(self, app_state, commit_factory):
        commits = [commit_factory(subject=f"Commit {i}") for i in range(40)]
        open_browser(app_state, commits)
        for _ in range(15):
            press(app_state, "down")

        update(app_state, Resize(80, 21))

        assert app_state.commit_scroll <= app_state.commit_cursor < app_state.commit_scroll + 3

    def test_stale_load_ignored(self, app_state, sample_commits):
        press(app_state, "down", "enter", "enter", "esc")
        update(app_state, CommitsLoaded(commits=sample_commits))

        assert app_state.screen == Screen.SMART_MENU
        assert app_state.commits == []


# =============================================================================
# Ask Tests
# =============================================================================

class TestAskInput:
    """Tests for the free-text query screen."""

    def enter_ask(self, state, commits):
        press(state, "down", "enter", "down", "enter")
        assert state.screen == Screen.ASK_INPUT
        update(state, CommitsLoaded(commits=commits))

    def test_empty_query_rejected(self, app_state, sample_commits):
        self.enter_ask(app_state, sample_commits)

        task = press(app_state, "enter")

        assert task is None
        assert app_state.screen == Screen.ASK_INPUT
        assert app_state.error == "Query cannot be empty"

    def test_query_submits_full_commit_list(self, app_state, sample_commits):
        self.enter_ask(app_state, sample_commits)
        type_text(app_state, "What did I fix?")

        task = press(app_state, "enter")

        assert task.request.query == "What did I fix?"
        assert task.request.commits == sample_commits
        assert app_state.screen == Screen.GENERATING

    def test_failure_returns_to_ask(self, app_state, sample_commits):
        self.enter_ask(app_state, sample_commits)
        type_text(app_state, "Summarize")
        press(app_state, "enter")

        update(app_state, DraftGenerated(error=OracleError("boom")))

        assert app_state.screen == Screen.ASK_INPUT
        assert app_state.error == "Claude error: boom"
        assert app_state.query.value == "Summarize"


# =============================================================================
# Generation Tests
# =============================================================================

class TestGeneration:
    """Tests for the Generating screen and its completion."""

    def test_success_populates_thread(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "enter")

        update(app_state, DraftGenerated(posts=["One", "Two", "Three"]))

        assert app_state.screen == Screen.COMPOSE
        assert app_state.is_ai_draft is True
        assert [item.text for item in app_state.thread] == ["One", "Two", "Three"]
        assert app_state.editor.value == "One"

    def test_failure_returns_to_browser(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "space", "enter")

        update(app_state, DraftGenerated(error=OracleError("quota")))

        assert app_state.screen == Screen.COMMIT_BROWSER
        assert "quota" in app_state.error
        assert app_state.selected == [0]

    def test_browser_usable_after_failure(self, app_state, sample_commits):
        """The next key dismisses the error so the list can be edited and resubmitted."""
        open_browser(app_state, sample_commits)
        press(app_state, "space", "enter")
        update(app_state, DraftGenerated(error=OracleError("quota")))

        press(app_state, "down", "space", "up")

        assert app_state.error == ""
        assert app_state.selected == [0, 1]
        assert sample_commits[0].subject in render(app_state).plain

        task = press(app_state, "enter")
        assert task.request.commits == sample_commits[:2]

    def test_keys_ignored_while_generating(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "enter")

        assert press(app_state, "esc") is None
        assert app_state.screen == Screen.GENERATING

    def test_regenerate_failure_keeps_thread(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "enter")
        update(app_state, DraftGenerated(posts=["Draft"]))
        type_text(app_state, " edited")

        task = press(app_state, "ctrl+r")
        assert isinstance(task, GenerateDraft)
        assert app_state.screen == Screen.GENERATING

        update(app_state, DraftGenerated(error=OracleError("down")))

        assert app_state.screen == Screen.COMPOSE
        assert app_state.thread[0].text == "Draft edited"

    def test_regenerate_not_available_for_quick_post(self, app_state):
        open_compose(app_state)
        assert press(app_state, "ctrl+r") is None
        assert app_state.screen == Screen.COMPOSE

    def test_esc_on_ai_draft_returns_to_smart_menu(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "enter")
        update(app_state, DraftGenerated(posts=["Draft"]))

        press(app_state, "esc")

        assert app_state.screen == Screen.SMART_MENU
        assert [item.text for item in app_state.thread] == [""]


# =============================================================================
# Composer Tests
# =============================================================================

class TestCompose:
    """Tests for thread editing in the composer."""

    def test_write_back_across_navigation(self, app_state):
        """Item 0's edits survive moving to item 1 and back."""
        open_compose(app_state)
        type_text(app_state, "first post")
        press(app_state, "ctrl+n")
        type_text(app_state, "second")

        press(app_state, "ctrl+up")
        assert app_state.editor.value == "first post"

        press(app_state, "ctrl+down")
        assert app_state.editor.value == "second"

        press(app_state, "ctrl+up")
        assert app_state.thread[0].text == "first post"
        assert app_state.thread[1].text == "second"

    def test_add_focuses_new_item(self, app_state):
        open_compose(app_state)
        press(app_state, "ctrl+n")

        assert len(app_state.thread) == 2
        assert app_state.current_post == 1
        assert app_state.editor.value == ""

    def test_navigation_clamped(self, app_state):
        open_compose(app_state)
        press(app_state, "ctrl+up")
        assert app_state.current_post == 0

    def test_delete_only_with_more_than_one(self, app_state):
        open_compose(app_state)
        press(app_state, "ctrl+d")
        assert len(app_state.thread) == 1

        type_text(app_state, "keep")
        press(app_state, "ctrl+n")
        type_text(app_state, "drop")
        press(app_state, "ctrl+d")

        assert len(app_state.thread) == 1
        assert app_state.current_post == 0
        assert app_state.editor.value == "keep"

    def test_delete_middle_keeps_index(self, app_state):
        open_compose(app_state)
        type_text(app_state, "a")
        press(app_state, "ctrl+n")
        type_text(app_state, "b")
        press(app_state, "ctrl+n")
        type_text(app_state, "c")
        press(app_state, "ctrl+up", "ctrl+d")

        assert [item.text for item in app_state.thread] == ["a", "c"]
        assert app_state.current_post == 1
        assert app_state.editor.value == "c"

    def test_ctrl_k_kills_line_in_editor(self, app_state):
        open_compose(app_state)
        type_text(app_state, "first")
        press(app_state, "ctrl+n")
        type_text(app_state, "second")
        press(app_state, "home", "ctrl+k")

        assert app_state.current_post == 1
        assert app_state.editor.value == ""
        assert app_state.thread[0].text == "first"

    def test_thread_cap(self, app_state):
        open_compose(app_state)
        for _ in range(30):
            press(app_state, "ctrl+n")

        assert len(app_state.thread) == 25
        assert "25" in app_state.error

    def test_remove_last_media(self, app_state):
        open_compose(app_state)
        app_state.thread[0].media.extend([MediaAttachment("m1", "/a.png"), MediaAttachment("m2", "/b.png")])

        press(app_state, "ctrl+x")

        assert [m.media_id for m in app_state.thread[0].media] == ["m1"]

    def test_esc_discards_quick_post(self, app_state):
        open_compose(app_state)
        type_text(app_state, "draft")
        press(app_state, "esc")

        assert app_state.screen == Screen.HOME
        assert app_state.editor.value == ""


# =============================================================================
# Media Tests
# =============================================================================

class TestMediaInput:
    """Tests for attaching images."""

    def open_media(self, state):
        open_compose(state)
        type_text(state, "with image")
        press(state, "ctrl+o")
        assert state.screen == Screen.MEDIA_INPUT

    def test_attach_writes_back_first(self, app_state):
        self.open_media(app_state)
        assert app_state.thread[0].text == "with image"

    def test_empty_path_cancels(self, app_state):
        self.open_media(app_state)
        task = press(app_state, "enter")

        assert task is None
        assert app_state.screen == Screen.COMPOSE
        assert app_state.editor.value == "with image"

    def test_unsupported_extension(self, app_state):
        self.open_media(app_state)
        type_text(app_state, "/tmp/notes.txt")

        task = press(app_state, "enter")

        assert task is None
        assert app_state.screen == Screen.COMPOSE
        assert "Unsupported" in app_state.error
        assert app_state.editor.value == "with image"

    def test_video_rejected(self, app_state):
        self.open_media(app_state)
        type_text(app_state, "/tmp/demo.mp4")
        press(app_state, "enter")

        assert app_state.error == "Video upload not supported"

    def test_upload_success_attaches(self, app_state):
        self.open_media(app_state)
        update(app_state, KeyEvent("paste", "/tmp/my\\ shot.PNG"))

        task = press(app_state, "enter")

        assert isinstance(task, UploadMedia)
        assert task.path == "/tmp/my shot.PNG"
        assert app_state.status.startswith("Uploading")

        update(app_state, MediaUploaded(post_index=0, attachment=MediaAttachment("m9", task.path)))

        assert app_state.screen == Screen.COMPOSE
        assert app_state.thread[0].media_ids == ["m9"]
        assert app_state.status == ""

    def test_upload_failure(self, app_state):
        self.open_media(app_state)
        type_text(app_state, "/tmp/a.jpg")
        press(app_state, "enter")

        update(app_state, MediaUploaded(post_index=0, error=MediaUploadError("too big")))

        assert app_state.screen == Screen.COMPOSE
        assert app_state.error == "too big"
        assert app_state.thread[0].media == []

    def test_media_cap(self, app_state):
        open_compose(app_state)
        app_state.thread[0].media.extend(MediaAttachment(f"m{i}", f"/{i}.png") for i in range(4))

        press(app_state, "ctrl+o")

        assert app_state.screen == Screen.COMPOSE
        assert "4" in app_state.error


# =============================================================================
# Posting Tests
# =============================================================================

class TestPosting:
    """Tests for publishing and the Posted screen."""

    def compose_thread(self, state, *texts):
        open_compose(state)
        for i, text in enumerate(texts):
            if i:
                press(state, "ctrl+n")
            type_text(state, text)

    def test_empty_thread_rejected(self, app_state):
        open_compose(app_state)
        task = press(app_state, "ctrl+s")

        assert task is None
        assert app_state.screen == Screen.COMPOSE
        assert app_state.error == "Post cannot be empty"

    def test_too_long_rejected_locally(self, app_state):
        open_compose(app_state)
        update(app_state, KeyEvent("paste", "x" * 281))

        assert press(app_state, "ctrl+s") is None
        assert "280" in app_state.error

    def test_blank_items_skipped(self, app_state):
        self.compose_thread(app_state, "one", "", "three")

        task = press(app_state, "ctrl+s")

        assert isinstance(task, PublishThread)
        assert [item.text for item in task.items] == ["one", "three"]
        assert task.reply_to is None
        assert app_state.screen == Screen.POSTING

    def test_success_goes_to_posted(self, app_state):
        self.compose_thread(app_state, "hello")
        press(app_state, "ctrl+s")

        update(app_state, PostsPublished(posts=[PublishedPost("42", "hello")]))

        assert app_state.screen == Screen.POSTED
        assert [p.id for p in app_state.posted] == ["42"]

    def test_failure_returns_to_composer_intact(self, app_state):
        self.compose_thread(app_state, "hello")
        press(app_state, "ctrl+s")

        update(app_state, PostsPublished(error=RemoteError("API error: duplicate content")))

        assert app_state.screen == Screen.COMPOSE
        assert app_state.error == "API error: duplicate content"
        assert app_state.editor.value == "hello"

    def test_partial_failure_continues_thread(self, app_state):
        self.compose_thread(app_state, "one", "two", "three")
        press(app_state, "ctrl+s")
        posted = [PublishedPost("1", "one"), PublishedPost("2", "two")]
        error = ThreadPostError(3, posted, RemoteError("API error: rate limited"))

        update(app_state, PostsPublished(posts=posted, error=error))

        assert app_state.screen == Screen.COMPOSE
        assert [item.text for item in app_state.thread] == ["three"]
        assert app_state.editor.value == "three"
        assert app_state.reply_to == "2"
        assert "thread item 3" in app_state.error

        task = press(app_state, "ctrl+s")
        assert task.reply_to == "2"

        update(app_state, PostsPublished(posts=[PublishedPost("3", "three")]))
        assert [p.id for p in app_state.posted] == ["1", "2", "3"]

    def test_regenerate_after_partial_failure_keeps_continuation(self, app_state, sample_commits):
        open_browser(app_state, sample_commits)
        press(app_state, "enter")
        update(app_state, DraftGenerated(posts=["One", "Two", "Three"]))
        press(app_state, "ctrl+s")
        posted = [PublishedPost("111", "One")]
        update(app_state, PostsPublished(
            posts=posted, error=ThreadPostError(2, posted, RemoteError("API error: rate limited"))
        ))

        press(app_state, "ctrl+r")
        update(app_state, DraftGenerated(posts=["New two", "New three"]))

        assert app_state.reply_to == "111"
        assert [p.id for p in app_state.partial_posts] == ["111"]

        task = press(app_state, "ctrl+s")
        assert task.reply_to == "111"

        update(app_state, PostsPublished(posts=[PublishedPost("222", "New two"), PublishedPost("333", "New three")]))
        assert [p.id for p in app_state.posted] == ["111", "222", "333"]

    def test_keys_ignored_while_posting(self, app_state):
        self.compose_thread(app_state, "hello")
        press(app_state, "ctrl+s")

        assert press(app_state, "esc") is None
        assert app_state.screen == Screen.POSTING

    def test_new_post_resets(self, app_state):
        self.compose_thread(app_state, "hello")
        press(app_state, "ctrl+s")
        update(app_state, PostsPublished(posts=[PublishedPost("42", "hello")]))

        press(app_state, "n")

        assert app_state.screen == Screen.HOME
        assert app_state.posted == []
        assert app_state.thread == [PostItem()]
        assert not app_state.should_quit

    def test_other_key_quits(self, app_state):
        self.compose_thread(app_state, "hello")
        press(app_state, "ctrl+s")
        update(app_state, PostsPublished(posts=[PublishedPost("42", "hello")]))

        press(app_state, "enter")

        assert app_state.should_quit
