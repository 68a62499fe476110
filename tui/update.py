"""
Screen State Machine Module

update() is the only place the application state changes. It receives one
event at a time (a key press, a resize, or a background task completion),
mutates the state for the active screen, and returns at most one task to
run in the background. It never blocks and never performs I/O.
"""

import os
from typing import Optional

from config import settings
from data.models import DraftRequest, PostItem
from services.twitter_service import validate_post_text
from tui.commands import (
    CommitsLoaded, DraftGenerated, GenerateDraft, LoadCommits, MediaUploaded,
    PostsPublished, PublishThread, Resize, UploadMedia
)
from tui.helpers import scroll_window, toggle_select_all, toggle_selection
from tui.keys import KeyEvent
from tui.state import SMART_MENU_ITEMS, AppState, MenuAction, Screen
from utils.exceptions import (
    EmptyQueryError, EmptyTextError, MediaLimitError, ThreadLimitError,
    UnsupportedMediaTypeError, ValidationError
)
from utils.helpers import media_extension, normalize_media_path
from utils.logger import get_logger

logger = get_logger(__name__)

UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")
PREV_POST_KEYS = ("ctrl+up", "ctrl+left")
NEXT_POST_KEYS = ("ctrl+down", "ctrl+right")


def update(state: AppState, event) -> Optional[object]:
    """
    Apply one event to the state.

    Args:
        state: The application state, mutated in place
        event: KeyEvent, Resize, or a task completion event

    Returns:
        The background task to launch, or None
    """
    if isinstance(event, Resize):
        return _on_resize(state, event)
    if isinstance(event, CommitsLoaded):
        return _on_commits_loaded(state, event)
    if isinstance(event, DraftGenerated):
        return _on_draft_generated(state, event)
    if isinstance(event, MediaUploaded):
        return _on_media_uploaded(state, event)
    if isinstance(event, PostsPublished):
        return _on_posts_published(state, event)
    if isinstance(event, KeyEvent):
        if event.key == "ctrl+c":
            state.should_quit = True
            return None
        return _KEY_HANDLERS[state.screen](state, event)

    logger.debug(f"Ignoring unknown event {event!r}")
    return None


# =============================================================================
# Layout
# =============================================================================

def _on_resize(state: AppState, event: Resize):
    state.width = event.width
    state.height = event.height
    state.commit_scroll = scroll_window(
        state.commit_cursor, state.commit_scroll, state.visible_rows, len(state.filtered)
    )
    return None


# =============================================================================
# Home and Smart Post menus
# =============================================================================

def _move(cursor: int, delta: int, count: int) -> int:
    if count == 0:
        return 0
    return max(0, min(cursor + delta, count - 1))


def _home_keys(state: AppState, event: KeyEvent):
    key = event.key
    if key in ("q", "esc"):
        state.should_quit = True
    elif key in UP_KEYS:
        state.menu_cursor = _move(state.menu_cursor, -1, len(state.menu_items))
        state.error = ""
    elif key in DOWN_KEYS:
        state.menu_cursor = _move(state.menu_cursor, 1, len(state.menu_items))
        state.error = ""
    elif key == "enter" and state.menu_items:
        item = state.menu_items[state.menu_cursor]
        if not item.enabled:
            state.error = f"{item.title} unavailable: {item.description}"
            return None
        state.clear_messages()
        if item.action == MenuAction.QUICK_POST:
            state.reset_composition()
            state.start_compose([""], is_ai_draft=False)
            state.screen = Screen.COMPOSE
        elif item.action == MenuAction.SMART_POST:
            state.smart_menu_cursor = 0
            state.screen = Screen.SMART_MENU
    return None


def _smart_menu_keys(state: AppState, event: KeyEvent):
    key = event.key
    if key in ("esc", "q"):
        state.clear_messages()
        state.screen = Screen.HOME
    elif key in UP_KEYS:
        state.smart_menu_cursor = _move(state.smart_menu_cursor, -1, len(SMART_MENU_ITEMS))
    elif key in DOWN_KEYS:
        state.smart_menu_cursor = _move(state.smart_menu_cursor, 1, len(SMART_MENU_ITEMS))
    elif key == "enter":
        action = SMART_MENU_ITEMS[state.smart_menu_cursor].action
        state.clear_messages()
        state.reset_commit_browser()
        if action == MenuAction.BROWSE_COMMITS:
            state.screen = Screen.COMMIT_BROWSER
        else:
            state.query.reset()
            state.screen = Screen.ASK_INPUT
        state.commits_loading = True
        state.status = "Loading commits..."
        return LoadCommits()
    return None


def _on_commits_loaded(state: AppState, event: CommitsLoaded):
    if state.screen not in (Screen.COMMIT_BROWSER, Screen.ASK_INPUT) or not state.commits_loading:
        logger.debug("Dropping stale commit list")
        return None

    state.commits_loading = False
    state.status = ""
    if event.error is not None:
        state.commits = []
        state.filtered = []
        state.error = str(event.error)
        return None

    state.commits = list(event.commits)
    state.selected = []
    state.refilter()
    return None


# =============================================================================
# Ask
# =============================================================================

def _ask_input_keys(state: AppState, event: KeyEvent):
    key = event.key
    if key == "esc":
        state.clear_messages()
        state.commits_loading = False
        state.screen = Screen.SMART_MENU
        return None
    if key == "ctrl+t":
        state.allow_thread = not state.allow_thread
        return None
    if key == "enter":
        query = state.query.value.strip()
        if not query:
            state.error = str(EmptyQueryError())
            return None
        if state.commits_loading:
            state.error = "Still loading commits, try again in a moment"
            return None
        request = DraftRequest(
            commits=list(state.commits),
            allow_thread=state.allow_thread,
            query=query,
        )
        return _start_generation(state, request, Screen.ASK_INPUT, "Asking Claude...")

    if state.query.handle_key(event):
        state.error = ""
    return None


# =============================================================================
# Commit browser
# =============================================================================

def _commit_browser_keys(state: AppState, event: KeyEvent):
    state.error = ""
    if state.search_active:
        return _search_keys(state, event)
    if state.hint_active:
        return _hint_keys(state, event)

    key = event.key
    if key in ("esc", "q"):
        state.clear_messages()
        state.reset_commit_browser()
        state.screen = Screen.SMART_MENU
    elif key == "ctrl+t":
        state.allow_thread = not state.allow_thread
    elif key == "tab":
        state.hint_active = True
    elif not state.commits:
        return None
    elif key in UP_KEYS:
        _move_commit_cursor(state, -1)
    elif key in DOWN_KEYS:
        _move_commit_cursor(state, 1)
    elif key == "/":
        state.search_active = True
    elif key == "space":
        index = state.cursor_commit_index()
        if index is not None:
            toggle_selection(state.selected, index)
    elif key == "a":
        toggle_select_all(state.selected, state.filtered)
    elif key == "enter":
        return _submit_commits(state)
    return None


def _move_commit_cursor(state: AppState, delta: int) -> None:
    state.commit_cursor = _move(state.commit_cursor, delta, len(state.filtered))
    state.commit_scroll = scroll_window(
        state.commit_cursor, state.commit_scroll, state.visible_rows, len(state.filtered)
    )


def _search_keys(state: AppState, event: KeyEvent):
    key = event.key
    if key == "esc":
        state.search.reset()
        state.search_active = False
        state.refilter()
    elif key == "enter":
        state.search_active = False
    elif key in ("up", "down"):
        _move_commit_cursor(state, -1 if key == "up" else 1)
    else:
        before = state.search.value
        state.search.handle_key(event)
        if state.search.value != before:
            state.refilter()
    return None


def _hint_keys(state: AppState, event: KeyEvent):
    key = event.key
    if key in ("tab", "esc"):
        state.hint_active = False
    elif key == "enter":
        return _submit_commits(state)
    elif key == "ctrl+t":
        state.allow_thread = not state.allow_thread
    else:
        state.hint.handle_key(event)
    return None


def _submit_commits(state: AppState):
    if state.commits_loading or not state.commits:
        return None
    if not state.selected:
        index = state.cursor_commit_index()
        if index is None:
            state.error = "No commits match the search"
            return None
        state.selected.append(index)

    request = DraftRequest(
        commits=state.selected_commits(),
        style_hint=state.hint.value.strip(),
        allow_thread=state.allow_thread,
    )
    return _start_generation(state, request, Screen.COMMIT_BROWSER, "Generating with Claude...")


# =============================================================================
# Generation
# =============================================================================

def _start_generation(state: AppState, request: DraftRequest, origin: Screen, status: str):
    state.last_draft = request
    state.generate_origin = origin
    state.error = ""
    state.status = status
    state.screen = Screen.GENERATING
    logger.info(f"Requesting draft ({'query' if request.is_query else f'{len(request.commits)} commits'})")
    return GenerateDraft(request)


def _generating_keys(state: AppState, event: KeyEvent):
    return None


def _on_draft_generated(state: AppState, event: DraftGenerated):
    if state.screen != Screen.GENERATING:
        return None

    state.status = ""
    if event.error is not None:
        state.error = str(event.error)
        state.screen = state.generate_origin
        return None

    state.error = ""
    # A regenerated draft still continues a partly published thread
    if state.generate_origin != Screen.COMPOSE:
        state.reply_to = None
        state.partial_posts = []
    state.start_compose(list(event.posts), is_ai_draft=True)
    state.screen = Screen.COMPOSE
    return None


# =============================================================================
# Composer
# =============================================================================

def _compose_keys(state: AppState, event: KeyEvent):
    key = event.key
    state.error = ""

    if key == "esc":
        back = Screen.SMART_MENU if state.is_ai_draft else Screen.HOME
        state.reset_composition()
        state.clear_messages()
        state.screen = back
    elif key == "ctrl+s":
        return _submit_thread(state)
    elif key == "ctrl+r":
        if state.is_ai_draft and state.last_draft is not None:
            state.write_back()
            return _start_generation(state, state.last_draft, Screen.COMPOSE, "Regenerating...")
    elif key == "ctrl+o":
        if len(state.current_item.media) >= settings.MAX_MEDIA_PER_POST:
            state.error = str(MediaLimitError(settings.MAX_MEDIA_PER_POST))
            return None
        state.write_back()
        state.path_input.reset()
        state.screen = Screen.MEDIA_INPUT
    elif key == "ctrl+n":
        if len(state.thread) >= settings.MAX_THREAD_ITEMS:
            state.error = str(ThreadLimitError(settings.MAX_THREAD_ITEMS))
            return None
        state.write_back()
        state.thread.append(PostItem())
        state.current_post = len(state.thread) - 1
        state.load_current()
    elif key == "ctrl+d":
        if len(state.thread) > 1:
            del state.thread[state.current_post]
            state.current_post = min(state.current_post, len(state.thread) - 1)
            state.load_current()
    elif key in PREV_POST_KEYS:
        state.focus_post(state.current_post - 1)
    elif key in NEXT_POST_KEYS:
        state.focus_post(state.current_post + 1)
    elif key == "ctrl+x":
        if state.current_item.media:
            state.current_item.media.pop()
    else:
        state.editor.handle_key(event)
    return None


def _submit_thread(state: AppState):
    state.write_back()

    items = [item for item in state.thread if item.has_content()]
    if not items:
        state.error = str(EmptyTextError())
        return None

    for i, item in enumerate(items):
        try:
            validate_post_text(item.text, has_media=bool(item.media))
        except ValidationError as e:
            state.current_post = next(j for j, other in enumerate(state.thread) if other is item)
            state.load_current()
            state.error = f"Post {i + 1}: {e}" if len(items) > 1 else str(e)
            return None

    # Blank items are dropped before sending so the thread matches what is published
    state.thread = items
    state.current_post = min(state.current_post, len(items) - 1)
    state.load_current()

    state.status = "Posting..." if len(items) == 1 else f"Posting thread ({len(items)} posts)..."
    state.screen = Screen.POSTING
    snapshot = tuple(PostItem(text=item.text, media=list(item.media)) for item in items)
    return PublishThread(items=snapshot, reply_to=state.reply_to)


# =============================================================================
# Media
# =============================================================================

def _media_input_keys(state: AppState, event: KeyEvent):
    if state.uploading:
        return None

    key = event.key
    if key == "esc":
        state.clear_messages()
        state.screen = Screen.COMPOSE
        return None
    if key != "enter":
        state.path_input.handle_key(event)
        return None

    path = normalize_media_path(state.path_input.value)
    if not path:
        state.clear_messages()
        state.screen = Screen.COMPOSE
        return None

    ext = media_extension(path)
    if ext not in settings.ALLOWED_IMAGE_EXTENSIONS:
        message = "Video upload not supported" if ext in settings.VIDEO_EXTENSIONS else None
        state.error = str(UnsupportedMediaTypeError(ext, message))
        state.screen = Screen.COMPOSE
        return None

    state.uploading = True
    state.error = ""
    state.status = f"Uploading {os.path.basename(path)}..."
    return UploadMedia(path=path, post_index=state.current_post)


def _on_media_uploaded(state: AppState, event: MediaUploaded):
    if not state.uploading:
        return None

    state.uploading = False
    state.status = ""
    if state.screen == Screen.MEDIA_INPUT:
        state.screen = Screen.COMPOSE

    if event.error is not None:
        state.error = str(event.error)
        return None

    if 0 <= event.post_index < len(state.thread):
        media = state.thread[event.post_index].media
        if len(media) < settings.MAX_MEDIA_PER_POST:
            media.append(event.attachment)
        else:
            state.error = str(MediaLimitError(settings.MAX_MEDIA_PER_POST))
    return None


# =============================================================================
# Posting
# =============================================================================

def _posting_keys(state: AppState, event: KeyEvent):
    return None


def _on_posts_published(state: AppState, event: PostsPublished):
    if state.screen != Screen.POSTING:
        return None

    state.status = ""
    published = list(event.posts)

    if event.error is None:
        state.posted = state.partial_posts + published
        state.partial_posts = []
        state.reply_to = None
        state.screen = Screen.POSTED
        logger.info(f"Published {len(published)} post(s)")
        return None

    # Published items are final: drop them from the thread and reply to the last one next time
    if published:
        state.partial_posts.extend(published)
        state.reply_to = published[-1].id
        state.thread = state.thread[len(published):] or [PostItem()]
        state.current_post = 0
        state.load_current()

    state.error = str(event.error)
    if state.partial_posts:
        state.error += f" ({len(state.partial_posts)} already posted, sending continues the thread)"
    state.screen = Screen.COMPOSE
    return None


def _posted_keys(state: AppState, event: KeyEvent):
    if event.key == "n":
        state.reset_all()
    else:
        state.should_quit = True
    return None


_KEY_HANDLERS = {
    Screen.HOME: _home_keys,
    Screen.SMART_MENU: _smart_menu_keys,
    Screen.ASK_INPUT: _ask_input_keys,
    Screen.COMMIT_BROWSER: _commit_browser_keys,
    Screen.GENERATING: _generating_keys,
    Screen.COMPOSE: _compose_keys,
    Screen.MEDIA_INPUT: _media_input_keys,
    Screen.POSTING: _posting_keys,
    Screen.POSTED: _posted_keys,
}
