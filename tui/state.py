"""
Application State Module

This module holds the single mutable state of the terminal UI: which screen
is active, the commit browser's list/filter/selection/scroll, the thread
being composed, and the status and error lines shown to the user.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from data.models import Commit, DraftRequest, PostItem, PublishedPost
from tui.helpers import filter_commits, visible_commit_rows
from tui.widgets import TextArea, TextInput


class Screen(Enum):
    """The active screen. Exactly one is shown at a time."""
    HOME = "home"
    SMART_MENU = "smart_menu"
    ASK_INPUT = "ask_input"
    COMMIT_BROWSER = "commit_browser"
    GENERATING = "generating"
    COMPOSE = "compose"
    MEDIA_INPUT = "media_input"
    POSTING = "posting"
    POSTED = "posted"


class MenuAction(Enum):
    QUICK_POST = "quick_post"
    SMART_POST = "smart_post"
    BROWSE_COMMITS = "browse_commits"
    ASK = "ask"


@dataclass(frozen=True)
class MenuItem:
    """One entry of a menu; disabled entries explain why in their description."""
    title: str
    description: str
    action: MenuAction
    enabled: bool = True


@dataclass(frozen=True)
class Capabilities:
    """Environment probes evaluated once at startup."""
    oracle_available: bool = False
    in_repository: bool = False

    @property
    def smart_post_available(self) -> bool:
        return self.oracle_available and self.in_repository

    def smart_post_unavailable_reason(self) -> str:
        if not self.oracle_available:
            return "Requires Claude Code CLI (claude) on your PATH"
        if not self.in_repository:
            return "Run from inside a git repository to use commits"
        return ""


SMART_MENU_ITEMS = [
    MenuItem("Browse Commits", "Pick specific commits to post about", MenuAction.BROWSE_COMMITS),
    MenuItem("Ask", "Describe what you want to post about", MenuAction.ASK),
]


def build_menu_items(capabilities: Capabilities) -> List[MenuItem]:
    """
    Build the home menu for the detected environment.

    Args:
        capabilities: Result of the startup probes

    Returns:
        List[MenuItem]: Quick Post, then Smart Post (disabled with a reason if unavailable)
    """
    items = [MenuItem("Quick Post", "Write and publish a post", MenuAction.QUICK_POST)]
    if capabilities.smart_post_available:
        items.append(MenuItem("Smart Post", "Let Claude draft a post from your commits", MenuAction.SMART_POST))
    else:
        items.append(MenuItem(
            "Smart Post",
            capabilities.smart_post_unavailable_reason(),
            MenuAction.SMART_POST,
            enabled=False,
        ))
    return items


@dataclass
class AppState:
    """Everything the update function mutates and the renderer reads."""

    menu_items: List[MenuItem] = field(default_factory=list)
    screen: Screen = Screen.HOME
    menu_cursor: int = 0
    smart_menu_cursor: int = 0
    width: int = 0
    height: int = 0
    status: str = ""
    error: str = ""
    should_quit: bool = False

    # Commit browser
    commits: List[Commit] = field(default_factory=list)
    commits_loading: bool = False
    filtered: List[int] = field(default_factory=list)
    commit_cursor: int = 0               # Position within filtered
    commit_scroll: int = 0
    selected: List[int] = field(default_factory=list)   # Indices into commits
    search: TextInput = field(default_factory=lambda: TextInput(placeholder="search"))
    search_active: bool = False
    hint: TextInput = field(default_factory=lambda: TextInput(placeholder="e.g. focus on the performance win"))
    hint_active: bool = False
    allow_thread: bool = True

    # Ask
    query: TextInput = field(default_factory=lambda: TextInput(placeholder="What did I accomplish today?"))

    # Generation
    last_draft: Optional[DraftRequest] = None
    generate_origin: Screen = Screen.SMART_MENU

    # Composer
    editor: TextArea = field(default_factory=lambda: TextArea(placeholder="What are you shipping?"))
    thread: List[PostItem] = field(default_factory=lambda: [PostItem()])
    current_post: int = 0
    is_ai_draft: bool = False

    # Media
    path_input: TextInput = field(default_factory=lambda: TextInput(placeholder="~/Pictures/screenshot.png"))
    uploading: bool = False

    # Publishing
    reply_to: Optional[str] = None
    partial_posts: List[PublishedPost] = field(default_factory=list)
    posted: List[PublishedPost] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Thread buffer synchronization
    # -------------------------------------------------------------------------

    def write_back(self) -> None:
        """Copy the live editor text into the focused thread item."""
        self.thread[self.current_post].text = self.editor.value

    def load_current(self) -> None:
        """Load the focused thread item's text into the editor."""
        self.editor.set_value(self.thread[self.current_post].text)

    def focus_post(self, index: int) -> None:
        """Write back the current item, then focus another one."""
        self.write_back()
        self.current_post = max(0, min(index, len(self.thread) - 1))
        self.load_current()

    def start_compose(self, texts: List[str], is_ai_draft: bool) -> None:
        """Replace the thread with one item per text and focus the first."""
        self.thread = [PostItem(text=t) for t in texts] or [PostItem()]
        self.current_post = 0
        self.is_ai_draft = is_ai_draft
        self.load_current()

    @property
    def current_item(self) -> PostItem:
        return self.thread[self.current_post]

    # -------------------------------------------------------------------------
    # Resets
    # -------------------------------------------------------------------------

    def clear_messages(self) -> None:
        self.status = ""
        self.error = ""

    def reset_commit_browser(self) -> None:
        self.commits = []
        self.commits_loading = False
        self.filtered = []
        self.commit_cursor = 0
        self.commit_scroll = 0
        self.selected = []
        self.search.reset()
        self.search_active = False
        self.hint.reset()
        self.hint_active = False

    def reset_composition(self) -> None:
        """Drop the thread and everything tied to publishing it."""
        self.thread = [PostItem()]
        self.current_post = 0
        self.editor.reset()
        self.is_ai_draft = False
        self.last_draft = None
        self.path_input.reset()
        self.uploading = False
        self.reply_to = None
        self.partial_posts = []

    def reset_all(self) -> None:
        """Return to a fresh Home screen."""
        self.reset_composition()
        self.reset_commit_browser()
        self.query.reset()
        self.posted = []
        self.allow_thread = True
        self.clear_messages()
        self.screen = Screen.HOME

    # -------------------------------------------------------------------------
    # Commit browser
    # -------------------------------------------------------------------------

    @property
    def visible_rows(self) -> int:
        return visible_commit_rows(self.height)

    def refilter(self) -> None:
        """Recompute the filtered view and put the cursor back at the top."""
        self.filtered = filter_commits(self.commits, self.search.value)
        self.commit_cursor = 0
        self.commit_scroll = 0

    def selected_commits(self) -> List[Commit]:
        """Selected commits in history order."""
        return [self.commits[i] for i in sorted(self.selected) if 0 <= i < len(self.commits)]

    def cursor_commit_index(self) -> Optional[int]:
        if 0 <= self.commit_cursor < len(self.filtered):
            return self.filtered[self.commit_cursor]
        return None


def create_state(capabilities: Capabilities, width: int = 0, height: int = 0) -> AppState:
    """Create the initial state for a session."""
    return AppState(
        menu_items=build_menu_items(capabilities),
        width=width,
        height=height,
    )

