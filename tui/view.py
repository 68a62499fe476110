"""
Renderer Module

render() turns the application state into one frame of styled text. It
reads the state and the theme only: it never mutates state and never
performs I/O. Styling is cosmetic; the plain text carries all content.
"""

import os
from typing import List, Sequence, Tuple

from rich.text import Text

from config import settings
from services.twitter_service import status_url
from tui.state import SMART_MENU_ITEMS, AppState, Screen
from tui.theme import DARK, Theme
from tui.widgets import TextInput
from utils.helpers import count_characters, truncate_text

CURSOR = "▌"
TAGLINE = "Share your work with the world"

HelpItems = Sequence[Tuple[str, str]]


def render(state: AppState, theme: Theme = DARK) -> Text:
    """
    Render the active screen.

    Args:
        state: Application state (read only)
        theme: Palette resolved at startup

    Returns:
        Text: The frame
    """
    if _too_small(state):
        return _render_too_small(state, theme)

    out = Text()
    out.append("shippost", theme.title)
    out.append("  ")
    out.append(TAGLINE, theme.tagline)
    out.append("\n\n")

    _SCREEN_RENDERERS[state.screen](out, state, theme)
    return out


def _too_small(state: AppState) -> bool:
    if state.height and state.height < settings.MIN_TERMINAL_HEIGHT:
        return True
    return bool(state.width) and state.width < settings.MIN_TERMINAL_WIDTH


def _render_too_small(state: AppState, theme: Theme) -> Text:
    out = Text()
    out.append("shippost", theme.title)
    out.append("\n\n")
    out.append("Terminal too small", theme.warning)
    out.append("\n\n")
    out.append(f"Please resize to at least {settings.MIN_TERMINAL_WIDTH}×{settings.MIN_TERMINAL_HEIGHT}", theme.dim)
    out.append("\n")
    out.append(f"Current size: {state.width}×{state.height}", theme.dim)
    return out


# =============================================================================
# Shared pieces
# =============================================================================

def _help_bar(out: Text, theme: Theme, items: HelpItems) -> None:
    out.append("\n")
    out.append("─" * settings.EDITOR_WIDTH, theme.dim)
    out.append("\n")
    for i, (key, label) in enumerate(items):
        if i:
            out.append("   ")
        out.append(f" {key} ", theme.help_key)
        out.append(" ")
        out.append(label, theme.help_text)


def _status_line(out: Text, state: AppState, theme: Theme) -> None:
    if state.status:
        out.append("● " + state.status, theme.status)
        out.append("\n")
    if state.error:
        out.append("✗ " + state.error, theme.error)
        out.append("\n")


def _box_width(state: AppState) -> int:
    if state.width:
        return max(10, min(settings.EDITOR_WIDTH, state.width - 4))
    return settings.EDITOR_WIDTH


def _wrap(text: str, width: int) -> List[str]:
    lines = []
    for raw in text.split("\n"):
        if not raw:
            lines.append("")
            continue
        while len(raw) > width:
            lines.append(raw[:width])
            raw = raw[width:]
        lines.append(raw)
    return lines


def _box(out: Text, theme: Theme, content: str, width: int, active: bool,
         min_height: int = 1, placeholder: str = "") -> None:
    border = theme.active_box if active else theme.box
    style = None
    if not content.replace(CURSOR, "") and placeholder and not active:
        content, style = placeholder, theme.placeholder

    lines = _wrap(content, width)
    while len(lines) < min_height:
        lines.append("")

    out.append("╭" + "─" * (width + 2) + "╮", border)
    out.append("\n")
    for line in lines:
        out.append("│ ", border)
        out.append(line.ljust(width), style)
        out.append(" │", border)
        out.append("\n")
    out.append("╰" + "─" * (width + 2) + "╯", border)
    out.append("\n")


def _input_box(out: Text, state: AppState, theme: Theme, field: TextInput, active: bool) -> None:
    content = field.display(CURSOR) if active else field.value
    _box(out, theme, content, _box_width(state), active, placeholder=field.placeholder)


def _thread_toggle(out: Text, state: AppState, theme: Theme) -> None:
    on, off = ("● ", "○ ") if state.allow_thread else ("○ ", "● ")
    out.append(on, theme.selected if state.allow_thread else theme.dim)
    out.append("Allow threads", theme.menu_item if state.allow_thread else theme.dim)
    out.append(" (default)", theme.dim)
    out.append("\n")
    out.append(off, theme.dim if state.allow_thread else theme.selected)
    out.append("Single post only", theme.dim if state.allow_thread else theme.menu_item)
    out.append("\n\n")


def _menu(out: Text, theme: Theme, items, cursor: int) -> None:
    for i, item in enumerate(items):
        enabled = getattr(item, "enabled", True)
        if i == cursor:
            out.append("▸ ", theme.bullet)
            out.append(item.title, theme.selected if enabled else theme.disabled)
            out.append("\n")
            out.append("    " + item.description, theme.selected_desc if enabled else theme.disabled)
        else:
            out.append("  ")
            out.append(item.title, theme.menu_item if enabled else theme.disabled)
            out.append("\n")
            out.append("    " + item.description, theme.menu_desc if enabled else theme.disabled)
        out.append("\n\n")


# =============================================================================
# Screens
# =============================================================================

def _render_home(out: Text, state: AppState, theme: Theme) -> None:
    _menu(out, theme, state.menu_items, state.menu_cursor)
    _status_line(out, state, theme)
    _help_bar(out, theme, [("↑↓", "navigate"), ("enter", "select"), ("q", "quit")])


def _render_smart_menu(out: Text, state: AppState, theme: Theme) -> None:
    out.append("Smart Post", theme.subtitle)
    out.append("\n\n")
    _menu(out, theme, SMART_MENU_ITEMS, state.smart_menu_cursor)
    _status_line(out, state, theme)
    _help_bar(out, theme, [("↑↓", "navigate"), ("enter", "select"), ("esc", "back")])


def _render_ask_input(out: Text, state: AppState, theme: Theme) -> None:
    out.append("Smart Post", theme.subtitle)
    out.append("  ")
    out.append(" Ask ", theme.ai_tag)
    out.append("\n\n")
    out.append("What would you like to post about?", theme.dim)
    out.append("\n\n")
    _input_box(out, state, theme, state.query, active=True)
    out.append("\n")
    _status_line(out, state, theme)
    _thread_toggle(out, state, theme)

    out.append("Examples:\n", theme.dim)
    out.append("  • What did I accomplish today?\n", theme.dim)
    out.append("  • What good practices am I using?\n", theme.dim)
    out.append("  • Summarize my recent refactoring work\n", theme.dim)
    _help_bar(out, theme, [("enter", "generate"), ("ctrl+t", "single/thread"), ("esc", "back")])


def _render_commit_browser(out: Text, state: AppState, theme: Theme) -> None:
    out.append("Smart Post", theme.subtitle)
    out.append("  ")
    out.append("Select commits to post about", theme.dim)
    out.append("\n\n")

    if state.search_active:
        out.append("/", theme.dim)
        out.append(state.search.display(CURSOR), theme.selected)
        out.append("\n\n")
    elif state.search.value:
        out.append("/", theme.dim)
        out.append(state.search.value, theme.menu_item)
        out.append(f"  ({len(state.filtered)} matches)", theme.dim)
        out.append("\n\n")

    _status_line(out, state, theme)
    if state.commits_loading:
        pass
    elif not state.commits:
        if not state.error:
            out.append("No commits found in this repository", theme.dim)
            out.append("\n")
    elif not state.filtered:
        out.append("No matching commits", theme.dim)
        out.append("\n")
    else:
        _commit_rows(out, state, theme)

        if state.selected:
            out.append("\n")
            out.append(f"{len(state.selected)} commit(s) selected", theme.dim)
            out.append("\n")

        out.append("\n")
        out.append("Prompt ", theme.input_label)
        out.append("(optional)", theme.dim)
        out.append("\n")
        _input_box(out, state, theme, state.hint, active=state.hint_active)

    out.append("\n")
    _thread_toggle(out, state, theme)

    search_help = "clear" if state.search.value and not state.search_active else "search"
    _help_bar(out, theme, [
        ("↑↓", "navigate"),
        ("space", "select"),
        ("a", "all"),
        ("/", search_help),
        ("tab", "prompt"),
        ("ctrl+t", "single/thread"),
        ("enter", "generate"),
        ("esc", "back"),
    ])


def _commit_rows(out: Text, state: AppState, theme: Theme) -> None:
    start = state.commit_scroll
    end = min(start + state.visible_rows, len(state.filtered))

    if start > 0:
        out.append(f"  ↑ {start} more above\n", theme.dim)

    for row in range(start, end):
        commit = state.commits[state.filtered[row]]
        is_cursor = row == state.commit_cursor
        if is_cursor:
            out.append("▸ ", theme.bullet)
        else:
            out.append("  ")
        if state.filtered[row] in state.selected:
            out.append("● ", theme.selected)
        else:
            out.append("○ ", theme.dim)
        out.append(f"{commit.ago:<12} ", theme.commit_time)
        out.append(
            truncate_text(commit.subject, settings.SUBJECT_TRUNCATE_LENGTH),
            theme.selected if is_cursor else theme.menu_item,
        )
        out.append("\n")

    remaining = len(state.filtered) - end
    if remaining > 0:
        out.append(f"  ↓ {remaining} more below\n", theme.dim)


def _render_generating(out: Text, state: AppState, theme: Theme) -> None:
    out.append("Smart Post", theme.subtitle)
    out.append("\n\n")
    out.append("● " + (state.status or "Generating..."), theme.status)
    out.append("\n\n")
    out.append("Claude is writing your post...", theme.dim)
    out.append("\n")


def _render_compose(out: Text, state: AppState, theme: Theme) -> None:
    posting = state.screen == Screen.POSTING
    multi = len(state.thread) > 1

    if state.is_ai_draft:
        out.append("Smart Post", theme.subtitle)
        out.append("  ")
        out.append(" AI ", theme.ai_tag)
    else:
        out.append("Quick Post", theme.subtitle)
    if multi:
        out.append("  ")
        out.append(f" THREAD {state.current_post + 1}/{len(state.thread)} ", theme.thread_num)
    if state.reply_to:
        out.append("  ")
        out.append(f"continuing thread after {len(state.partial_posts)} posted", theme.dim)
    out.append("\n")

    if multi:
        out.append("\n")
        for i in range(len(state.thread)):
            out.append("●" if i == state.current_post else "○",
                       theme.selected if i == state.current_post else theme.dim)
            if i < len(state.thread) - 1:
                out.append("─", theme.dim)
        out.append("\n")
    out.append("\n")

    content = state.editor.value if posting else state.editor.display(CURSOR)
    _box(out, theme, content, _box_width(state), active=not posting,
         min_height=settings.EDITOR_HEIGHT, placeholder=state.editor.placeholder)

    _char_count(out, state, theme)
    for attachment in state.current_item.media:
        out.append("  ")
        out.append(f" 📎 {os.path.basename(attachment.path)} ", theme.media_tag)
    out.append("\n")
    _status_line(out, state, theme)

    if multi and not state.is_ai_draft:
        _thread_preview(out, state, theme)

    if not posting:
        _help_bar(out, theme, _compose_help(state))


def _char_count(out: Text, state: AppState, theme: Theme) -> None:
    count = count_characters(state.editor.value)
    style = theme.help_text
    if count > settings.CHARACTER_WARNING_THRESHOLD:
        style = theme.warning
    if count > settings.POST_CHARACTER_LIMIT:
        style = theme.error
    out.append(str(count), style)
    out.append(f"/{settings.POST_CHARACTER_LIMIT}", theme.help_text)


def _thread_preview(out: Text, state: AppState, theme: Theme) -> None:
    out.append("\n")
    out.append("Thread:", theme.dim)
    out.append("\n")
    for i, item in enumerate(state.thread):
        focused = i == state.current_post
        preview = state.editor.value if focused else item.text
        preview = truncate_text(preview.replace("\n", " "), settings.THREAD_PREVIEW_LENGTH) or "(empty)"
        style = theme.selected if focused else theme.dim
        out.append("▸ " if focused else "  ", style)
        out.append(f"{i + 1}. {preview}", style)
        if item.media:
            out.append(f" [{len(item.media)} media]", theme.dim)
        out.append("\n")


def _compose_help(state: AppState) -> List[Tuple[str, str]]:
    items = [("ctrl+s", "send")]
    if state.is_ai_draft:
        items.append(("ctrl+r", "regen"))
    items.append(("ctrl+o", "attach"))
    items.append(("ctrl+n", "add"))
    if state.current_item.media:
        items.append(("ctrl+x", "remove media"))
    if len(state.thread) > 1:
        items.append(("ctrl+d", "delete"))
        items.append(("ctrl+↑↓", "nav"))
    items.append(("esc", "back"))
    return items


def _render_media_input(out: Text, state: AppState, theme: Theme) -> None:
    out.append("Attach Image", theme.subtitle)
    out.append("\n\n")
    out.append("File path:", theme.input_label)
    out.append("\n")
    _input_box(out, state, theme, state.path_input, active=not state.uploading)
    extensions = " ".join(settings.ALLOWED_IMAGE_EXTENSIONS)
    out.append(f"Supports: {extensions} • Use ~/path for home", theme.dim)
    out.append("\n")
    _status_line(out, state, theme)
    _help_bar(out, theme, [("enter", "upload"), ("esc", "cancel")])


def _render_posted(out: Text, state: AppState, theme: Theme) -> None:
    if len(state.posted) > 1:
        out.append(f"✓ Thread posted! ({len(state.posted)} posts)", theme.status)
    else:
        out.append("✓ Posted successfully!", theme.status)
    out.append("\n\n")

    for i, post in enumerate(state.posted):
        if len(state.posted) > 1:
            out.append(f"{i + 1}. ", theme.dim)
        out.append(status_url(post.id), theme.url)
        out.append("\n")

    _help_bar(out, theme, [("n", "new post"), ("q", "quit")])


_SCREEN_RENDERERS = {
    Screen.HOME: _render_home,
    Screen.SMART_MENU: _render_smart_menu,
    Screen.ASK_INPUT: _render_ask_input,
    Screen.COMMIT_BROWSER: _render_commit_browser,
    Screen.GENERATING: _render_generating,
    Screen.COMPOSE: _render_compose,
    Screen.MEDIA_INPUT: _render_media_input,
    Screen.POSTING: _render_compose,
    Screen.POSTED: _render_posted,
}
