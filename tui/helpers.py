"""
TUI Helper Module

Pure helpers for the commit browser: substring filtering, the auto-scroll
window, selection toggling and the number of rows that fit on screen.
"""

from typing import List, Sequence

from config import settings
from data.models import Commit


def filter_commits(commits: Sequence[Commit], search: str) -> List[int]:
    """
    Return the indices of commits whose subject contains the search text.

    Matching is case-insensitive. An empty search returns every index.
    The result keeps the original commit order.

    Args:
        commits: The loaded commit list
        search: Text typed into the search field

    Returns:
        List[int]: Ascending indices into commits
    """
    if not search:
        return list(range(len(commits)))

    needle = search.lower()
    return [i for i, commit in enumerate(commits) if needle in commit.subject.lower()]


def scroll_window(cursor: int, start: int, size: int, count: int) -> int:
    """
    Return the window start that keeps the cursor visible.

    The window only moves when the cursor would fall outside it, and the
    result always lies in ``[0, max(0, count - size)]``.

    Args:
        cursor: Cursor position in the list
        start: Current first visible row
        size: Number of visible rows
        count: Number of rows in the list

    Returns:
        int: The new first visible row
    """
    size = max(1, size)
    if cursor < start:
        start = cursor
    elif cursor >= start + size:
        start = cursor - size + 1

    max_start = max(0, count - size)
    return min(max(start, 0), max_start)


def toggle_selection(selected: List[int], index: int) -> None:
    """Add index to the selection, or remove it if already present."""
    if index in selected:
        selected.remove(index)
    else:
        selected.append(index)


def toggle_select_all(selected: List[int], filtered: Sequence[int]) -> None:
    """
    Select every filtered commit, or clear the selection if all are selected.

    Args:
        selected: Current selection (indices into the full commit list), updated in place
        filtered: Indices currently visible
    """
    if filtered and all(i in selected for i in filtered):
        selected.clear()
    else:
        selected[:] = list(filtered)


def visible_commit_rows(height: int) -> int:
    """Return how many commit rows fit in a terminal of the given height."""
    if height <= 0:
        return settings.DEFAULT_VISIBLE_COMMITS
    return max(settings.MIN_VISIBLE_COMMITS, height - settings.COMMIT_BROWSER_CHROME_ROWS)
