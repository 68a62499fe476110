"""
Tests for TUI Helpers - Filtering, Scrolling and Selection

Tests cover the commit filter, the auto-scroll window invariants for every
single-step cursor move, and selection toggling.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tui.helpers import (
    filter_commits, scroll_window, toggle_select_all, toggle_selection, visible_commit_rows
)


# =============================================================================
# Filter Tests
# =============================================================================

class TestFilterCommits:
    """Tests for filter_commits."""

    def test_fix_matches_items_one_and_three(self, sample_commits):
        """Case-insensitive match keeps history order."""
        assert filter_commits(sample_commits, "fix") == [1, 3]

    def test_empty_search_is_identity(self, sample_commits):
        assert filter_commits(sample_commits, "") == [0, 1, 2, 3, 4]

    def test_no_match(self, sample_commits):
        assert filter_commits(sample_commits, "zzz") == []

    def test_empty_commit_list(self):
        assert filter_commits([], "fix") == []

    @pytest.mark.parametrize("search", ["a", "R", "re", "bump", "  ", "the commit"])
    def test_result_is_ascending_subsequence(self, sample_commits, search):
        result = filter_commits(sample_commits, search)

        assert result == sorted(set(result))
        assert all(0 <= i < len(sample_commits) for i in result)

    def test_idempotent(self, sample_commits):
        assert filter_commits(sample_commits, "fix") == filter_commits(sample_commits, "fix")


# =============================================================================
# Scroll Tests
# =============================================================================

class TestScrollWindow:
    """Tests for scroll_window."""

    def test_no_move_inside_window(self):
        assert scroll_window(cursor=5, start=3, size=5, count=20) == 3

    def test_moves_down_minimally(self):
        assert scroll_window(cursor=8, start=3, size=5, count=20) == 4

    def test_moves_up_minimally(self):
        assert scroll_window(cursor=2, start=3, size=5, count=20) == 2

    def test_short_list_stays_at_zero(self):
        assert scroll_window(cursor=2, start=0, size=10, count=3) == 0

    def test_clamped_when_list_shrinks(self):
        assert scroll_window(cursor=0, start=7, size=5, count=0) == 0

    @pytest.mark.parametrize("count", [0, 1, 4, 5, 6, 17])
    @pytest.mark.parametrize("size", [1, 3, 5])
    def test_invariants_for_single_steps(self, count, size):
        """Every single-step move from a valid window keeps the cursor visible."""
        for cursor in range(max(count, 1)):
            max_start = max(0, count - size)
            for start in range(max(0, cursor - size + 1), min(cursor, max_start) + 1):
                for step in (-1, 1):
                    new_cursor = min(max(cursor + step, 0), max(count - 1, 0))
                    new_start = scroll_window(new_cursor, start, size, count)

                    assert 0 <= new_start <= max_start
                    if count:
                        assert new_start <= new_cursor <= new_start + size - 1


# =============================================================================
# Selection Tests
# =============================================================================

class TestSelection:
    """Tests for selection toggling."""

    def test_toggle_twice_restores(self):
        selected = [2]
        toggle_selection(selected, 4)
        toggle_selection(selected, 4)
        assert selected == [2]

    def test_toggle_removes_existing(self):
        selected = [1, 3]
        toggle_selection(selected, 1)
        assert selected == [3]

    def test_select_all_then_clear(self):
        selected = []
        toggle_select_all(selected, [1, 3])
        assert selected == [1, 3]
        toggle_select_all(selected, [1, 3])
        assert selected == []

    def test_select_all_from_partial(self):
        selected = [3]
        toggle_select_all(selected, [1, 3])
        assert selected == [1, 3]

    def test_select_all_empty_filter(self):
        selected = [2]
        toggle_select_all(selected, [])
        assert selected == []


class TestVisibleCommitRows:
    def test_unknown_height_uses_default(self):
        assert visible_commit_rows(0) == 10

    def test_small_terminal_minimum(self):
        assert visible_commit_rows(20) == 3

    def test_tall_terminal(self):
        assert visible_commit_rows(40) == 22
