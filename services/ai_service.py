"""
AI Service Module

This module drafts X posts with the Claude Code command line tool.
It builds the prompt from commits or a free-text request, runs the external
oracle, and splits its answer into one or more posts.
"""

import re
import shutil
import subprocess
from typing import Callable, List, Optional, Sequence

from config import settings
from data.models import Commit
from services.protocols import CommitSource
from utils.exceptions import (
    EmptyQueryError, NoCommitsError, OracleError, OracleUnavailableError, ShippostError
)
from utils.logger import get_logger

logger = get_logger(__name__)

THREAD_SEPARATOR = "---"
_separator_line = re.compile(r'^[ \t]*---[ \t]*$', re.MULTILINE)
_QUOTES = "\"'"


def parse_thread_response(output: str) -> List[str]:
    """
    Split the oracle's answer into posts.

    Posts are separated by a line holding only ``---``. Whitespace and
    surrounding quotes are trimmed from the whole answer and from each post.
    If nothing is left after splitting, the trimmed answer is returned as the
    single post (which is the empty string for an all-blank answer).

    Args:
        output: Raw text printed by the oracle

    Returns:
        List[str]: At least one post
    """
    output = output.strip().strip(_QUOTES).strip()

    posts = []
    for part in _separator_line.split(output):
        post = part.strip().strip(_QUOTES).strip()
        if post:
            posts.append(post)

    if not posts:
        return [output]
    return posts


def _prompt_rules(allow_thread: bool) -> str:
    limit = settings.POST_CHARACTER_LIMIT
    lines = [
        "CRITICAL RULES:",
        f"- EACH post MUST be UNDER {limit} characters - this is a hard limit, count carefully!",
        f"- NEVER cut off in the middle of a word - if you're close to {limit}, end the sentence earlier",
    ]
    if allow_thread:
        lines.append(
            f"- If the content is rich enough, write a thread "
            f"({settings.THREAD_MIN_POSTS}-{settings.THREAD_MAX_POSTS} posts)"
        )
        lines.append("- If a single post works, that's fine too")
    else:
        lines.append("- Write exactly ONE post, not a thread")
    lines.extend([
        "- Be concise and highlight what was accomplished",
        "- Don't use hashtags unless really relevant",
        "- Sound natural, not promotional",
    ])
    return "\n".join(lines) + "\n\n"


def _output_format(allow_thread: bool) -> str:
    if allow_thread:
        return (
            f"Write only the post text. If writing a thread, separate posts with a line "
            f"containing only {THREAD_SEPARATOR}\n"
            "Example thread format:\n"
            f"First post here\n{THREAD_SEPARATOR}\nSecond post here\n{THREAD_SEPARATOR}\nThird post here\n\n"
            "Output:"
        )
    return "Write only the post text (one post, no thread).\n\nOutput:"


def build_commit_prompt(commits: Sequence[Commit], style_hint: str = "", allow_thread: bool = True) -> str:
    """
    Build the prompt for drafting from selected commits.

    Args:
        commits: Commits the user selected
        style_hint: Optional user guidance
        allow_thread: Whether a thread may be written

    Returns:
        str: The prompt text
    """
    prompt = "Based on the following git commit(s), write an engaging post for X (formerly Twitter).\n\n"
    prompt += _prompt_rules(allow_thread)

    if style_hint.strip():
        prompt += f"User's guidance: {style_hint.strip()}\n\n"

    for i, commit in enumerate(commits, start=1):
        prompt += f"Commit {i}:\n"
        prompt += f"  Message: {commit.subject}\n"
        if commit.body:
            prompt += f"  Details: {commit.body}\n"
        prompt += f"  When: {commit.ago}\n\n"

    prompt += _output_format(allow_thread)
    return prompt


class AIService:
    """Service for drafting posts through the external Claude CLI."""

    def __init__(
        self,
        command: Optional[str] = None,
        timeout: Optional[int] = None,
        commit_source: Optional[CommitSource] = None,
        runner: Callable = subprocess.run,
    ):
        """
        Initialize the AI service.

        Args:
            command: Oracle executable name or path (defaults to settings.ORACLE_COMMAND)
            timeout: Seconds to wait for the oracle (defaults to settings.ORACLE_TIMEOUT)
            commit_source: Used to fetch diff summaries for query prompts
            runner: subprocess.run compatible callable, replaceable in tests
        """
        self.command = command or settings.ORACLE_COMMAND
        self.timeout = timeout or settings.ORACLE_TIMEOUT
        self.commit_source = commit_source
        self._run = runner

    def is_available(self) -> bool:
        """Check whether the oracle executable is on PATH."""
        return shutil.which(self.command) is not None

    def draft_from_commits(
        self,
        commits: Sequence[Commit],
        style_hint: str = "",
        allow_thread: bool = True
    ) -> List[str]:
        """
        Draft a post (or thread) about the selected commits.

        Args:
            commits: Commits to write about
            style_hint: Optional user guidance
            allow_thread: Whether a thread may be returned

        Returns:
            List[str]: The drafted posts

        Raises:
            NoCommitsError: If no commits are given
            OracleUnavailableError: If the oracle cannot be found
            OracleError: If the oracle fails
        """
        if not commits:
            raise NoCommitsError("No commits provided")

        prompt = build_commit_prompt(commits, style_hint, allow_thread)
        logger.info(f"Drafting from {len(commits)} commit(s), threads {'allowed' if allow_thread else 'off'}")
        return self._run_oracle(prompt)

    def draft_from_query(
        self,
        query: str,
        commits: Sequence[Commit],
        allow_thread: bool = True
    ) -> List[str]:
        """
        Draft a post (or thread) answering a free-text request about recent work.

        Args:
            query: The user's request
            commits: Recent history; the first settings.QUERY_COMMIT_LIMIT are used
            allow_thread: Whether a thread may be returned

        Returns:
            List[str]: The drafted posts

        Raises:
            EmptyQueryError: If the query is blank
            OracleUnavailableError: If the oracle cannot be found
            OracleError: If the oracle fails
        """
        if not query or not query.strip():
            raise EmptyQueryError()

        prompt = self.build_query_prompt(query.strip(), commits, allow_thread)
        logger.info(f"Drafting from query over {min(len(commits), settings.QUERY_COMMIT_LIMIT)} commit(s)")
        return self._run_oracle(prompt)

    def build_query_prompt(self, query: str, commits: Sequence[Commit], allow_thread: bool = True) -> str:
        """Build the prompt for a free-text request, including per-commit diffs."""
        prompt = "You are helping a developer write an engaging X (Twitter) post about their coding work.\n\n"
        prompt += f"Their question/request: {query}\n\n"
        prompt += "Here are their recent git commits with diffs:\n\n"

        for commit in list(commits)[:settings.QUERY_COMMIT_LIMIT]:
            prompt += f"--- Commit: {commit.subject} ({commit.ago}) ---\n"
            diff = self._diff_summary(commit)
            if diff:
                prompt += diff
            prompt += "\n"

        prompt += "\n"
        prompt += _prompt_rules(allow_thread)
        prompt += _output_format(allow_thread)
        return prompt

    def _diff_summary(self, commit: Commit) -> str:
        if self.commit_source is None:
            return ""
        try:
            return self.commit_source.get_diff_summary(commit.hash)
        except ShippostError as e:
            logger.debug(f"Skipping diff for {commit.hash}: {e}")
            return ""

    def _run_oracle(self, prompt: str) -> List[str]:
        try:
            result = self._run(
                [self.command, "-p", prompt],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            logger.error(f"Oracle command not found: {self.command}")
            raise OracleUnavailableError(
                f"{self.command} CLI not found - install Claude Code first"
            ) from e
        except subprocess.TimeoutExpired as e:
            logger.error(f"Oracle timed out after {self.timeout}s")
            raise OracleError(f"timed out after {self.timeout}s") from e
        except OSError as e:
            logger.error(f"Failed to run oracle: {e}")
            raise OracleError(str(e)) from e

        if result.returncode != 0:
            diagnostic = (result.stderr or "").strip() or f"exit status {result.returncode}"
            logger.error(f"Oracle failed: {diagnostic}")
            raise OracleError(diagnostic)

        posts = parse_thread_response(result.stdout or "")
        logger.info(f"Oracle returned {len(posts)} post(s)")
        return posts
