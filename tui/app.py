"""
Terminal Runtime Module

Runs the model-update-view loop. Key presses (read with prompt_toolkit in
raw mode), terminal resizes (SIGWINCH) and background task completions all
arrive on one asyncio queue and are applied by update() one at a time.
Blocking tasks run on a thread pool via run_in_executor; frames are drawn
with rich.live.Live on the alternate screen.
"""

import asyncio
import signal
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from prompt_toolkit.input import create_input
from rich.console import Console
from rich.live import Live

from tui.commands import Resize, TaskRunner
from tui.keys import from_key_press
from tui.state import AppState
from tui.theme import Theme, detect_theme
from tui.update import update
from tui.view import render
from utils.logger import get_logger

logger = get_logger(__name__)


class TerminalApp:
    """Owns the event queue, the input handle and the live display."""

    def __init__(
        self,
        state: AppState,
        runner: TaskRunner,
        theme: Optional[Theme] = None,
        console: Optional[Console] = None
    ):
        self.state = state
        self.runner = runner
        self.theme = theme or detect_theme()
        self.console = console or Console()
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._input = None

    # -------------------------------------------------------------------------
    # Event sources
    # -------------------------------------------------------------------------

    def _on_input_ready(self) -> None:
        """Called by prompt_toolkit on the loop thread when keys are available."""
        key_presses = list(self._input.read_keys())
        # Flush so a lone Escape is delivered without waiting for more bytes
        key_presses.extend(self._input.flush_keys())
        for key_press in key_presses:
            self._queue.put_nowait(from_key_press(key_press))

    def _on_resize(self) -> None:
        size = self.console.size
        self._queue.put_nowait(Resize(size.width, size.height))

    def _launch(self, task) -> None:
        logger.debug(f"Launching {type(task).__name__}")
        future = self._loop.run_in_executor(self._executor, self.runner.execute, task)
        future.add_done_callback(self._on_task_done)

    def _on_task_done(self, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        self._queue.put_nowait(future.result())

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """Process events until the state asks to quit."""
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="shippost-task")
        self._input = create_input()

        resize_handler_installed = False
        if hasattr(signal, "SIGWINCH"):
            try:
                self._loop.add_signal_handler(signal.SIGWINCH, self._on_resize)
                resize_handler_installed = True
            except (NotImplementedError, RuntimeError) as e:
                logger.debug(f"Resize signal unavailable: {e}")

        try:
            with self._input.raw_mode(), self._input.attach(self._on_input_ready):
                with Live(
                    render(self.state, self.theme),
                    console=self.console,
                    screen=True,
                    auto_refresh=False,
                    transient=True,
                ) as live:
                    self._on_resize()
                    while not self.state.should_quit:
                        event = await self._queue.get()
                        task = update(self.state, event)
                        if task is not None:
                            self._launch(task)
                        live.update(render(self.state, self.theme), refresh=True)
        finally:
            if resize_handler_installed:
                self._loop.remove_signal_handler(signal.SIGWINCH)
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._input.close()


def run_app(state: AppState, runner: TaskRunner, theme: Optional[Theme] = None) -> int:
    """
    Run the terminal UI until the user quits.

    Args:
        state: Initial application state
        runner: Executes background tasks
        theme: Palette (detected from the terminal when omitted)

    Returns:
        int: Process exit code
    """
    if not sys.stdin.isatty():
        logger.error("The interactive UI needs a terminal")
        print("shippost: the interactive UI needs a terminal (pass text to post directly)", file=sys.stderr)
        return 1

    app = TerminalApp(state, runner, theme)
    asyncio.run(app.run())
    logger.info("Terminal UI closed")
    return 0
