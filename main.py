"""
shippost

This is the main entry point for the shippost application.
It posts to X from the terminal: either a quick post straight from the
command line, or an interactive UI that can draft posts and threads from
the current repository's commits with Claude.

Version: 0.3.0
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from config import settings
from config.credentials import Credentials, cleanup_credentials, load_credentials, run_setup
from config.validators import get_config_summary, validate_settings
from data.models import PublishedPost
from services.ai_service import AIService
from services.git_service import GitService
from services.twitter_service import TwitterService, status_url
from tui.commands import TaskRunner
from tui.state import AppState, Capabilities, create_state
from utils.exceptions import ConfigurationError, ShippostError
from utils.helpers import ensure_dir_exists
from utils.logger import get_logger, setup_console_logging, setup_file_logging

logger = get_logger(__name__)


def probe_capabilities(git_service: GitService, ai_service: AIService) -> Capabilities:
    """Check once whether the oracle is installed and the cwd is a repository."""
    capabilities = Capabilities(
        oracle_available=ai_service.is_available(),
        in_repository=git_service.is_repository(),
    )
    logger.info(
        f"Capabilities: oracle={'yes' if capabilities.oracle_available else 'no'}, "
        f"repository={'yes' if capabilities.in_repository else 'no'}"
    )
    return capabilities


class Shippost:
    """
    Main application class for shippost.

    Wires the git, Claude and X services together for the quick-post
    command and the interactive UI.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        git_service: Optional[GitService] = None,
        ai_service: Optional[AIService] = None,
        twitter_service: Optional[TwitterService] = None,
        validate: bool = True
    ):
        """
        Initialize the application.

        Args:
            credentials: X API credentials (loaded from config when omitted)
            git_service: Injected commit source, for testing
            ai_service: Injected draft generator, for testing
            twitter_service: Injected publisher, for testing
            validate: Whether to validate settings on startup

        Raises:
            ConfigurationError: If settings are invalid or credentials are missing
        """
        if validate:
            validate_settings()

        if twitter_service is None:
            credentials = credentials or load_credentials()
            twitter_service = TwitterService(credentials)

        self.git_service = git_service or GitService()
        self.ai_service = ai_service or AIService(commit_source=self.git_service)
        self.twitter_service = twitter_service

    def quick_post(self, text: str) -> PublishedPost:
        """
        Publish a single post immediately.

        Args:
            text: The post text

        Returns:
            PublishedPost: The published post
        """
        return self.twitter_service.publish(text)

    def build_state(self) -> AppState:
        """Probe the environment and build the UI's initial state."""
        return create_state(probe_capabilities(self.git_service, self.ai_service))

    def build_runner(self) -> TaskRunner:
        return TaskRunner(self.git_service, self.ai_service, self.twitter_service)

    def run_tui(self) -> int:
        """Launch the interactive UI and block until the user quits."""
        # Imported here so the quick-post path never touches the terminal stack
        from tui.app import run_app

        return run_app(self.build_state(), self.build_runner())


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="shippost",
        description="Post to X from your terminal",
        epilog='Examples:\n  shippost                             Interactive mode\n'
               '  shippost "Just shipped a new feature!"',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('text', nargs='*', help='Post text; publishes immediately without the UI')
    parser.add_argument('--setup', action='store_true', help='Configure X API credentials')
    parser.add_argument('--cleanup', action='store_true', help='Remove stored credentials')
    parser.add_argument('--version', action='store_true', help='Show version')
    parser.add_argument('--log-file', type=str, default=settings.LOG_FILE, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=settings.LOG_LEVEL.upper(), help='Logging level')
    return parser.parse_args(argv)


def configure_logging(log_file: str, level: int, interactive: bool) -> None:
    """
    Set up logging for the chosen mode.

    The interactive UI owns the terminal, so it logs to the file only.
    Command-line modes log warnings and errors to the console.
    """
    if interactive:
        try:
            ensure_dir_exists(os.path.dirname(log_file))
            setup_file_logging(log_file, level)
            return
        except OSError as e:
            print(f"Warning: cannot write log file {log_file}: {e}", file=sys.stderr)
    setup_console_logging(max(level, logging.WARNING))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    if args.version:
        print(f"shippost v{settings.VERSION}")
        return 0

    text = " ".join(args.text).strip()
    interactive = not (args.setup or args.cleanup or text)
    configure_logging(args.log_file, getattr(logging, args.log_level.upper(), logging.INFO), interactive)
    logger.info(f"Starting shippost v{settings.VERSION}")
    logger.debug(f"Configuration: {get_config_summary()}")

    try:
        if args.setup:
            run_setup()
            return 0

        if args.cleanup:
            if cleanup_credentials():
                print("Credentials removed")
            else:
                print("No stored credentials found")
            return 0

        app = Shippost()
        if text:
            post = app.quick_post(text)
            print(f"Posted: {post.text}")
            print(status_url(post.id))
            return 0

        return app.run_tui()

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ShippostError as e:
        logger.error(f"shippost error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Unhandled exception in shippost: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        logger.info("shippost finished")


if __name__ == "__main__":
    sys.exit(main())
