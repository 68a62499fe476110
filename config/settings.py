"""
Configuration Settings for shippost

This module centralizes all configuration settings for the shippost application,
including environment variables, file locations, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file (current directory first, then app root)
load_dotenv(dotenv_path=os.path.join(os.getcwd(), '.env'))
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

VERSION = "0.3.0"

# =============================================================================
# Credentials
# =============================================================================

CONFIG_DIR = os.path.join(Path.home(), ".config", "shippost")
CREDENTIALS_FILE = os.getenv("SHIPPOST_CONFIG", os.path.join(CONFIG_DIR, "config.json"))
CONFIG_DIR_PERMISSIONS = 0o700
CONFIG_FILE_PERMISSIONS = 0o600

# Environment overrides, checked field by field before the credentials file
X_API_KEY = os.getenv("X_API_KEY")
X_API_SECRET = os.getenv("X_API_SECRET")
X_ACCESS_TOKEN = os.getenv("X_ACCESS_TOKEN")
X_ACCESS_SECRET = os.getenv("X_ACCESS_SECRET")

# =============================================================================
# Draft Generator (external oracle)
# =============================================================================

ORACLE_COMMAND = os.getenv("SHIPPOST_ORACLE", "claude")
ORACLE_TIMEOUT = int(os.getenv("SHIPPOST_ORACLE_TIMEOUT", "180"))  # Seconds before the oracle is abandoned
QUERY_COMMIT_LIMIT = 20              # Commits (with diffs) included in a free-text query prompt
THREAD_MIN_POSTS = 2
THREAD_MAX_POSTS = 4

# =============================================================================
# Commit Source
# =============================================================================

COMMIT_LOAD_LIMIT = 50               # Recent commits offered in the browser
SHORT_HASH_LENGTH = 7
COMMIT_HASH_PATTERN = r'^[0-9a-fA-F]{7,40}$'

# =============================================================================
# Publisher (X API)
# =============================================================================

POST_CHARACTER_LIMIT = 280           # Hard limit per post
CHARACTER_WARNING_THRESHOLD = 260    # Counter turns to a warning above this
HTTP_TIMEOUT = 30                    # Seconds for every API request
STATUS_HOST = "x.com"
ALLOWED_IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]
VIDEO_EXTENSIONS = [".mp4", ".mov", ".m4v", ".webm"]

MAX_THREAD_ITEMS = 25                # Posts per thread
MAX_MEDIA_PER_POST = 4               # Images per post

# =============================================================================
# Terminal UI
# =============================================================================

MIN_TERMINAL_WIDTH = 60
MIN_TERMINAL_HEIGHT = 20
COMMIT_BROWSER_CHROME_ROWS = 18      # Rows used by everything but the commit list
MIN_VISIBLE_COMMITS = 3
DEFAULT_VISIBLE_COMMITS = 10
EDITOR_WIDTH = 60
EDITOR_HEIGHT = 5
SUBJECT_TRUNCATE_LENGTH = 45
THREAD_PREVIEW_LENGTH = 40

# =============================================================================
# Logging
# =============================================================================

LOG_FILE = os.getenv("SHIPPOST_LOG_FILE", os.path.join(CONFIG_DIR, "shippost.log"))
LOG_LEVEL = os.getenv("SHIPPOST_LOG_LEVEL", "INFO")
