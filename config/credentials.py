"""
Credential Storage for shippost

Loads, saves and removes the four X API tokens. Environment variables take
precedence field by field over the JSON credentials file.
"""

import getpass
import json
import os
import stat
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from config import settings
from utils.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Credentials:
    """OAuth 1.0a user-context tokens. Treated as opaque."""
    api_key: str = ""
    api_secret: str = ""
    access_token: str = ""
    access_secret: str = ""

    def is_valid(self) -> bool:
        """Return True when every token is present."""
        return all([self.api_key, self.api_secret, self.access_token, self.access_secret])

    def __repr__(self) -> str:
        return f"Credentials(api_key={'set' if self.api_key else 'missing'}, ...)"


def credentials_path() -> str:
    """Return the credentials file location."""
    return settings.CREDENTIALS_FILE


def credentials_exist(path: Optional[str] = None) -> bool:
    """Check whether a credentials file exists."""
    return os.path.isfile(path or credentials_path())


def _from_environment() -> Credentials:
    return Credentials(
        api_key=settings.X_API_KEY or "",
        api_secret=settings.X_API_SECRET or "",
        access_token=settings.X_ACCESS_TOKEN or "",
        access_secret=settings.X_ACCESS_SECRET or "",
    )


def load_credentials(path: Optional[str] = None) -> Credentials:
    """
    Load credentials from the environment and the credentials file.

    Args:
        path: Credentials file to read. Defaults to settings.CREDENTIALS_FILE.

    Returns:
        Credentials: A complete set of tokens.

    Raises:
        ConfigurationError: If the file is unreadable or the tokens are incomplete.
    """
    path = path or credentials_path()
    creds = _from_environment()
    if creds.is_valid():
        logger.info("Using X API credentials from environment")
        return creds

    if not os.path.exists(path):
        raise ConfigurationError("Config not found - run 'shippost --setup' to configure")

    mode = stat.S_IMODE(os.stat(path).st_mode)
    if mode & 0o077:
        logger.warning(f"Config file has overly permissive permissions ({mode:o}). Run 'chmod 600 {path}'")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read config: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Failed to parse config: expected a JSON object")

    creds = Credentials(
        api_key=creds.api_key or data.get("api_key", ""),
        api_secret=creds.api_secret or data.get("api_secret", ""),
        access_token=creds.access_token or data.get("access_token", ""),
        access_secret=creds.access_secret or data.get("access_secret", ""),
    )

    if not creds.is_valid():
        raise ConfigurationError("Config is incomplete - run 'shippost --setup' to configure")

    return creds


def save_credentials(creds: Credentials, path: Optional[str] = None) -> str:
    """
    Write credentials to disk with owner-only permissions.

    Args:
        creds: The tokens to store.
        path: Destination file. Defaults to settings.CREDENTIALS_FILE.

    Returns:
        str: The path written.
    """
    path = path or credentials_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, mode=settings.CONFIG_DIR_PERMISSIONS, exist_ok=True)
        os.chmod(directory, settings.CONFIG_DIR_PERMISSIONS)

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, settings.CONFIG_FILE_PERMISSIONS)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(asdict(creds), f, indent=2)
    os.chmod(path, settings.CONFIG_FILE_PERMISSIONS)

    logger.info(f"Credentials saved to {path}")
    return path


def cleanup_credentials(path: Optional[str] = None) -> bool:
    """
    Remove the credentials file, and its directory when it is left empty.

    Returns:
        bool: True if a file was removed, False if there was nothing to remove.
    """
    path = path or credentials_path()
    if not os.path.exists(path):
        return False

    os.remove(path)
    directory = os.path.dirname(path)
    try:
        os.rmdir(directory)
    except OSError:
        # Directory still holds other files (e.g. the log)
        pass

    logger.info(f"Credentials removed from {path}")
    return True


def run_setup(
    prompt: Callable[[str], str] = input,
    secret_prompt: Callable[[str], str] = getpass.getpass,
    output: Callable[[str], None] = print,
    path: Optional[str] = None,
) -> str:
    """
    Interactively prompt for credentials and save them.

    Args:
        prompt: Reads visible input.
        secret_prompt: Reads hidden input.
        output: Writes a line for the user.
        path: Destination file.

    Returns:
        str: The path written.

    Raises:
        ConfigurationError: If any field is left empty.
    """
    output("shippost setup")
    output("==============")
    output("")
    output("You'll need X API credentials from developer.x.com")
    output("Create a project and app with Read+Write permissions.")
    output("")
    if credentials_exist(path):
        output("Existing credentials will be replaced.")
        output("")

    creds = Credentials(
        api_key=prompt("API Key (Consumer Key): ").strip(),
        api_secret=secret_prompt("API Secret (Consumer Secret): ").strip(),
        access_token=prompt("Access Token: ").strip(),
        access_secret=secret_prompt("Access Token Secret: ").strip(),
    )

    if not creds.is_valid():
        raise ConfigurationError("All fields are required")

    saved = save_credentials(creds, path)
    output("")
    output(f"Config saved to {saved}")
    output("You're ready to post!")
    return saved
