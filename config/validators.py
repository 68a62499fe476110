"""
Configuration Validation for shippost

This module contains configuration validation logic.
Kept apart from settings.py so settings stay a plain constants module.
"""

import logging

from utils.exceptions import ConfigurationError


def validate_settings():
    """
    Validate that all settings are within sensible bounds.

    Raises:
        ConfigurationError: If any setting is invalid. All problems are
            reported together.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("POST_CHARACTER_LIMIT", settings.POST_CHARACTER_LIMIT, 1, 25000),
        ("CHARACTER_WARNING_THRESHOLD", settings.CHARACTER_WARNING_THRESHOLD, 0, settings.POST_CHARACTER_LIMIT),
        ("COMMIT_LOAD_LIMIT", settings.COMMIT_LOAD_LIMIT, 1, 1000),
        ("QUERY_COMMIT_LIMIT", settings.QUERY_COMMIT_LIMIT, 1, 200),
        ("MAX_THREAD_ITEMS", settings.MAX_THREAD_ITEMS, 1, 100),
        ("MAX_MEDIA_PER_POST", settings.MAX_MEDIA_PER_POST, 0, 4),
        ("MIN_TERMINAL_WIDTH", settings.MIN_TERMINAL_WIDTH, 20, 400),
        ("MIN_TERMINAL_HEIGHT", settings.MIN_TERMINAL_HEIGHT, 10, 200),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    # Validate timeout values are positive
    timeout_settings = [
        ("ORACLE_TIMEOUT", settings.ORACLE_TIMEOUT),
        ("HTTP_TIMEOUT", settings.HTTP_TIMEOUT),
    ]

    for name, value in timeout_settings:
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    if not settings.ORACLE_COMMAND:
        errors.append("ORACLE_COMMAND must not be empty")

    for ext in settings.ALLOWED_IMAGE_EXTENSIONS:
        if not ext.startswith('.') or ext != ext.lower():
            errors.append(f"Image extension {ext!r} must be lowercase and start with '.'")

    if settings.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        logging.getLogger(__name__).warning(f"Unknown log level {settings.LOG_LEVEL!r}, INFO will be used")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "credentials": {
            "file": settings.CREDENTIALS_FILE,
            "env_override": any([
                settings.X_API_KEY,
                settings.X_API_SECRET,
                settings.X_ACCESS_TOKEN,
                settings.X_ACCESS_SECRET,
            ]),
        },
        "oracle": {
            "command": settings.ORACLE_COMMAND,
            "timeout": settings.ORACLE_TIMEOUT,
        },
        "posting": {
            "char_limit": settings.POST_CHARACTER_LIMIT,
            "max_thread_items": settings.MAX_THREAD_ITEMS,
            "max_media_per_post": settings.MAX_MEDIA_PER_POST,
            "http_timeout": settings.HTTP_TIMEOUT,
        },
        "commits": {
            "load_limit": settings.COMMIT_LOAD_LIMIT,
            "query_limit": settings.QUERY_COMMIT_LIMIT,
        },
    }
