"""
Configuration management for the pledge bot.

This module handles all configuration loading from environment variables
and provides type-safe access to configuration values throughout the application.
"""

import os
import re
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """
    Centralized configuration class for the pledge bot.

    All configuration values are loaded from environment variables with
    sensible defaults where appropriate. The Slack token must be provided via
    environment variables for security.
    """

    # Wager backend
    API_ROOT: str = os.getenv("PLEDGE_API_ROOT", "http://pledge.keri.warr.ca")

    # Offers without an explicit currency use this one
    DEFAULT_CURRENCY: str = os.getenv("PLEDGE_DEFAULT_CURRENCY", "CAD")

    # Slack Configuration
    BOT_USER_ID: str = os.getenv("PLEDGE_BOT_USER_ID", "U1V3QU2BU")
    SLACK_BOT_TOKEN: Optional[str] = os.getenv("SLACK_BOT_TOKEN")
    SLACK_API_URL: str = os.getenv("SLACK_API_URL", "https://slack.com/api")

    # Request Timeouts (seconds)
    API_TIMEOUT: int = int(os.getenv("API_TIMEOUT", "30"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[Path] = Path(os.getenv("LOG_FILE", "logs/server.log")) if os.getenv("LOG_FILE") else None

    @classmethod
    def validate(cls) -> tuple[bool, list[str]]:
        """
        Validate that configuration values are well formed.

        Returns:
            tuple: (is_valid, list_of_errors)
        """
        errors: list[str] = []

        if not re.fullmatch(r"[A-Z]{3}", cls.DEFAULT_CURRENCY or ""):
            errors.append("PLEDGE_DEFAULT_CURRENCY must be a 3-letter upper-case currency code")

        if not re.fullmatch(r"[A-Z][A-Z0-9]+", cls.BOT_USER_ID or ""):
            errors.append("PLEDGE_BOT_USER_ID must look like a Slack user id (e.g. U1V3QU2BU)")

        if not re.match(r"https?://", cls.API_ROOT or ""):
            errors.append("PLEDGE_API_ROOT must be an http(s) URL")

        if cls.API_TIMEOUT < 1:
            errors.append("API_TIMEOUT must be at least 1")

        return (len(errors) == 0, errors)

    @classmethod
    def ensure_directories(cls) -> None:
        """Create the log file's directory if it doesn't exist."""
        if cls.LOG_FILE:
            cls.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
