"""
Slack Web API helpers for the pledge bot.

This module fetches the team roster and posts replies. It uses plain HTTPS
requests against the Web API; receiving events from Slack is left to
whatever process hosts the bot.
"""

import logging
from typing import Any, Callable, Optional

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError

from pledgebot.config import Config
from pledgebot.models import User

# Configure module logger
logger = logging.getLogger(__name__)


class SlackApiError(Exception):
    """Slack answered with ok: false."""


def _call(method: str, token: Optional[str], payload: Optional[dict] = None) -> dict[str, Any]:
    """
    Call a Slack Web API method.

    Args:
        method: API method name, e.g. "users.list"
        token: Bot token (default: Config.SLACK_BOT_TOKEN)
        payload: JSON body

    Returns:
        Decoded response body

    Raises:
        SlackApiError: If Slack reports an error
        RequestException: On transport failures
    """
    response = requests.post(
        f"{Config.SLACK_API_URL}/{method}",
        json=payload or {},
        timeout=Config.API_TIMEOUT,
        headers={
            "Authorization": f"Bearer {token or Config.SLACK_BOT_TOKEN}",
            "Content-Type": "application/json; charset=utf-8",
        },
    )
    response.raise_for_status()
    data = response.json()
    if not data.get("ok"):
        raise SlackApiError(f"Slack API {method}: {data.get('error', 'unknown')}")
    return data


def fetch_roster(token: Optional[str] = None) -> list[User]:
    """
    Fetch the members of the Slack team.

    Args:
        token: Bot token (default: Config.SLACK_BOT_TOKEN)

    Returns:
        List of User objects. Returns an empty list on any failure.
    """
    if not (token or Config.SLACK_BOT_TOKEN):
        logger.debug("Slack not configured (missing token)")
        return []

    try:
        data = _call("users.list", token)
    except Timeout:
        logger.error(f"Slack API request timed out after {Config.API_TIMEOUT}s")
        return []
    except ConnectionError as e:
        logger.error(f"Connection error while fetching Slack roster: {e}")
        return []
    except (RequestException, SlackApiError, ValueError) as e:
        logger.error(f"Failed to fetch Slack roster: {e}")
        return []

    roster = [User.from_slack(member) for member in data.get("members", []) if member.get("id")]
    logger.info(f"Fetched {len(roster)} Slack users")
    return roster


def post_message(channel: str, text: str, token: Optional[str] = None) -> bool:
    """
    Post a message to a Slack channel.

    Args:
        channel: Channel id
        text: Message text (Slack markup)
        token: Bot token (default: Config.SLACK_BOT_TOKEN)

    Returns:
        True if the message was posted, False otherwise
    """
    if not (token or Config.SLACK_BOT_TOKEN):
        logger.debug("Slack not configured (missing token)")
        return False

    try:
        _call("chat.postMessage", token, {"channel": channel, "text": text})
    except Timeout:
        logger.error(f"Slack API request timed out after {Config.API_TIMEOUT}s")
        return False
    except ConnectionError as e:
        logger.error(f"Network error sending Slack message: {e}")
        return False
    except (RequestException, SlackApiError, ValueError) as e:
        logger.error(f"Slack API error: {e}")
        return False

    logger.debug(f"Posted message to {channel}")
    return True


def make_channel_sink(channel: str, token: Optional[str] = None) -> Callable[[str], None]:
    """Reply sink that posts each reply to channel."""
    def sink(text: str) -> None:
        post_message(channel, text, token)

    return sink
