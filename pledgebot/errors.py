"""
Exceptions raised inside the pledge bot and their mapping to chat replies.

Malformed input is answered with a specific message by the handler that
detected it. Backend rejections carry an HTTP status code and are turned into
an operation-specific message here. Anything else is logged and answered with
the generic failure message.
"""

import logging
from typing import Optional

from pledgebot.constants import Kind, Messages, STATUS_CODE_REGEX

# Configure module logger
logger = logging.getLogger(__name__)


class PledgeError(Exception):
    """Base class for all pledge bot errors."""


class MalformedPledge(PledgeError):
    """The text of a wager proposal couldn't be parsed."""


class BackendError(PledgeError):
    """The wager backend couldn't complete a request."""


class BackendStatusError(BackendError):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"{status_code} {reason}".strip())


class BackendUnavailableError(BackendError):
    """The backend couldn't be reached or returned an unreadable body."""


STATUS_CODE_MESSAGES = {
    404: lambda kind: Messages.WAGER_NOT_FOUND,
    422: lambda kind: Messages.CANT_OPERATE.format(kind=kind) if kind else Messages.SERVER_FAILURE,
}


def status_code_of(error: BaseException) -> Optional[int]:
    """Return the 3-digit status code carried by error, if any."""
    code = getattr(error, "status_code", None)
    if code is None or not STATUS_CODE_REGEX.match(str(code)):
        return None
    return int(code)


def map_error(error: BaseException, kind: Optional[str] = None) -> str:
    """
    Translate a backend failure into the reply shown to the user.

    Args:
        error: Exception raised while talking to the backend
        kind: Operation kind that was attempted, if any

    Returns:
        User-facing reply text
    """
    code = status_code_of(error)
    if code is None:
        log_only(error)
        return Messages.SERVER_FAILURE

    # There's no single wager id to blame for a rejected proposal
    if kind == Kind.PROPOSE:
        return Messages.PROPOSE_FAILURE

    message_function = STATUS_CODE_MESSAGES.get(code)
    if message_function is None:
        logger.warning(f"No reply mapped for backend status {code}")
        return Messages.SERVER_FAILURE
    return message_function(kind)


def log_only(error: BaseException) -> None:
    """Record a failure that must not be shown to the user."""
    logger.error(f"Backend request failed: {error!r}", exc_info=error)
