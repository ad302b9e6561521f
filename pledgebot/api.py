"""
Client for the wager backend.

This module handles the HTTP requests to the backend and the decoding of its
responses into Wager objects. It performs no chat logic: failures are raised
as BackendError subclasses for the caller to turn into replies.
"""

import logging
from typing import Any, Callable, Iterable, Optional
import requests
from requests.exceptions import RequestException

from pledgebot.config import Config
from pledgebot.errors import BackendStatusError, BackendUnavailableError
from pledgebot.models import Operation, Wager, WagerProposal

# Configure module logger
logger = logging.getLogger(__name__)

OPERATIONS_PATH = "/operations"
WAGERS_PATH = "/wagers"

WagerFilter = Callable[[Wager], bool]


def _request(path: str, data: Optional[dict] = None) -> Any:
    """
    Send one request to the backend and decode the JSON body.

    POSTs data when given, otherwise GETs.

    Args:
        path: Path below Config.API_ROOT
        data: JSON body to POST

    Returns:
        Decoded JSON response

    Raises:
        BackendStatusError: If the backend answered with a non-2xx status
        BackendUnavailableError: If the backend couldn't be reached or the
            body wasn't JSON
    """
    url = f"{Config.API_ROOT}{path}"
    method = "POST" if data is not None else "GET"
    logger.info(f"Making request: {method} - {url}")

    try:
        response = requests.request(
            method,
            url,
            json=data,
            timeout=Config.API_TIMEOUT,
            headers={"Accept": "application/json"},
        )
    except RequestException as e:
        raise BackendUnavailableError(f"{method} {url} failed: {e}") from e

    log_message = f"Server responded with: {response.status_code} - {response.reason}"
    if not response.ok:
        logger.warning(log_message)
        raise BackendStatusError(response.status_code, response.reason or "")
    logger.info(log_message)

    try:
        return response.json()
    except ValueError as e:
        logger.debug(f"Response body: {response.text[:500]}")
        raise BackendUnavailableError(f"{method} {url} returned invalid JSON") from e


def create_operation(operation: Operation, wager: Optional[WagerProposal] = None) -> dict:
    """
    Ask the backend to perform an operation.

    Args:
        operation: Kind of operation, with the target wager id and user
        wager: Wager to create, for propose operations

    Returns:
        Decoded response body (the created operation)
    """
    payload: dict[str, Any] = {"operation": operation.to_payload()}
    if wager is not None:
        payload["wager"] = wager.to_payload()

    result = _request(OPERATIONS_PATH, payload)
    return result if isinstance(result, dict) else {}


def get_wagers(filters: Iterable[WagerFilter] = ()) -> list[Wager]:
    """
    Fetch every wager, then keep those accepted by all filters.

    The backend's order is preserved.

    Args:
        filters: Predicates applied one after another

    Returns:
        List of matching Wager objects
    """
    data = _request(WAGERS_PATH)
    if not isinstance(data, list):
        raise BackendUnavailableError(f"Expected list of wagers, got {type(data).__name__}")

    wagers = [Wager.from_dict(item) for item in data]
    for wager_filter in filters:
        wagers = [wager for wager in wagers if wager_filter(wager)]

    logger.debug(f"{len(wagers)} of {len(data)} wagers matched")
    return wagers


def get_wager(wager_id: str) -> Wager:
    """Fetch a single wager by id."""
    return Wager.from_dict(_request(f"{WAGERS_PATH}/{wager_id}"))
