"""
Grammar for the offers and pledges typed into chat.

An offer is either a double-quoted description ("walk the dog") or an amount
with at most two decimal places and an optional currency code (10, 10.50,
10USD). A pledge is two offers joined by '#', an optional "that", and the
outcome being wagered on:

    10#"walk the dog" that it rains tomorrow
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from pledgebot.config import Config
from pledgebot.errors import MalformedPledge
from pledgebot.models import Offer, WagerProposal

# Configure module logger
logger = logging.getLogger(__name__)

OFFER_PATTERN = r'(?:"([\w ]+)"|(\d+(?:\.\d{2})?))([A-Z]{3})?'

OFFER_REGEX = re.compile(f"^{OFFER_PATTERN}$", re.ASCII)

PLEDGE_REGEX = re.compile(f"^{OFFER_PATTERN}#{OFFER_PATTERN}(?: (?i:that))? (.+)$", re.ASCII)


def parse_offer(token: str, default_currency: Optional[str] = None) -> Offer:
    """
    Parse a single offer token.

    Args:
        token: Offer text, e.g. '"lunch"', '20' or '12.50USD'
        default_currency: Currency for bare amounts (default: Config.DEFAULT_CURRENCY)

    Returns:
        Offer with either a description or an amount set

    Raises:
        MalformedPledge: If token isn't a valid offer
    """
    match = OFFER_REGEX.match(token or "")
    if not match:
        raise MalformedPledge(f"Not an offer: {token!r}")
    return _build_offer(*match.groups(), default_currency=default_currency)


def parse_pledge(text: str, default_currency: Optional[str] = None) -> WagerProposal:
    """
    Parse the '<offer>#<offer> [that] <outcome>' part of a wager proposal.

    Args:
        text: Pledge text following the taker's mention
        default_currency: Currency for bare amounts (default: Config.DEFAULT_CURRENCY)

    Returns:
        WagerProposal holding both offers and the outcome (maker and taker unset)

    Raises:
        MalformedPledge: If any part of the text doesn't fit the grammar
    """
    match = PLEDGE_REGEX.match(text or "")
    if not match:
        raise MalformedPledge(f"Not a pledge: {text!r}")

    groups = match.groups()
    proposal = WagerProposal(
        maker_offer=_build_offer(*groups[0:3], default_currency=default_currency),
        taker_offer=_build_offer(*groups[3:6], default_currency=default_currency),
        outcome=groups[6],
    )
    logger.debug(f"Parsed pledge: {proposal}")
    return proposal


def _build_offer(
    description: Optional[str],
    amount: Optional[str],
    currency: Optional[str],
    default_currency: Optional[str] = None,
) -> Offer:
    if description is not None:
        return Offer(description=description, currency=currency)

    if currency is None and _is_nonzero(amount):
        # A zero amount is sent without a currency
        currency = default_currency or Config.DEFAULT_CURRENCY
    return Offer(amount=amount, currency=currency)


def _is_nonzero(amount: Optional[str]) -> bool:
    try:
        return bool(amount) and Decimal(amount) != 0
    except InvalidOperation:
        return False
