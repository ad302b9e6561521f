"""
Slack formatting for wagers and help text.

Every function here is pure: it takes wager records and the current roster
and returns the text to post. Nothing in this module raises on a partial
wager record; missing fields simply render as empty segments.
"""

import logging
import re
from typing import Iterable, Optional

from pledgebot.config import Config
from pledgebot.models import Offer, User, Wager
from pledgebot.users import name_to_tag

# Configure module logger
logger = logging.getLogger(__name__)

ZERO_CENTS_REGEX = re.compile(r"\.0{1,2}$")

CURRENCY_EMOJI_MAP: dict[str, str] = {
    "CAD": ":flag-ca:",
    "USD": ":flag-us:",
    "SZL": ":szl:",
    "BYR": ":beer:",
}


def italic(text: Optional[str]) -> str:
    """Slack italic markup."""
    return f"_{text}_" if text else ""


def bold(text: Optional[str]) -> str:
    """Slack bold markup."""
    return f"*{text}*" if text else ""


def pre(text: Optional[str]) -> str:
    """Slack inline code markup."""
    return f"`{text}`" if text else ""


def strip_zero_cents(amount: Optional[str]) -> str:
    """Drop a trailing '.0' or '.00' from amount."""
    return ZERO_CENTS_REGEX.sub("", amount) if amount else ""


def format_currency(currency: Optional[str], default_currency: Optional[str] = None) -> str:
    """
    Render an ISO 4217 code for Slack.

    The default currency renders as nothing, currencies with an emoji render
    as that emoji, and anything else as the code itself.
    """
    if not currency or currency == (default_currency or Config.DEFAULT_CURRENCY):
        return ""
    return CURRENCY_EMOJI_MAP.get(currency, currency)


def format_offer(offer: Offer, default_currency: Optional[str] = None) -> str:
    """Render one side of a wager: '"lunch"' or '*20* :flag-us:'."""
    if offer.description:
        return f'"{offer.description}"'

    currency = format_currency(offer.currency, default_currency)
    currency_display = f" {currency}" if currency else ""
    return f"{bold(strip_zero_cents(offer.amount))}{currency_display}"


def display_name(name: Optional[str], roster: Iterable[User]) -> str:
    """Detagged handle for name, falling back to the first word of it."""
    tag = name_to_tag(name, roster)
    if tag:
        return tag
    return name.split(" ")[0] if name else ""


def describe_wager(
    wager: Wager,
    roster: Iterable[User],
    show_status: bool = False,
    default_currency: Optional[str] = None,
) -> Optional[str]:
    """
    Render a wager as a single line of Slack markup.

    Args:
        wager: Wager record from the backend
        roster: Current Slack team members, used to show handles
        show_status: Whether to include the italicized status after the id
        default_currency: Currency to hide (default: Config.DEFAULT_CURRENCY)

    Returns:
        Line such as "`12`-_listed_: @bob's *20* to @alice's "lunch" ~ it rains",
        or None if the wager has no id
    """
    if not wager.id:
        return None

    roster = list(roster)
    maker_offer = format_offer(wager.maker_offer, default_currency)
    taker_offer = format_offer(wager.taker_offer, default_currency)
    maker = display_name(wager.maker, roster)
    taker = display_name(wager.taker, roster)
    status = f"-{italic(wager.status)}" if show_status else ""
    outcome = f" ~ {wager.outcome}" if wager.outcome else ""

    return (
        f"{pre(wager.id)}{status}: {maker}'s {maker_offer} to "
        f"{taker}'s {taker_offer}{outcome}"
    )


def describe_wagers(
    wagers: Iterable[Wager],
    roster: Iterable[User],
    show_status: bool = False,
) -> str:
    """Render wagers one per line, skipping records without an id."""
    roster = list(roster)
    lines = (describe_wager(wager, roster, show_status) for wager in wagers)
    return "\n".join(line for line in lines if line)


HELP_TEXT = "\n".join([
    f"{pre('all')} - get all wagers",
    f"{pre('show <id>')} - get one wager",
    f"{pre('me')} - get your wagers",
    f"{pre('user <tag>')} - get their wagers",
    f"{pre('take/accept/reject/cancel/close/appeal <id>')} - advance the state of the wager",
    f"{pre('listed/accepted/closed/completed/unaccepted/rejected/appealed/cancelled')} - get wagers by status",
    f"{pre('<tag> <offer>#<offer> <outcome>')} - make a wager",
    "An offer consists of a dollar value, and an optional currency, or a "
    "double-quote delimited description.",
    "Note that your full name on slack must match your name on Splitwise in "
    "order for the Splitwise integration to work.",
])
