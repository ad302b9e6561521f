"""
Data models for the pledge bot.

This module defines the dataclasses used throughout the application for
representing Slack users, wager offers, wagers, and the operations sent to
the wager backend.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """
    Represents one member of the Slack team roster.

    Attributes:
        id: Slack user id (e.g. "U1V3QU2BU")
        name: Slack handle, used for @-mentions
        real_name: Full display name; joins users to wager records
    """
    id: str
    name: str
    real_name: str = ""

    @classmethod
    def from_slack(cls, member: dict) -> "User":
        """Build a User from a `users.list` member record."""
        profile = member.get("profile") or {}
        return cls(
            id=member.get("id", ""),
            name=member.get("name", ""),
            real_name=member.get("real_name") or profile.get("real_name") or "",
        )


@dataclass(frozen=True)
class Offer:
    """
    One side's stake in a wager.

    Either `description` is set, or `amount` (a decimal string) with an
    optional `currency`. A description wins when both are present.
    """
    description: Optional[str] = None
    amount: Optional[str] = None
    currency: Optional[str] = None

    def to_payload(self, prefix: str) -> dict[str, Any]:
        """Flatten into backend keys, e.g. maker_offer_amount."""
        return {
            f"{prefix}_offer_description": self.description,
            f"{prefix}_offer_amount": self.amount,
            f"{prefix}_offer_currency": self.currency,
        }


@dataclass(frozen=True)
class WagerProposal:
    """The wager half of a propose operation."""
    maker_offer: Offer
    taker_offer: Offer
    outcome: str
    maker: Optional[str] = None
    taker: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"maker": self.maker, "taker": self.taker}
        payload.update(self.maker_offer.to_payload("maker"))
        payload.update(self.taker_offer.to_payload("taker"))
        payload["outcome"] = self.outcome
        return _drop_none(payload)


@dataclass(frozen=True)
class Operation:
    """A requested state transition (or creation) sent to the backend."""
    kind: str
    wager_id: Optional[str] = None
    user: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_none({
            "kind": self.kind,
            "wager_id": self.wager_id,
            "user": self.user,
        })


@dataclass
class Wager:
    """
    Represents a wager record as returned by the backend.

    Attributes:
        id: Wager id (digits); None marks a record that wasn't found
        maker: Real name of the user who proposed the wager
        taker: Real name of the user who was challenged
        arbiter: Real name of the arbiter, if any
        maker_offer: What the maker puts up
        taker_offer: What the taker puts up
        outcome: Free text describing what the wager is about
        status: One of the statuses in constants.STATUSES
    """
    id: Optional[str] = None
    maker: Optional[str] = None
    taker: Optional[str] = None
    arbiter: Optional[str] = None
    maker_offer: Offer = field(default_factory=Offer)
    taker_offer: Offer = field(default_factory=Offer)
    outcome: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Wager":
        """
        Parse a backend wager record.

        Missing or malformed fields are left empty instead of raising, so a
        partial record still renders.

        Args:
            data: Decoded JSON object from the backend

        Returns:
            Wager object (with id None when data isn't a usable record)
        """
        if not isinstance(data, dict):
            logger.warning(f"Expected wager object, got {type(data).__name__}")
            return cls()

        wager_id = data.get("id")
        return cls(
            id=str(wager_id) if wager_id not in (None, "") else None,
            maker=data.get("maker"),
            taker=data.get("taker"),
            arbiter=data.get("arbiter"),
            maker_offer=_parse_offer(data, "maker"),
            taker_offer=_parse_offer(data, "taker"),
            outcome=data.get("outcome"),
            status=data.get("status"),
        )


def _parse_offer(data: dict, prefix: str) -> Offer:
    amount = data.get(f"{prefix}_offer_amount")
    return Offer(
        description=data.get(f"{prefix}_offer_description") or None,
        amount=str(amount) if amount is not None else None,
        currency=data.get(f"{prefix}_offer_currency") or None,
    )


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}
