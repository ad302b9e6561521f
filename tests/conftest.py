"""Shared test fixtures."""

import pytest

from pledgebot.models import Offer, User, Wager


@pytest.fixture
def roster() -> list[User]:
    """A small Slack team."""
    return [
        User(id="U123", name="jane", real_name="Jane Doe"),
        User(id="U456", name="bob", real_name="Bob Smith"),
        User(id="U789", name="carol", real_name="Carol King"),
    ]


@pytest.fixture
def wagers() -> list[Wager]:
    """Wagers in backend order, covering several statuses."""
    return [
        Wager(
            id="1", maker="Bob Smith", taker="Jane Doe",
            maker_offer=Offer(amount="20.00", currency="CAD"),
            taker_offer=Offer(description="lunch"),
            outcome="it rains tomorrow", status="listed",
        ),
        Wager(
            id="2", maker="Jane Doe", taker="Carol King",
            maker_offer=Offer(amount="5", currency="USD"),
            taker_offer=Offer(amount="5", currency="USD"),
            outcome="the bus is late", status="accepted",
        ),
        Wager(
            id="3", maker="Carol King", taker="Bob Smith",
            maker_offer=Offer(amount="1"), taker_offer=Offer(amount="1"),
            outcome="heads", status="cancelled",
        ),
        Wager(
            id="4", maker="Carol King", taker="Jane Doe", arbiter="Bob Smith",
            maker_offer=Offer(description="coffee"), taker_offer=Offer(description="tea"),
            outcome="it snows", status="listed",
        ),
    ]

