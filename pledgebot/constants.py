"""
Shared constants for the pledge bot.

Wager statuses, operation kinds, reply messages and the regular expressions
that describe Slack's wire formats live here so that the grammar, formatter
and dispatcher agree on them.
"""

import re


class Status:
    """Wager lifecycle statuses as reported by the backend."""
    UNACCEPTED = "unaccepted"
    LISTED = "listed"
    UNCONFIRMED = "unconfirmed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    CLOSED = "closed"
    COMPLETED = "completed"
    APPEALED = "appealed"


STATUSES: tuple[str, ...] = (
    Status.UNACCEPTED,
    Status.LISTED,
    Status.UNCONFIRMED,
    Status.ACCEPTED,
    Status.REJECTED,
    Status.CANCELLED,
    Status.EXPIRED,
    Status.CLOSED,
    Status.COMPLETED,
    Status.APPEALED,
)

# Hidden from the default "all wagers" listing
ERROR_STATUSES: frozenset[str] = frozenset({
    Status.REJECTED,
    Status.CANCELLED,
    Status.EXPIRED,
    Status.APPEALED,
})


class Kind:
    """Operation kinds understood by the backend."""
    TAKE = "take"
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    CLOSE = "close"
    APPEAL = "appeal"
    PROPOSE = "propose"


KIND_PAST_TENSES: dict[str, str] = {
    Kind.TAKE: "taken",
    Kind.ACCEPT: "accepted",
    Kind.REJECT: "rejected",
    Kind.CANCEL: "cancelled",
    Kind.CLOSE: "closed",
    Kind.APPEAL: "appealed",
    Kind.PROPOSE: "proposed",
}


class Messages:
    """Fixed replies sent back to the channel."""
    PROPOSE_SUCCESS = "You've created a wager!"
    SERVER_FAILURE = "/shrug Sorry, something went wrong."
    MISSING_ID_ARGUMENT = "You must specify an id."
    MISSING_USER_ARGUMENT = "You must specify a @user"
    NON_EXISTENT_USER = "That user is not in this team."
    MALFORMED_PLEDGE = "Sorry, I couldn't understand that pledge."
    PROPOSE_FAILURE = "Sorry, the backend didn't like that wager"
    INVALID_COMMAND = "That is not a valid command."
    WAGER_NOT_FOUND = "That wager doesn't exist."
    CANT_OPERATE = "You can't {kind} that wager."
    NO_WAGERS = "I couldn't find any wagers"
    NO_FILTERED_WAGERS = "I couldn't find any {qualifier} wagers."


# Slack user mention, e.g. <@U1V3QU2BU>
USER_ID_REGEX = re.compile(r"^<@([A-Z][A-Z0-9]+)>$")

# Wager ids are bare runs of ASCII digits
ID_REGEX = re.compile(r"^\d+$", re.ASCII)

# "--" or the em-dash Slack substitutes for it
OPTION_REGEX = re.compile("^(--|\u2014)")

STATUS_CODE_REGEX = re.compile(r"^\d{3}$", re.ASCII)
