"""
Registries of the commands and list filters the bot understands.

Each entry has a canonical name, a list of aliases, and optionally a one
letter flag. A token refers to an entry when, after stripping a leading '--'
(or the em-dash Slack turns it into), it equals the name or an alias, or
when it is exactly '-' followed by the flag.

The lookup maps are built once at import time. When two entries claim the
same alias the one registered first keeps it.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from pledgebot.constants import Kind, OPTION_REGEX, STATUSES

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Descriptor:
    """
    One command or filter.

    Attributes:
        name: Canonical name, also what handlers are keyed on
        aliases: Other words that select this entry
        flag: Single character for the '-x' form
        follow_up: Hint appended to a successful operation reply; formatted
            with the wager id
    """
    name: str
    aliases: tuple[str, ...] = ()
    flag: Optional[str] = None
    follow_up: Optional[str] = None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name,) + self.aliases


class Table:
    """Immutable lookup of descriptors by name, alias and flag."""

    def __init__(self, label: str, descriptors: Iterable[Descriptor]) -> None:
        self.label = label
        self.descriptors: tuple[Descriptor, ...] = tuple(descriptors)
        self._by_name: dict[str, Descriptor] = {}
        self._by_flag: dict[str, Descriptor] = {}

        for descriptor in self.descriptors:
            for name in descriptor.names:
                self._register(self._by_name, name, descriptor)
            if descriptor.flag:
                self._register(self._by_flag, f"-{descriptor.flag}", descriptor)

    def _register(self, index: dict[str, Descriptor], key: str, descriptor: Descriptor) -> None:
        owner = index.setdefault(key, descriptor)
        if owner is not descriptor:
            logger.debug(
                f"{self.label} {key!r} already refers to {owner.name!r}, "
                f"ignoring it for {descriptor.name!r}"
            )

    def match(self, token: Optional[str]) -> Optional[Descriptor]:
        """
        Find the descriptor a token refers to.

        Args:
            token: One whitespace-delimited word of the message

        Returns:
            Matching Descriptor, or None
        """
        if not token:
            return None
        descriptor = self._by_name.get(OPTION_REGEX.sub("", token, count=1))
        if descriptor is None:
            descriptor = self._by_flag.get(token)
        return descriptor

    def match_run(self, tokens: Iterable[str]) -> list[Descriptor]:
        """Match the longest prefix of tokens that all refer to entries."""
        matched = []
        for token in tokens:
            descriptor = self.match(token)
            if descriptor is None:
                break
            matched.append(descriptor)
        return matched

    def __getitem__(self, name: str) -> Descriptor:
        return self._by_name[name]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name


# Commands that don't touch a single wager's state
ALL = "all"
SHOW = "show"
HELP = "help"

# Filters that select wagers by who is involved
MINE = "mine"
USER = "user"

COMMANDS = Table("command", [
    Descriptor(ALL, aliases=("wagers",), flag="w"),
    Descriptor(SHOW, aliases=("get", "wager"), flag="s"),
    Descriptor(HELP, aliases=("how", "why", "what"), flag="h"),
    Descriptor(
        Kind.TAKE, flag="t",
        follow_up="The wager can be confirmed by saying: `pledge accept {wager_id}`",
    ),
    Descriptor(
        Kind.ACCEPT, aliases=("affirm",), flag="a",
        follow_up="The wager can be closed by saying: `pledge close {wager_id}`",
    ),
    Descriptor(Kind.REJECT, aliases=("remove",), flag="r"),
    Descriptor(Kind.CANCEL, aliases=("remove", "destroy", "delete"), flag="c"),
    Descriptor(
        Kind.CLOSE, aliases=("complete", "finish"), flag="l",
        follow_up="The wager can be appealed by saying: `pledge appeal {wager_id}`",
    ),
    Descriptor(Kind.APPEAL, flag="p"),
])

FILTERS = Table("filter", [
    Descriptor(MINE, aliases=("me", "my"), flag="m"),
    Descriptor(USER, flag="u"),
    *(Descriptor(status) for status in STATUSES),
])

USER_RELATION_FILTERS = frozenset({MINE, USER})
