"""
Turns chat messages addressed to the bot into wager operations and replies.

A message is handled in this order:
1. The first word is looked up in the command table (all, show, accept, ...)
2. Otherwise the leading words are looked up in the filter table
   (mine, user, listed, ...) and the matching wagers are listed
3. Otherwise the message must start with a user mention and is parsed as a
   new wager against that user

Every handled message gets exactly one reply.
"""

import logging
import re
from dataclasses import dataclass, replace
from functools import lru_cache, wraps
from typing import Callable, Iterable, Optional

from pledgebot import api
from pledgebot.commands import (
    ALL,
    COMMANDS,
    FILTERS,
    HELP,
    MINE,
    SHOW,
    USER,
    USER_RELATION_FILTERS,
    Descriptor,
)
from pledgebot.config import Config
from pledgebot.constants import (
    ERROR_STATUSES,
    ID_REGEX,
    KIND_PAST_TENSES,
    Kind,
    Messages,
    USER_ID_REGEX,
)
from pledgebot.errors import BackendError, MalformedPledge, map_error
from pledgebot.formatter import HELP_TEXT, describe_wager, describe_wagers
from pledgebot.grammar import parse_pledge
from pledgebot.models import Operation, User, Wager
from pledgebot.users import get_user, mention_to_name

# Configure module logger
logger = logging.getLogger(__name__)

SendReply = Callable[[str], None]


@dataclass(frozen=True)
class Context:
    """
    Everything a handler needs to answer one message.

    Attributes:
        send_reply: Posts the reply; called exactly once
        roster: Slack team members at the time the message arrived
        full_name: Real name of the user who sent the message
        arg_string: Words following the command or filters
        wager_id: Set by requires_id
        users_name: Real name of the mentioned user, set by requires_user
    """
    send_reply: SendReply
    roster: tuple[User, ...]
    full_name: Optional[str]
    arg_string: str = ""
    wager_id: Optional[str] = None
    users_name: Optional[str] = None

    @property
    def args(self) -> list[str]:
        return self.arg_string.split()


Handler = Callable[[Context], None]


@lru_cache(maxsize=None)
def message_regex(bot_user_id: str) -> re.Pattern:
    """Pattern for messages addressed to the bot; group 1 is the command."""
    return re.compile(
        rf"^(?:I )?(?:@?pledge|<@{re.escape(bot_user_id)}>) (.+)$",
        re.IGNORECASE,
    )


def get_id_from_str(text: Optional[str]) -> Optional[str]:
    """Return text if it is a run of digits, otherwise None."""
    return text if text and ID_REGEX.match(text) else None


def requires_id(handler: Handler) -> Handler:
    """
    Wrap a handler that needs a wager id as its first argument.

    Replies with MISSING_ID_ARGUMENT instead of calling the handler when the
    first argument isn't an id.
    """
    @wraps(handler)
    def wrapper(context: Context) -> None:
        args = context.args
        wager_id = get_id_from_str(args[0]) if args else None
        if not wager_id:
            context.send_reply(Messages.MISSING_ID_ARGUMENT)
            return
        handler(replace(context, wager_id=wager_id))

    return wrapper


def requires_user(handler: Handler) -> Handler:
    """
    Wrap a handler that needs a user mention as its first argument.

    Replies with MISSING_USER_ARGUMENT when there is no argument, and with
    NON_EXISTENT_USER when it doesn't resolve to a roster member.
    """
    @wraps(handler)
    def wrapper(context: Context) -> None:
        args = context.args
        if not args:
            context.send_reply(Messages.MISSING_USER_ARGUMENT)
            return
        users_name = mention_to_name(args[0], context.roster)
        if not users_name:
            context.send_reply(Messages.NON_EXISTENT_USER)
            return
        handler(replace(context, users_name=users_name))

    return wrapper


def operation_success_message(kind: str, wager_id: Optional[str]) -> str:
    """Reply for a successful operation, with a hint at the next step."""
    message = f"You've {KIND_PAST_TENSES.get(kind, f'{kind}ed')} the wager!"
    follow_up = COMMANDS[kind].follow_up if kind in COMMANDS else None
    if follow_up and wager_id:
        message = f"{message}\n{follow_up.format(wager_id=wager_id)}"
    return message


def make_operation_handler(kind: str) -> Handler:
    """Build the handler that advances a wager with an operation of kind."""
    @requires_id
    def handle_operation(context: Context) -> None:
        operation = Operation(kind=kind, wager_id=context.wager_id, user=context.full_name)
        try:
            result = api.create_operation(operation)
        except BackendError as e:
            context.send_reply(map_error(e, kind))
            return
        wager_id = result.get("wager_id") or context.wager_id
        context.send_reply(operation_success_message(kind, str(wager_id)))

    handle_operation.__name__ = f"handle_{kind}"
    return handle_operation


def handle_all(context: Context) -> None:
    """List every wager that isn't in an error status."""
    try:
        wagers = api.get_wagers(filters=[lambda wager: wager.status not in ERROR_STATUSES])
    except BackendError as e:
        context.send_reply(map_error(e))
        return
    context.send_reply(
        describe_wagers(wagers, context.roster, show_status=True) or Messages.NO_WAGERS
    )


@requires_id
def handle_show(context: Context) -> None:
    """Show a single wager."""
    try:
        wager = api.get_wager(context.wager_id)
    except BackendError as e:
        context.send_reply(map_error(e))
        return
    context.send_reply(describe_wager(wager, context.roster) or Messages.WAGER_NOT_FOUND)


def handle_help(context: Context) -> None:
    context.send_reply(HELP_TEXT)


@requires_user
def handle_default(context: Context) -> None:
    """
    Propose a new wager against the mentioned user.

    The first argument is the mention; the rest is the pledge itself.
    """
    parts = context.arg_string.split(None, 1)
    try:
        proposal = parse_pledge(parts[1] if len(parts) > 1 else "")
    except MalformedPledge as e:
        logger.info(f"Rejected pledge: {e}")
        context.send_reply(Messages.MALFORMED_PLEDGE)
        return

    proposal = replace(proposal, maker=context.full_name, taker=context.users_name)
    try:
        api.create_operation(Operation(kind=Kind.PROPOSE), wager=proposal)
    except BackendError as e:
        context.send_reply(map_error(e, Kind.PROPOSE))
        return
    context.send_reply(Messages.PROPOSE_SUCCESS)


COMMAND_HANDLERS: dict[str, Handler] = {
    ALL: handle_all,
    SHOW: handle_show,
    HELP: handle_help,
    **{
        kind: make_operation_handler(kind)
        for kind in (Kind.TAKE, Kind.ACCEPT, Kind.REJECT, Kind.CANCEL, Kind.CLOSE, Kind.APPEAL)
    },
}


def user_involved_in_wager(name: Optional[str]) -> Callable[[Wager], bool]:
    """Predicate: name is the maker, taker or arbiter of a wager."""
    def involved(wager: Wager) -> bool:
        return bool(name) and name in (wager.maker, wager.taker, wager.arbiter)

    return involved


def has_status(status: str) -> Callable[[Wager], bool]:
    def matches(wager: Wager) -> bool:
        return wager.status == status

    return matches


def error_qualifier_text(names: list[str]) -> str:
    """Words describing the filters in the "no wagers found" reply."""
    if len(names) > 1:
        return "such"
    if names[0] == MINE:
        return "of your"
    if names[0] == USER:
        return "of their"
    return names[0]


def make_filter_handler(filters: list[Descriptor]) -> Handler:
    """
    Build the handler that lists wagers matching every filter.

    Statuses are shown only when all filters select by user, since a status
    filter already says what the status is.

    Args:
        filters: Filter descriptors, at least one

    Returns:
        Handler (requiring a user mention when the 'user' filter is present)
    """
    names = [descriptor.name for descriptor in filters]
    show_status = all(name in USER_RELATION_FILTERS for name in names)
    qualifier = error_qualifier_text(names)

    def handle_filter(context: Context) -> None:
        predicates = []
        for name in names:
            if name == MINE:
                predicates.append(user_involved_in_wager(context.full_name))
            elif name == USER:
                predicates.append(user_involved_in_wager(context.users_name))
            else:
                predicates.append(has_status(name))

        try:
            wagers = api.get_wagers(filters=predicates)
        except BackendError as e:
            context.send_reply(map_error(e))
            return
        context.send_reply(
            describe_wagers(wagers, context.roster, show_status=show_status)
            or Messages.NO_FILTERED_WAGERS.format(qualifier=qualifier)
        )

    if USER in names:
        return requires_user(handle_filter)
    return handle_filter


def make_send_reply(sink: SendReply) -> SendReply:
    """Wrap a reply sink so that every reply is logged."""
    def send_reply(reply: str) -> None:
        logger.info(f"Sending message: {reply.splitlines()[0] if reply else ''} ...")
        sink(reply)

    return send_reply


def handle_message(
    text: Optional[str],
    user_id: Optional[str],
    roster: Iterable[User],
    sink: SendReply,
) -> bool:
    """
    Handle one chat message.

    Args:
        text: Message text as received from Slack
        user_id: Slack id of the sender
        roster: Snapshot of the Slack team, taken for this message
        sink: Called once with the reply

    Returns:
        True if the message was addressed to the bot (and answered), False if
        it was ignored
    """
    match = message_regex(Config.BOT_USER_ID).match(text or "")
    if not match:
        return False
    logger.info(f"Received message: {text}")

    roster = tuple(roster)
    user = get_user(roster, user_id)
    if user is None:
        logger.warning(f"Sender {user_id} is not in the roster")

    arg_string = match.group(1)
    args = arg_string.split()
    context = Context(
        send_reply=make_send_reply(sink),
        roster=roster,
        full_name=(user.real_name or None) if user else None,
    )

    command = COMMANDS.match(args[0] if args else None)
    if command is not None:
        logger.debug(f"Dispatching command {command.name!r}")
        COMMAND_HANDLERS[command.name](replace(context, arg_string=" ".join(args[1:])))
        return True

    filters = FILTERS.match_run(args)
    if filters:
        logger.debug(f"Dispatching filters {[descriptor.name for descriptor in filters]}")
        make_filter_handler(filters)(replace(context, arg_string=" ".join(args[len(filters):])))
        return True

    first_arg = args[0] if args else ""

    # Slack leaves "@name" as plain text when nobody has that handle
    if first_arg.startswith("@"):
        context.send_reply(Messages.NON_EXISTENT_USER)
        return True

    if not USER_ID_REGEX.match(first_arg):
        context.send_reply(Messages.INVALID_COMMAND)
        return True

    handle_default(replace(context, arg_string=arg_string))
    return True
