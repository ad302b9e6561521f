"""
Mapping between Slack user ids, handles and real names.

Wagers store the real names of the people involved. Replies want to show
their handles, but a literal "@handle" would notify everyone named in a
listing, so handles are rendered with look-alike characters instead.
"""

import logging
from typing import Iterable, Optional

from pledgebot.constants import USER_ID_REGEX
from pledgebot.models import User

# Configure module logger
logger = logging.getLogger(__name__)

# Characters Slack treats as part of a tag, and a visually identical code
# point it doesn't. The keys are distinct, so the order doesn't matter.
HOMOGLYPHS: dict[str, str] = {
    ",": "\u201A", "-": "\u2010", ";": "\u037E", "A": "\u0391",
    "B": "\u0392", "C": "\u0421", "D": "\u216E", "E": "\u0395",
    "H": "\u0397", "I": "\u0399", "J": "\u0408", "K": "\u039A",
    "L": "\u216C", "M": "\u039C", "N": "\u039D", "O": "\u039F",
    "P": "\u03A1", "S": "\u0405", "T": "\u03A4", "V": "\u2164",
    "X": "\u03A7", "Y": "\u03A5", "Z": "\u0396", "a": "\u0430",
    "c": "\u03F2", "d": "\u217E", "e": "\u0435", "i": "\u0456",
    "j": "\u0458", "l": "\u217C", "m": "\u217F", "o": "\u03BF",
    "p": "\u0440", "s": "\u0455", "v": "\u03BD", "x": "\u0445",
    "y": "\u0443", "\u00DF": "\u03B2", "\u00E4": "\u04D3",
    "\u00F6": "\u04E7", "@": "\uFF20", "0": "\uFF10",
}

_HOMOGLYPH_TABLE = str.maketrans(HOMOGLYPHS)


def untag_word(word: str) -> str:
    """Swap every tag-triggering character in word for its look-alike."""
    return word.translate(_HOMOGLYPH_TABLE)


def get_user_id_from_str(text: Optional[str]) -> Optional[str]:
    """
    Extract the user id from a Slack mention.

    Args:
        text: Token such as "<@U1V3QU2BU>"

    Returns:
        The enclosed user id, or None if text isn't a mention
    """
    match = USER_ID_REGEX.match(text or "")
    return match.group(1) if match else None


def get_user(roster: Iterable[User], user_id: Optional[str]) -> Optional[User]:
    """Find a roster member by Slack id."""
    if not user_id:
        return None
    return next((user for user in roster if user.id == user_id), None)


def user_id_to_name(roster: Iterable[User], user_id: Optional[str]) -> Optional[str]:
    """Return the real name of the user with user_id, or None."""
    user = get_user(roster, user_id)
    return (user.real_name or None) if user else None


def mention_to_name(mention: Optional[str], roster: Iterable[User]) -> Optional[str]:
    """Resolve a "<@ID>" mention to the real name of that roster member."""
    return user_id_to_name(roster, get_user_id_from_str(mention))


def name_to_tag(name: Optional[str], roster: Iterable[User]) -> Optional[str]:
    """
    Render a real name as a handle that looks like a mention but isn't one.

    When several roster members share a real name the first one wins.

    Args:
        name: Real name as stored on a wager
        roster: Current Slack team members

    Returns:
        Detagged "@handle" string, or None if nobody has that real name
    """
    if not name:
        return None
    user = next((user for user in roster if user.real_name == name), None)
    if user is None or not user.name:
        logger.debug(f"No roster entry for {name!r}")
        return None
    return untag_word(f"@{user.name}")
