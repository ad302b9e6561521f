"""
Command-line entry point for the pledge bot.

Runs a single chat message through the bot, which is handy for trying out
commands against a backend without a Slack connection:

    python -m pledgebot.main --user U123 --roster roster.json "pledge all"
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pledgebot.config import Config
from pledgebot.models import User
from pledgebot.pledge import handle_message
from pledgebot.slack import fetch_roster, make_channel_sink


# Configure logging
def setup_logging() -> None:
    """Configure logging for the application."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_level = getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if Config.LOG_FILE:
        Config.ensure_directories()
        handlers.append(logging.FileHandler(Config.LOG_FILE))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers
    )


logger = logging.getLogger(__name__)


def load_roster(path: Path) -> list[User]:
    """
    Load a roster from a JSON file.

    The file holds a list of Slack member objects, as returned in the
    "members" field of users.list.

    Args:
        path: Path to the JSON file

    Returns:
        List of User objects
    """
    with path.open(encoding="utf-8") as f:
        members = json.load(f)
    if isinstance(members, dict):
        members = members.get("members", [])
    return [User.from_slack(member) for member in members]


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the pledge bot CLI."""
    parser = argparse.ArgumentParser(
        description="Pledge bot - track wagers between Slack team members",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show all wagers, with the team read from a file
  python -m pledgebot.main --user U123 --roster roster.json "pledge all"

  # Propose a wager, fetching the team from Slack and replying in a channel
  python -m pledgebot.main --user U123 --slack --channel C456 \\
      'pledge <@U789> 10#"lunch" it rains tomorrow'
        """
    )
    parser.add_argument("text", help="Message text, e.g. \"pledge all\"")
    parser.add_argument("--user", required=True, help="Slack id of the sender")
    parser.add_argument(
        "--roster",
        type=Path,
        default=None,
        help="JSON file with the Slack team members"
    )
    parser.add_argument(
        "--slack",
        action="store_true",
        help="Fetch the team members from Slack (needs SLACK_BOT_TOKEN)"
    )
    parser.add_argument(
        "--channel",
        default=None,
        help="Post the reply to this Slack channel instead of printing it"
    )

    args = parser.parse_args(argv)

    setup_logging()

    is_valid, errors = Config.validate()
    if not is_valid:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return 2

    try:
        if args.roster:
            roster = load_roster(args.roster)
        elif args.slack:
            roster = fetch_roster()
        else:
            roster = []
    except (OSError, ValueError) as e:
        logger.error(f"Could not load roster from {args.roster}: {e}")
        return 2

    sink = make_channel_sink(args.channel) if args.channel else print

    try:
        handled = handle_message(args.text, args.user, roster, sink)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Fatal error while handling message: {e}", exc_info=True)
        return 1

    if not handled:
        logger.info("Message was not addressed to the bot")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
