"""Tests for pledgebot.pledge, the message dispatcher."""

from unittest.mock import MagicMock, patch

import pytest

from pledgebot.config import Config
from pledgebot.constants import Messages
from pledgebot.errors import BackendStatusError, BackendUnavailableError
from pledgebot.formatter import HELP_TEXT
from pledgebot.models import Offer, Operation, User, Wager, WagerProposal
from pledgebot.pledge import (
    error_qualifier_text,
    handle_message,
    operation_success_message,
    user_involved_in_wager,
)

SENDER = "U456"  # Bob Smith


def serve_wagers(records: list[Wager]):
    """Stand-in for api.get_wagers that filters a fixed list."""
    def get_wagers(filters=()):
        result = list(records)
        for wager_filter in filters:
            result = [wager for wager in result if wager_filter(wager)]
        return result

    return get_wagers


@pytest.fixture
def sink() -> MagicMock:
    return MagicMock()


def reply_of(sink: MagicMock) -> str:
    sink.assert_called_once()
    return sink.call_args[0][0]


class TestInvocation:
    @pytest.mark.parametrize("text", ["hello there", "pledgeall", "pledge", "", None, "say pledge all"])
    def test_ignores_other_messages(self, text, roster: list[User], sink: MagicMock) -> None:
        assert handle_message(text, SENDER, roster, sink) is False
        sink.assert_not_called()

    @pytest.mark.parametrize(
        "text",
        ["pledge help", "PLEDGE help", "@pledge help", "I pledge help", f"<@{Config.BOT_USER_ID}> help"],
    )
    def test_invocation_forms(self, text: str, roster: list[User], sink: MagicMock) -> None:
        assert handle_message(text, SENDER, roster, sink) is True
        assert reply_of(sink) == HELP_TEXT

    def test_unknown_word(self, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge frobnicate", SENDER, roster, sink)
        assert reply_of(sink) == Messages.INVALID_COMMAND

    def test_unresolved_tag(self, roster: list[User], sink: MagicMock) -> None:
        handle_message('pledge @nobody 10#20 it rains', SENDER, roster, sink)
        assert reply_of(sink) == Messages.NON_EXISTENT_USER


@patch("pledgebot.api.get_wagers")
class TestListing:
    def test_all_hides_error_statuses(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge all", SENDER, roster, sink)
        lines = reply_of(sink).split("\n")
        assert [line.split("`")[1] for line in lines] == ["1", "2", "4"]
        assert lines[0].startswith("`1`-_listed_: ")
        assert lines[1].startswith("`2`-_accepted_: ")

    def test_all_with_flag(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge -w", SENDER, roster, sink)
        assert reply_of(sink).count("\n") == 2

    def test_all_empty(self, mock_get_wagers: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_get_wagers.side_effect = serve_wagers([])
        handle_message("pledge all", SENDER, roster, sink)
        assert reply_of(sink) == Messages.NO_WAGERS

    def test_all_backend_failure(self, mock_get_wagers: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_get_wagers.side_effect = BackendUnavailableError("down")
        handle_message("pledge all", SENDER, roster, sink)
        assert reply_of(sink) == Messages.SERVER_FAILURE

    def test_mine_shows_status(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge mine", SENDER, roster, sink)
        lines = reply_of(sink).split("\n")
        # Bob is maker of 1, taker of 3 and arbiter of 4
        assert [line.split("`")[1] for line in lines] == ["1", "3", "4"]
        assert all("-_" in line for line in lines)

    def test_mine_and_status_hides_status(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge mine listed", SENDER, roster, sink)
        lines = reply_of(sink).split("\n")
        assert [line.split("`")[1] for line in lines] == ["1", "4"]
        assert all(line.startswith(f"`{line.split('`')[1]}`: ") for line in lines)

    def test_filter_order_does_not_matter(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User]
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        first, second = MagicMock(), MagicMock()
        handle_message("pledge mine listed", SENDER, roster, first)
        handle_message("pledge --listed -m", SENDER, roster, second)
        assert reply_of(first) == reply_of(second)

    def test_status_filter(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge cancelled", SENDER, roster, sink)
        assert reply_of(sink).startswith("`3`: ")

    def test_user_filter(
        self, mock_get_wagers: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers(wagers)
        handle_message("pledge user <@U789>", SENDER, roster, sink)
        lines = reply_of(sink).split("\n")
        assert [line.split("`")[1] for line in lines] == ["2", "3", "4"]

    def test_user_filter_without_mention(self, mock_get_wagers: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge user", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MISSING_USER_ARGUMENT
        mock_get_wagers.assert_not_called()

    def test_user_filter_unknown_mention(self, mock_get_wagers: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge -u <@U000>", SENDER, roster, sink)
        assert reply_of(sink) == Messages.NON_EXISTENT_USER
        mock_get_wagers.assert_not_called()

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("pledge mine", "I couldn't find any of your wagers."),
            ("pledge user <@U123>", "I couldn't find any of their wagers."),
            ("pledge listed", "I couldn't find any listed wagers."),
            ("pledge mine listed", "I couldn't find any such wagers."),
        ],
    )
    def test_empty_results(
        self, mock_get_wagers: MagicMock, text: str, expected: str, roster: list[User], sink: MagicMock
    ) -> None:
        mock_get_wagers.side_effect = serve_wagers([])
        handle_message(text, SENDER, roster, sink)
        assert reply_of(sink) == expected


@patch("pledgebot.api.get_wager")
class TestShow:
    def test_show(self, mock_get_wager: MagicMock, wagers: list[Wager], roster: list[User], sink: MagicMock) -> None:
        mock_get_wager.return_value = wagers[0]
        handle_message("pledge show 1", SENDER, roster, sink)
        mock_get_wager.assert_called_once_with("1")
        assert reply_of(sink).startswith("`1`: ")

    def test_show_record_without_id(self, mock_get_wager: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_get_wager.return_value = Wager()
        handle_message("pledge get 9", SENDER, roster, sink)
        assert reply_of(sink) == Messages.WAGER_NOT_FOUND

    def test_show_not_found(self, mock_get_wager: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_get_wager.side_effect = BackendStatusError(404)
        handle_message("pledge -s 9", SENDER, roster, sink)
        assert reply_of(sink) == Messages.WAGER_NOT_FOUND

    def test_show_without_id(self, mock_get_wager: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge show", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MISSING_ID_ARGUMENT
        mock_get_wager.assert_not_called()


@patch("pledgebot.api.create_operation")
class TestOperations:
    def test_accept(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.return_value = {}
        handle_message("pledge accept 12", SENDER, roster, sink)
        mock_create.assert_called_once_with(Operation(kind="accept", wager_id="12", user="Bob Smith"))
        assert reply_of(sink) == (
            "You've accepted the wager!\n"
            "The wager can be closed by saying: `pledge close 12`"
        )

    def test_reject_has_no_follow_up(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.return_value = {}
        handle_message("pledge -r 3", SENDER, roster, sink)
        mock_create.assert_called_once_with(Operation(kind="reject", wager_id="3", user="Bob Smith"))
        assert reply_of(sink) == "You've rejected the wager!"

    def test_shared_alias_resolves_to_reject(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.return_value = {}
        handle_message("pledge remove 3", SENDER, roster, sink)
        assert mock_create.call_args[0][0].kind == "reject"

    def test_missing_id(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge accept", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MISSING_ID_ARGUMENT
        mock_create.assert_not_called()

    def test_non_numeric_id(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge close twelve", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MISSING_ID_ARGUMENT
        mock_create.assert_not_called()

    def test_non_ascii_digit_id(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge accept " + chr(0x0661) + chr(0x0662), SENDER, roster, sink)
        assert reply_of(sink) == Messages.MISSING_ID_ARGUMENT
        mock_create.assert_not_called()

    def test_sender_without_real_name_sends_no_user(self, mock_create: MagicMock, sink: MagicMock) -> None:
        mock_create.return_value = {}
        roster = [User(id="U456", name="bob", real_name="")]
        handle_message("pledge reject 3", SENDER, roster, sink)
        mock_create.assert_called_once_with(Operation(kind="reject", wager_id="3", user=None))
        assert "user" not in mock_create.call_args[0][0].to_payload()

    def test_unprocessable(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.side_effect = BackendStatusError(422)
        handle_message("pledge accept 12", SENDER, roster, sink)
        assert reply_of(sink) == "You can't accept that wager."

    def test_transport_failure(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.side_effect = BackendUnavailableError("down")
        handle_message("pledge --take 12", SENDER, roster, sink)
        assert reply_of(sink) == Messages.SERVER_FAILURE


@patch("pledgebot.api.create_operation")
class TestPropose:
    def test_propose(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.return_value = {}
        handle_message('pledge <@U123> 10.00#"walk the dog" who wins the bet', SENDER, roster, sink)
        mock_create.assert_called_once_with(
            Operation(kind="propose"),
            wager=WagerProposal(
                maker="Bob Smith",
                taker="Jane Doe",
                maker_offer=Offer(amount="10.00", currency=Config.DEFAULT_CURRENCY),
                taker_offer=Offer(description="walk the dog"),
                outcome="who wins the bet",
            ),
        )
        assert reply_of(sink) == Messages.PROPOSE_SUCCESS

    def test_malformed(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge <@U123> 10 20 it rains", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MALFORMED_PLEDGE
        mock_create.assert_not_called()

    def test_mention_without_pledge(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge <@U123>", SENDER, roster, sink)
        assert reply_of(sink) == Messages.MALFORMED_PLEDGE
        mock_create.assert_not_called()

    def test_unknown_taker(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        handle_message("pledge <@U000> 10#20 it rains", SENDER, roster, sink)
        assert reply_of(sink) == Messages.NON_EXISTENT_USER
        mock_create.assert_not_called()

    def test_backend_rejects(self, mock_create: MagicMock, roster: list[User], sink: MagicMock) -> None:
        mock_create.side_effect = BackendStatusError(422)
        handle_message("pledge <@U123> 10#20 it rains", SENDER, roster, sink)
        assert reply_of(sink) == Messages.PROPOSE_FAILURE


class TestHelpers:
    def test_user_involved_in_wager(self) -> None:
        wager = Wager(id="1", maker="A", taker="B", arbiter="C")
        assert user_involved_in_wager("A")(wager)
        assert user_involved_in_wager("C")(wager)
        assert not user_involved_in_wager("D")(wager)

    def test_unknown_user_is_never_involved(self) -> None:
        assert not user_involved_in_wager(None)(Wager(id="1", maker="A", taker="B"))

    def test_error_qualifier_text(self) -> None:
        assert error_qualifier_text(["mine"]) == "of your"
        assert error_qualifier_text(["user"]) == "of their"
        assert error_qualifier_text(["expired"]) == "expired"
        assert error_qualifier_text(["mine", "mine"]) == "such"

    def test_operation_success_message(self) -> None:
        assert operation_success_message("take", "4") == (
            "You've taken the wager!\n"
            "The wager can be confirmed by saying: `pledge accept 4`"
        )
        assert operation_success_message("cancel", "4") == "You've cancelled the wager!"
