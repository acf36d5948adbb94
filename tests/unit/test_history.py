"""Unit tests for per-player history construction."""

from datetime import timedelta

from src.tm_common.enums import MatchResult
from src.tm_match.domain.history import build_history_entries, match_duration_ms, result_for
from src.tm_match.domain.models import Outcome, PlayerState
from tests.factories import T0, make_match


class TestMatchDuration:
    def test_positive_duration(self) -> None:
        assert match_duration_ms(T0, T0 + timedelta(seconds=42, milliseconds=500)) == 42500

    def test_negative_duration_clamped_to_zero(self) -> None:
        assert match_duration_ms(T0, T0 - timedelta(seconds=3)) == 0

    def test_missing_start_is_zero(self) -> None:
        assert match_duration_ms(None, T0) == 0


class TestResultFor:
    def test_winner_and_loser(self) -> None:
        outcome = Outcome(winner_id="alice", is_draw=False)
        assert result_for("alice", outcome) is MatchResult.WIN
        assert result_for("bob", outcome) is MatchResult.LOSS

    def test_draw_for_both(self) -> None:
        outcome = Outcome(winner_id=None, is_draw=True)
        assert result_for("alice", outcome) is MatchResult.DRAW
        assert result_for("bob", outcome) is MatchResult.DRAW


class TestBuildHistoryEntries:
    def test_entries_are_mirrored(self) -> None:
        match = make_match(
            states={
                "alice": PlayerState(username="Alice", progress=100, finished_at=T0 + timedelta(seconds=30)),
                "bob": PlayerState(username="Bob", progress=60),
            }
        )
        completed_at = T0 + timedelta(seconds=40)

        entries = build_history_entries(match, Outcome("alice", False), completed_at)

        assert len(entries) == 2
        alice, bob = entries
        assert (alice.player_id, alice.opponent_id) == ("alice", "bob")
        assert (bob.player_id, bob.opponent_id) == ("bob", "alice")
        assert alice.opponent_username == "Bob"
        assert bob.opponent_username == "Alice"
        assert alice.result == "win"
        assert bob.result == "loss"
        assert alice.player_progress == bob.opponent_progress == 100
        assert alice.opponent_finished_at is None
        assert bob.opponent_finished_at == T0 + timedelta(seconds=30)
        # start_at is T0 + 5s
        assert alice.match_duration_ms == bob.match_duration_ms == 35000
        assert alice.puzzle_id == "cls:100"
        assert alice.created_at == T0

    def test_draw_entries(self) -> None:
        entries = build_history_entries(make_match(), Outcome(None, True), T0)
        assert [e.result for e in entries] == ["draw", "draw"]

    def test_created_at_falls_back_to_completed_at(self) -> None:
        match = make_match()
        match.created_at = None
        completed_at = T0 + timedelta(minutes=1)

        entries = build_history_entries(match, Outcome(None, True), completed_at)

        assert all(e.created_at == completed_at for e in entries)

    def test_completed_before_start_gives_zero_duration(self) -> None:
        entries = build_history_entries(make_match(), Outcome("bob", False), T0)
        assert all(e.match_duration_ms == 0 for e in entries)

    def test_missing_state_uses_defaults(self) -> None:
        match = make_match(states={"alice": PlayerState(username="Alice", progress=10)})
        entries = build_history_entries(match, Outcome("alice", False), T0)
        alice, bob = entries
        assert alice.opponent_username is None
        assert alice.opponent_progress == 0
        assert bob.player_progress == 0

    def test_player_without_opponent_is_skipped(self) -> None:
        match = make_match(players=("alice",))
        assert build_history_entries(match, Outcome("alice", False), T0) == []
