"""Unit tests for the winner resolver."""

from datetime import timedelta

import pytest

from src.tm_match.domain.models import Outcome, PlayerState
from src.tm_match.domain.resolver import resolve_winner
from tests.factories import T0


def _state(progress: float = 0, finished_after: float | None = None) -> PlayerState:
    finished_at = T0 + timedelta(seconds=finished_after) if finished_after is not None else None
    return PlayerState(progress=progress, finished_at=finished_at)


class TestFinishedVersusUnfinished:
    def test_finisher_beats_higher_progress(self) -> None:
        outcome = resolve_winner(
            ["A", "B"],
            {"A": _state(progress=80, finished_after=30), "B": _state(progress=95)},
        )
        assert outcome == Outcome(winner_id="A", is_draw=False)

    def test_order_of_players_does_not_matter(self) -> None:
        outcome = resolve_winner(
            ["B", "A"],
            {"A": _state(progress=80, finished_after=30), "B": _state(progress=95)},
        )
        assert outcome.winner_id == "A"


class TestBothUnfinished:
    def test_higher_progress_wins(self) -> None:
        outcome = resolve_winner(["A", "B"], {"A": _state(40), "B": _state(70)})
        assert outcome == Outcome(winner_id="B", is_draw=False)

    def test_equal_progress_is_draw(self) -> None:
        outcome = resolve_winner(["A", "B"], {"A": _state(50), "B": _state(50)})
        assert outcome == Outcome(winner_id=None, is_draw=True)

    def test_both_zero_is_draw(self) -> None:
        outcome = resolve_winner(["A", "B"], {"A": _state(), "B": _state()})
        assert outcome.is_draw


class TestBothFinished:
    def test_earlier_finish_wins(self) -> None:
        outcome = resolve_winner(
            ["A", "B"],
            {"A": _state(100, finished_after=10), "B": _state(100, finished_after=20)},
        )
        assert outcome == Outcome(winner_id="A", is_draw=False)

    def test_earlier_finish_wins_regardless_of_progress(self) -> None:
        outcome = resolve_winner(
            ["A", "B"],
            {"A": _state(10, finished_after=25), "B": _state(90, finished_after=15)},
        )
        assert outcome.winner_id == "B"

    def test_same_instant_is_draw(self) -> None:
        outcome = resolve_winner(
            ["A", "B"],
            {"A": _state(100, finished_after=12), "B": _state(100, finished_after=12)},
        )
        assert outcome == Outcome(winner_id=None, is_draw=True)


class TestMissingState:
    def test_missing_state_counts_as_zero_progress(self, caplog: pytest.LogCaptureFixture) -> None:
        outcome = resolve_winner(["A", "B"], {"A": _state(5)})
        assert outcome.winner_id == "A"
        assert "Player state missing for player B" in caplog.text

    def test_both_missing_is_draw(self) -> None:
        outcome = resolve_winner(["A", "B"], {})
        assert outcome.is_draw

    def test_explicit_none_state_is_treated_as_missing(self) -> None:
        outcome = resolve_winner(["A", "B"], {"A": None, "B": _state(1)})
        assert outcome.winner_id == "B"


class TestPlayerCount:
    @pytest.mark.parametrize("players", [[], ["A"], ["A", "B", "C"], ["A", "A"]])
    def test_rejects_anything_but_two_distinct_players(self, players: list[str]) -> None:
        with pytest.raises(ValueError, match="exactly 2 distinct players"):
            resolve_winner(players, {})
