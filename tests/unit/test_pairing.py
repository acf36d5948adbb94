"""Unit tests for PairingEngine using mock repositories."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from src.tm_queue.application.pairing import PairingEngine, new_match_id
from src.tm_queue.domain.models import QueueEntry
from src.tm_queue.domain.puzzle import PUZZLE_POOL
from tests.factories import T0, inline_transact

NOW = T0 + timedelta(minutes=10)


def _entry(user_id: str, seconds_ago: float = 1) -> QueueEntry:
    return QueueEntry(
        user_id=user_id,
        username=user_id.title(),
        avatar=f"{user_id}.png",
        joined_at=NOW - timedelta(seconds=seconds_ago),
    )


def _engine(queue_repo: AsyncMock, match_repo: AsyncMock, db: MagicMock | None = None) -> PairingEngine:
    return PairingEngine(
        queue_repo=queue_repo,
        match_repo=match_repo,
        transact=inline_transact(db or MagicMock()),
        clock=lambda: NOW,
        pick_puzzle=lambda: "cls:123",
        make_match_id=lambda: "m-fixed",
    )


def _queue_with(*entries: QueueEntry, partner: QueueEntry | None = None) -> AsyncMock:
    by_id = {e.user_id: e for e in entries}
    repo = AsyncMock()
    repo.get_entry.side_effect = lambda db, user_id, for_update=False: by_id.get(user_id)
    repo.find_oldest_partner.return_value = partner
    repo.delete_entries.return_value = 2
    return repo


class TestPairing:
    async def test_creates_match_and_removes_both_entries(self) -> None:
        alice, bob = _entry("alice", 1), _entry("bob", 3)
        queue_repo = _queue_with(alice, bob, partner=bob)
        match_repo = AsyncMock()

        match = await _engine(queue_repo, match_repo).on_queue_entry_changed("alice")

        assert match is not None
        assert match.id == "m-fixed"
        assert match.players == ["alice", "bob"]
        assert match.puzzle_id == "cls:123"
        assert match.created_at == NOW
        assert match.start_at == NOW + timedelta(seconds=5)
        assert match.max_duration == 85
        assert match.player_states["bob"].username == "Bob"
        assert match.player_states["bob"].avatar == "bob.png"
        assert match.player_states["alice"].progress == 0
        assert match.winner is None
        match_repo.create_match.assert_awaited_once()
        queue_repo.delete_entries.assert_awaited_once()
        assert queue_repo.delete_entries.await_args.args[1] == ["alice", "bob"]

    async def test_partner_query_uses_ttl_cutoff_and_excludes_self(self) -> None:
        alice = _entry("alice")
        queue_repo = _queue_with(alice, partner=None)
        db = MagicMock()

        await _engine(queue_repo, AsyncMock(), db).on_queue_entry_changed("alice")

        queue_repo.find_oldest_partner.assert_awaited_once_with(
            db, "alice", NOW - timedelta(seconds=45)
        )

    async def test_own_entry_locked_for_update(self) -> None:
        queue_repo = _queue_with(_entry("alice"), partner=None)
        await _engine(queue_repo, AsyncMock()).on_queue_entry_changed("alice")
        assert queue_repo.get_entry.await_args_list[0].kwargs == {"for_update": True}


class TestAborts:
    async def test_own_entry_gone(self) -> None:
        queue_repo = _queue_with()
        match_repo = AsyncMock()

        assert await _engine(queue_repo, match_repo).on_queue_entry_changed("alice") is None
        queue_repo.find_oldest_partner.assert_not_called()
        match_repo.create_match.assert_not_called()

    async def test_no_partner(self) -> None:
        queue_repo = _queue_with(_entry("alice"), partner=None)
        match_repo = AsyncMock()

        assert await _engine(queue_repo, match_repo).on_queue_entry_changed("alice") is None
        match_repo.create_match.assert_not_called()
        queue_repo.delete_entries.assert_not_called()

    async def test_partner_vanished_before_lock(self) -> None:
        bob = _entry("bob")
        # bob is returned by the scan but gone on the locked re-read
        queue_repo = _queue_with(_entry("alice"), partner=bob)
        match_repo = AsyncMock()

        assert await _engine(queue_repo, match_repo).on_queue_entry_changed("alice") is None
        match_repo.create_match.assert_not_called()

    async def test_failure_is_logged_not_raised(self) -> None:
        queue_repo = AsyncMock()
        queue_repo.get_entry.side_effect = RuntimeError("db down")

        assert await _engine(queue_repo, AsyncMock()).on_queue_entry_changed("alice") is None

    async def test_second_delivery_after_pairing_is_noop(self) -> None:
        alice, bob = _entry("alice"), _entry("bob")
        queue_repo = _queue_with(alice, bob, partner=bob)
        match_repo = AsyncMock()
        engine = _engine(queue_repo, match_repo)

        assert await engine.on_queue_entry_changed("alice") is not None
        # Entries are deleted by the first run
        queue_repo.get_entry.side_effect = lambda db, user_id, for_update=False: None
        assert await engine.on_queue_entry_changed("alice") is None
        assert match_repo.create_match.await_count == 1


class TestDefaults:
    def test_match_ids_are_random_hex(self) -> None:
        a, b = new_match_id(), new_match_id()
        assert a != b
        assert len(a) == 32
        int(a, 16)

    async def test_default_puzzle_is_from_pool(self) -> None:
        alice, bob = _entry("alice"), _entry("bob")
        engine = PairingEngine(
            queue_repo=_queue_with(alice, bob, partner=bob),
            match_repo=AsyncMock(),
            transact=inline_transact(MagicMock()),
        )
        match = await engine.on_queue_entry_changed("alice")
        assert match is not None
        assert match.puzzle_id in PUZZLE_POOL
