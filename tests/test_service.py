"""
End-to-end tests for the points jar service.

Walks through tapping, redeeming, undoing and history reversal
the way a front end drives them.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from grumblejar.core.config import Config
from grumblejar.core.db import InitializationError, StoreError
from grumblejar.core.models import MAX_INT, LedgerEntry, Reward
from grumblejar.core.utils import utcnow
from grumblejar.ledger import balance, history, log
from grumblejar.service import PointsJar


def totals(jar):
    stats = jar.status()
    return stats.current_balance, stats.lifetime_total


class TestTap:
    """Test crediting irritants."""

    def test_tap_credits_logs_and_arms(self, jar):
        irritant = jar.add_irritant("Printer jam", 10)

        snapshot = jar.tap(irritant.id)

        assert totals(jar) == (10, 10)
        history = jar.history()
        assert [(e.label, e.point_delta, e.is_redemption) for e in history] == [
            ("Printer jam", 10, False),
        ]
        assert jar.pending_undo == snapshot
        assert snapshot.entry_id == history[0].id

    def test_tap_unknown_irritant(self, jar):
        assert jar.tap(12345) is None
        assert totals(jar) == (0, 0)
        assert jar.pending_undo is None

    def test_undo_tap(self, jar):
        irritant = jar.add_irritant("Printer jam", 10)
        jar.tap(irritant.id)

        assert jar.undo() is not None

        assert totals(jar) == (0, 0)
        assert jar.history() == []

    def test_double_tap_only_second_undoable(self, jar):
        small = jar.add_irritant("Small", 5)
        big = jar.add_irritant("Big", 50)
        jar.tap(small.id)
        jar.tap(big.id)

        undone = jar.undo()

        assert undone.points == 50
        assert totals(jar) == (5, 5)
        assert [e.label for e in jar.history()] == ["Small"]
        assert jar.undo() is None

    def test_undo_after_window(self, jar, clock):
        irritant = jar.add_irritant("Printer jam", 10)
        jar.tap(irritant.id)
        clock.advance(4)

        assert jar.undo() is None
        assert totals(jar) == (10, 10)

    def test_undo_retry_after_store_failure(self, jar):
        irritant = jar.add_irritant("Printer jam", 10)
        snapshot = jar.tap(irritant.id)

        with patch("grumblejar.ledger.undo.balance.reverse_credit", side_effect=StoreError("locked")):
            assert jar.undo() is None

        assert jar.pending_undo == snapshot
        assert totals(jar) == (10, 10)
        assert jar.undo() == snapshot
        assert totals(jar) == (0, 0)

    def test_undo_deleted_reward(self, jar):
        reward = jar.add_reward("Cake", 25)
        jar.delete_reward(reward.id)

        assert jar.undo().message == 'Deleted "Cake"'
        assert [r.name for r in jar.rewards()] == ["Cake"]

    def test_log_failure_still_credits_and_arms(self, jar):
        irritant = jar.add_irritant("Printer jam", 10)

        with patch("grumblejar.service.log.append", side_effect=StoreError("full")):
            snapshot = jar.tap(irritant.id)

        assert snapshot.entry_id is None
        assert totals(jar) == (10, 10)
        jar.undo()
        assert totals(jar) == (0, 0)


class TestRedeem:
    """Test the redemption flow."""

    def test_blocked_when_short(self, jar):
        irritant = jar.add_irritant("Rain", 5)
        reward = jar.add_reward("Cake", 10)
        jar.tap(irritant.id)

        assert jar.redeem(reward.id) is None
        assert totals(jar) == (5, 5)

    def test_exact_debit(self, jar):
        irritant = jar.add_irritant("Rain", 30)
        reward = jar.add_reward("Cake", 25)
        jar.tap(irritant.id)

        entry = jar.redeem(reward.id)

        assert entry.point_delta == -25
        assert entry.is_redemption
        assert totals(jar) == (5, 30)

    def test_unknown_reward(self, jar):
        assert jar.redeem(999) is None

    def test_out_of_range_cost_blocked(self, jar, store):

        balance.credit(store, 2_000_000)
        reward = store.insert(Reward(name="Island", required_points=1_000_000, sort_order=0))

        assert jar.redeem(reward.id) is None
        assert jar.status().current_balance == 2_000_000

    def test_credit_redeem_reverse_scenario(self, jar, clock):
        """0 -> tap 10 -> redeem 10 -> reverse redemption from history."""
        assert totals(jar) == (0, 0)

        irritant = jar.add_irritant("Meeting that could be an email", 10)
        reward = jar.add_reward("Ice cream", 10)

        jar.tap(irritant.id)
        assert totals(jar) == (10, 10)
        clock.advance(5)

        entry = jar.redeem(reward.id)
        assert totals(jar) == (0, 10)

        # Redemption never takes the undo slot
        assert jar.pending_undo is None
        assert jar.undo() is None
        assert totals(jar) == (0, 10)

        jar.reverse(entry.id)
        assert totals(jar) == (10, 10)
        assert entry.id not in [e.id for e in jar.history()]

    def test_redeem_leaves_pending_credit_alone(self, jar):
        irritant = jar.add_irritant("Rain", 10)
        reward = jar.add_reward("Cake", 10)
        snapshot = jar.tap(irritant.id)

        jar.redeem(reward.id)

        assert jar.pending_undo == snapshot


class TestHistoryReversal:
    """Test reversing entries from history."""

    def test_reverse_credit_entry(self, jar):
        irritant = jar.add_irritant("Rain", 10)
        jar.tap(irritant.id)
        jar.tap(irritant.id)
        entry = jar.history()[0]

        jar.reverse(entry.id)

        assert totals(jar) == (10, 10)
        assert len(jar.history()) == 1

    def test_reverse_clamps_at_zero(self, jar, store):
        entry = store.insert(LedgerEntry(label="ghost", point_delta=50, timestamp=utcnow()))

        jar.reverse(entry.id)

        assert totals(jar) == (0, 0)

    def test_reverse_missing_entry(self, jar):
        assert jar.reverse(777) is None

    def test_history_by_day(self, jar):
        irritant = jar.add_irritant("Rain", 10)
        jar.tap(irritant.id)
        jar.tap(irritant.id)

        groups = jar.history_by_day()

        assert len(groups) == 1
        assert len(groups[0][1]) == 2

    def test_reverse_redemption_caps_current(self, jar, store):
        b = balance.ensure_balance(store)
        b.current_balance = MAX_INT - 5
        b.lifetime_total = 100
        store.update(b)
        entry = store.insert(LedgerEntry(label="Yacht", point_delta=-50, timestamp=utcnow(), is_redemption=True))

        jar.reverse(entry.id)

        assert totals(jar) == (MAX_INT - 1, 100)

    def test_reverse_credit_clamps_each_field(self, store):
        b = balance.ensure_balance(store)
        b.current_balance = 5
        b.lifetime_total = 100
        store.update(b)
        entry = store.insert(LedgerEntry(label="Rain", point_delta=20, timestamp=utcnow()))

        result = history.reverse_entry(store, entry.id)

        assert (result.current_balance, result.lifetime_total) == (0, 80)
        assert log.get_entry(store, entry.id) is None

    def test_history_by_day_with_unknown_timezone(self, store, config, undo):
        config.timezone = "Mars/Olympus"
        jar = PointsJar(store, config, undo=undo)
        irritant = jar.add_irritant("Rain", 10)
        jar.tap(irritant.id)

        groups = jar.history_by_day()

        assert len(groups) == 1
        assert groups[0][0] == jar.history()[0].timestamp.date()


class TestItems:
    """Test managing irritants and rewards through the service."""

    @pytest.mark.parametrize("name,points", [
        ("", 10),
        ("   ", 10),
        ("Rain", 0),
        ("Rain", -3),
        ("Rain", 1_000_000),
    ])
    def test_invalid_input_rejected(self, jar, name, points):
        assert jar.add_irritant(name, points) is None
        assert jar.add_reward(name, points) is None
        assert jar.irritants() == []
        assert jar.rewards() == []

    def test_name_is_stripped(self, jar):
        assert jar.add_irritant("  Rain  ", 10).name == "Rain"

    def test_edit(self, jar):
        irritant = jar.add_irritant("Rain", 10)

        assert jar.edit_irritant(irritant.id, "Heavy rain", 20) is not None
        assert jar.edit_irritant(irritant.id, "", 20) is None

        [stored] = jar.irritants()
        assert (stored.name, stored.points) == ("Heavy rain", 20)

    def test_edit_reward(self, jar):
        reward = jar.add_reward("Cake", 100)
        jar.edit_reward(reward.id, "Big cake", 150)
        [stored] = jar.rewards()
        assert (stored.name, stored.required_points) == ("Big cake", 150)

    def test_delete_and_undo(self, jar):
        jar.add_irritant("A", 1)
        b = jar.add_irritant("B", 2)
        jar.add_irritant("C", 3)

        snapshot = jar.delete_irritant(b.id)
        assert [i.name for i in jar.irritants()] == ["A", "C"]
        assert jar.pending_undo == snapshot

        jar.undo()
        assert [i.name for i in jar.irritants()] == ["A", "B", "C"]

    def test_delete_supersedes_pending_tap(self, jar):
        a = jar.add_irritant("A", 10)
        b = jar.add_irritant("B", 2)
        jar.tap(a.id)
        jar.delete_irritant(b.id)

        jar.undo()

        # The tap is now permanent; only the deletion came back
        assert totals(jar) == (10, 10)
        assert [i.name for i in jar.irritants()] == ["A", "B"]

    def test_delete_reward_and_undo(self, jar):
        reward = jar.add_reward("Cake", 100)
        jar.delete_reward(reward.id)
        assert jar.rewards() == []

        jar.undo()
        [restored] = jar.rewards()
        assert restored.name == "Cake"
        assert restored.id != reward.id

    def test_delete_missing(self, jar):
        assert jar.delete_irritant(404) is None
        assert jar.pending_undo is None

    def test_move(self, jar):
        for name in ("A", "B", "C"):
            jar.add_irritant(name, 10)

        assert jar.move_irritant(2, 0)
        assert [(i.name, i.sort_order) for i in jar.irritants()] == [("C", 0), ("A", 1), ("B", 2)]
        assert jar.move_irritant(0, 5) is False

    def test_move_reward(self, jar):
        for name in ("X", "Y"):
            jar.add_reward(name, 10)
        assert jar.move_reward(0, 1)
        assert [r.name for r in jar.rewards()] == ["Y", "X"]


class TestLifecycle:
    """Test startup, onboarding and failure handling."""

    def test_onboarding_creates_first_irritant(self, jar):
        irritant = jar.complete_onboarding("Alarm clock", "30")
        assert (irritant.name, irritant.points, irritant.sort_order) == ("Alarm clock", 30, 0)
        assert totals(jar) == (0, 0)

    def test_onboarding_default_points(self, jar):
        assert jar.complete_onboarding("Alarm clock", "lots").points == 10

    def test_onboarding_skip(self, jar):
        assert jar.complete_onboarding("   ") is None
        assert jar.irritants() == []

    def test_startup_prunes_once(self, jar, store):
        store.insert(LedgerEntry(label="old", point_delta=1, timestamp=utcnow() - timedelta(days=60)))
        store.insert(LedgerEntry(label="new", point_delta=1, timestamp=utcnow()))

        assert jar.startup() == 1
        assert jar.startup() == 0
        assert [e.label for e in jar.history()] == ["new"]

    def test_store_failures_do_not_raise(self, jar, store):
        with patch.object(store, "session_scope", side_effect=StoreError("gone")), \
                patch.object(store, "fetch", side_effect=StoreError("gone")), \
                patch.object(store, "get", side_effect=StoreError("gone")), \
                patch.object(store, "insert", side_effect=StoreError("gone")):
            assert totals(jar) == (0, 0)
            assert jar.irritants() == []
            assert jar.add_reward("Cake", 10) is None
            assert jar.tap(1) is None
            assert jar.redeem(1) is None
            assert jar.reverse(1) is None
            assert jar.delete_irritant(1) is None
            assert jar.move_irritant(0, 1) is False
            assert jar.history() == []
            assert jar.undo() is None

    def test_open_failure_is_fatal(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        config = Config(database_path=str(blocker / "jar.db"))

        with pytest.raises(InitializationError):
            PointsJar.open(config)
