import pytest

from yield_adapter.strategy.withdrawal_lock import WithdrawalLock
from yield_adapter.venue.errors import Frozen, Locked


def test_unlock_boundary_is_inclusive():
    lock = WithdrawalLock(1_000)
    assert not lock.is_unlocked(999)
    assert lock.is_unlocked(1_000)
    with pytest.raises(Locked) as exc:
        lock.require_unlocked(999)
    assert exc.value.details == {"now": 999, "unlock_time": 1_000}


def test_unlock_time_can_move_earlier_or_later():
    lock = WithdrawalLock(1_000)
    assert lock.set_unlock_time(5_000) == 1_000
    assert lock.set_unlock_time(10) == 5_000
    assert lock.unlock_time == 10


def test_freeze_is_idempotent_and_blocks_changes():
    lock = WithdrawalLock(1_000)
    assert lock.freeze() is True
    assert lock.freeze() is False
    for requested in (0, 1_000, 2_000):
        with pytest.raises(Frozen):
            lock.set_unlock_time(requested)
    assert lock.to_dict() == {"unlock_time": 1_000, "unlock_frozen": True}
