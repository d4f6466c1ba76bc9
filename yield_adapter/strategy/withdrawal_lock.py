"""Time lock gating recalls from the venue."""

from __future__ import annotations

from typing import Any, Dict

from yield_adapter.venue.errors import Frozen, Locked


class WithdrawalLock:
    """Unlock timestamp plus a one-way freeze latch."""

    def __init__(self, unlock_time: int = 0, *, frozen: bool = False) -> None:
        self._unlock_time = int(unlock_time)
        self._frozen = bool(frozen)

    @property
    def unlock_time(self) -> int:
        return self._unlock_time

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_unlocked(self, now: int) -> bool:
        return int(now) >= self._unlock_time

    def require_unlocked(self, now: int) -> None:
        if not self.is_unlocked(now):
            raise Locked("locked", {"now": int(now), "unlock_time": self._unlock_time})

    def set_unlock_time(self, new_time: int) -> int:
        """Overwrite the unlock time (earlier or later); returns the previous value."""
        self.require_not_frozen(new_time)
        previous = self._unlock_time
        self._unlock_time = int(new_time)
        return previous

    def require_not_frozen(self, new_time: int) -> None:
        if self._frozen:
            raise Frozen("frozen", {"unlock_time": self._unlock_time, "requested": int(new_time)})

    def freeze(self) -> bool:
        """Latch the unlock time; returns True only on the first call."""
        if self._frozen:
            return False
        self._frozen = True
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"unlock_time": self._unlock_time, "unlock_frozen": self._frozen}
