"""Host-vault capabilities the adapter consults (accounting flags and authorization)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class VaultHost(Protocol):
    def total_idle(self) -> int:
        ...

    def total_debt(self) -> int:
        ...

    def is_shutdown(self) -> bool:
        ...

    def is_management(self, caller: str) -> bool:
        ...
