"""Token ledgers: where swap and liquidity transfers settle.

The pool never holds balances itself; it pulls from and pays out to one
ledger per token. Any object with ``debit``/``credit`` works.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from orbital.errors import InsufficientBalance, ZeroAmount


@runtime_checkable
class TokenLedger(Protocol):
    """Protocol for the external token balance store of one token."""

    def debit(self, owner: str, amount: int) -> None:
        """Pull ``amount`` from ``owner``.

        Raises:
            InsufficientBalance: If the owner cannot cover the amount
        """
        ...

    def credit(self, recipient: str, amount: int) -> None:
        """Pay ``amount`` to ``recipient``."""
        ...


class InMemoryLedger:
    """Dictionary-backed ledger for tests and the standalone service."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances) if balances else {}

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def mint(self, owner: str, amount: int) -> None:
        """Create ``amount`` new units for ``owner``."""
        if amount <= 0:
            raise ZeroAmount(f"Mint amount must be positive, got {amount}")
        self._balances[owner] = self.balance_of(owner) + amount

    def debit(self, owner: str, amount: int) -> None:
        balance = self.balance_of(owner)
        if amount > balance:
            raise InsufficientBalance(f"{owner} holds {balance}, needs {amount}")
        self._balances[owner] = balance - amount

    def credit(self, recipient: str, amount: int) -> None:
        self._balances[recipient] = self.balance_of(recipient) + amount


__all__ = ["TokenLedger", "InMemoryLedger"]
