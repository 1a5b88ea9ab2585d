"""Tax brackets and a helper that stores the computed tax in a repository."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

__all__ = [
    "InvalidAmountError",
    "TaxRepository",
    "calculate_tax",
    "calculate_tax_checked",
    "calculate_tax_slow",
    "calculate_tax_and_save",
]


class InvalidAmountError(ValueError):
    """Raised when an amount that must be positive is not."""


@runtime_checkable
class TaxRepository(Protocol):
    """Somewhere a computed tax can be stored."""

    def save_tax(self, amount: float) -> None:
        """Store the tax amount, raising on failure."""
        ...


def calculate_tax(amount: float) -> float:
    """Return the tax for ``amount``: 0, 5, 10 or 20."""
    if amount <= 0:
        return 0.0
    if 1000 <= amount < 20000:
        return 10.0
    if amount >= 20000:
        return 20.0
    return 5.0


def calculate_tax_checked(amount: float) -> float:
    """Like :func:`calculate_tax`, but reject amounts that are not positive."""
    if amount <= 0:
        raise InvalidAmountError("amount must be greater than 0")
    return calculate_tax(amount)


def calculate_tax_slow(amount: float) -> float:
    """A slower variant with only two brackets, used for benchmarking."""
    time.sleep(0.001)
    if amount == 0:
        return 0.0
    if amount >= 1000:
        return 10.0
    return 5.0


def calculate_tax_and_save(amount: float, repository: TaxRepository) -> None:
    """Compute the tax for ``amount`` and hand it to ``repository``."""
    repository.save_tax(calculate_tax(amount))