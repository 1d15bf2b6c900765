"""Pure domain layer: value objects and the injectable clock."""

from workshop_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from workshop_kernel.domain.values import Currency, Money, to_decimal

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Currency",
    "Money",
    "to_decimal",
]
