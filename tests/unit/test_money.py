"""
Unit tests for minor-unit money helpers.
"""

from __future__ import annotations

import pytest

from stay_ledger.utils.money import format_money, is_positive_cents


@pytest.mark.unit
@pytest.mark.parametrize(
    "cents,expected",
    [
        (10000, "USD 100.00"),
        (5, "USD 0.05"),
        (123456, "USD 1234.56"),
        (0, "USD 0.00"),
        (-2550, "-USD 25.50"),
    ],
)
def test_format_money(cents: int, expected: str) -> None:
    assert format_money(cents, "USD") == expected


@pytest.mark.unit
def test_is_positive_cents_accepts_only_positive_ints() -> None:
    assert is_positive_cents(1)
    assert is_positive_cents(30000)

    assert not is_positive_cents(0)
    assert not is_positive_cents(-100)
    assert not is_positive_cents(10.0)
    assert not is_positive_cents("100")
    assert not is_positive_cents(True)
    assert not is_positive_cents(None)
