"""Unit tests for installment schedule generation"""

import pytest
from datetime import date, datetime
from miles_ledger.domain.exceptions import InvalidAmount, InvalidInstallmentCount
from miles_ledger.domain.installments import (
    build_schedule,
    effective_status,
    plan_purchase,
    split_installments,
)
from miles_ledger.domain.models import CardCycle, InstallmentPlan, InstallmentStatus
from miles_ledger.utils.date_utils import add_months


def test_split_equal_amounts():
    """Test schedule with evenly divisible amount"""
    installments = split_installments(120000, 4, date(2024, 4, 27))

    assert len(installments) == 4
    assert all(inst.amount_cents == 30000 for inst in installments)
    assert sum(inst.amount_cents for inst in installments) == 120000


def test_split_last_installment_absorbs_remainder():
    """R$ 1000.00 in 3 -> 333.33, 333.33, 333.34"""
    installments = split_installments(100000, 3, date(2024, 1, 10))

    assert [inst.amount_cents for inst in installments] == [33333, 33333, 33334]


def test_split_remainder_larger_than_one_cent():
    """R$ 100.01 in 3 -> 33.33, 33.33, 33.35"""
    installments = split_installments(10001, 3, date(2024, 1, 10))

    assert [inst.amount_cents for inst in installments] == [3333, 3333, 3335]


@pytest.mark.parametrize("count", range(1, 61))
def test_split_sum_is_exact(count):
    total = 123457
    installments = split_installments(total, count, date(2024, 1, 31))

    assert sum(inst.amount_cents for inst in installments) == total
    assert [inst.sequence_number for inst in installments] == list(range(1, count + 1))


def test_split_single_installment():
    installments = split_installments(4651, 1, date(2024, 2, 29))

    assert len(installments) == 1
    assert installments[0].amount_cents == 4651
    assert installments[0].due_date == date(2024, 2, 29)


def test_split_zero_total():
    installments = split_installments(0, 3, date(2024, 1, 1))

    assert [inst.amount_cents for inst in installments] == [0, 0, 0]


def test_split_monthly_dates():
    """Test monthly due dates with year rollover"""
    installments = split_installments(120000, 4, date(2024, 11, 10))

    assert [inst.due_date for inst in installments] == [
        date(2024, 11, 10),
        date(2024, 12, 10),
        date(2025, 1, 10),
        date(2025, 2, 10),
    ]


def test_split_dates_clamp_without_drift():
    """Day 31 clamps in short months but returns to 31 afterwards"""
    installments = split_installments(50000, 5, date(2024, 1, 31))

    assert [inst.due_date for inst in installments] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
    ]


@pytest.mark.parametrize("count", [1, 2, 12, 24, 60])
def test_split_dates_follow_anchor(count):
    anchor = date(2023, 8, 31)
    installments = split_installments(99999, count, anchor)

    for i, inst in enumerate(installments):
        assert inst.due_date == add_months(anchor, i)
        assert inst.due_date.month == (anchor.month - 1 + i) % 12 + 1


def test_split_normalizes_datetime_anchor():
    installments = split_installments(1000, 2, datetime(2024, 3, 5, 23, 59))

    assert installments[0].due_date == date(2024, 3, 5)
    assert type(installments[0].due_date) is date


def test_split_is_idempotent():
    assert split_installments(10001, 7, date(2024, 5, 5)) == split_installments(10001, 7, date(2024, 5, 5))


def test_split_rejects_zero_count():
    with pytest.raises(InvalidInstallmentCount):
        split_installments(1000, 0, date(2024, 1, 1))


def test_split_rejects_negative_total():
    with pytest.raises(InvalidAmount):
        split_installments(-1, 2, date(2024, 1, 1))


def test_card_purchase_end_to_end():
    """Closing 20 / due 27, purchase 2024-03-05 of R$ 1200.00 in 4"""
    plan = plan_purchase(120000, 4, date(2024, 3, 5), cycle=CardCycle(closing_day=20, due_day=27))
    installments = build_schedule(plan)

    assert plan.anchor_date == date(2024, 4, 27)
    assert [(inst.amount_cents, inst.due_date) for inst in installments] == [
        (30000, date(2024, 4, 27)),
        (30000, date(2024, 5, 27)),
        (30000, date(2024, 6, 27)),
        (30000, date(2024, 7, 27)),
    ]


def test_plan_without_card_uses_manual_due_date():
    plan = plan_purchase(1000, 1, date(2024, 3, 5), first_due_date=date(2024, 3, 20))
    assert plan.anchor_date == date(2024, 3, 20)


def test_plan_without_card_defaults_to_transaction_date():
    plan = plan_purchase(1000, 1, date(2024, 3, 5))
    assert plan == InstallmentPlan(total_cents=1000, count=1, anchor_date=date(2024, 3, 5))


def test_effective_status_overdue():
    today = date(2024, 6, 15)

    assert effective_status("pending", date(2024, 6, 14), today) is InstallmentStatus.OVERDUE
    assert effective_status("pending", date(2024, 6, 15), today) is InstallmentStatus.PENDING
    assert effective_status("paid", date(2024, 1, 1), today) is InstallmentStatus.PAID
    assert effective_status("received", date(2024, 1, 1), today) is InstallmentStatus.RECEIVED
