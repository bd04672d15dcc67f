"""Installment schedule generation for payables and receivables"""

from datetime import date
from typing import Optional, Tuple

from miles_ledger.domain.billing_cycle import resolve_first_due_date
from miles_ledger.domain.exceptions import InvalidAmount, InvalidInstallmentCount
from miles_ledger.domain.models import CardCycle, Installment, InstallmentPlan, InstallmentStatus
from miles_ledger.utils.date_utils import add_months, as_calendar_date


def split_installments(
    total_cents: int,
    count: int,
    anchor_date: date,
) -> Tuple[Installment, ...]:
    """
    Split a total into monthly installments.

    Requirements:
    - Every installment gets floor(total / count) cents
    - Last installment absorbs the remainder, so the sum is exact
    - Due dates are anchor_date + i calendar months, day clamped to month end

    Args:
        total_cents: Total amount to split, in cents
        count: Number of installments (>= 1)
        anchor_date: Due date of the first installment

    Returns:
        Tuple of Installment objects numbered from 1

    Raises:
        InvalidInstallmentCount: count lower than 1
        InvalidAmount: negative total

    Example:
        R$ 100.01 in 3 -> [33.33, 33.33, 33.35]
        10001 cents // 3 = 3333 base, last = 10001 - 2 * 3333 = 3335
    """
    if count < 1:
        raise InvalidInstallmentCount(f"Installment count must be at least 1, got {count}")
    if total_cents < 0:
        raise InvalidAmount(f"Total amount must not be negative, got {total_cents} cents")

    anchor = as_calendar_date(anchor_date)
    base_amount = total_cents // count
    last_amount = total_cents - base_amount * (count - 1)

    return tuple(
        Installment(
            sequence_number=i + 1,
            amount_cents=last_amount if i == count - 1 else base_amount,
            due_date=add_months(anchor, i),
        )
        for i in range(count)
    )


def build_schedule(plan: InstallmentPlan) -> Tuple[Installment, ...]:
    """Materialize an InstallmentPlan into its schedule"""
    return split_installments(plan.total_cents, plan.count, plan.anchor_date)


def plan_purchase(
    total_cents: int,
    count: int,
    transaction_date: date,
    cycle: Optional[CardCycle] = None,
    first_due_date: Optional[date] = None,
) -> InstallmentPlan:
    """
    Pick the anchor date of a payable and describe its plan.

    Card purchases are anchored on the card's first due date. Otherwise an
    explicit first due date wins, falling back to the transaction date.
    """
    if cycle is not None:
        anchor = resolve_first_due_date(transaction_date, cycle)
    elif first_due_date is not None:
        anchor = as_calendar_date(first_due_date)
    else:
        anchor = as_calendar_date(transaction_date)

    return InstallmentPlan(total_cents=total_cents, count=count, anchor_date=anchor)


def effective_status(stored_status: str, due_date: date, today: date) -> InstallmentStatus:
    """A pending installment whose due date has passed is reported as overdue"""
    status = InstallmentStatus(stored_status)
    if status is InstallmentStatus.PENDING and due_date < today:
        return InstallmentStatus.OVERDUE
    return status
