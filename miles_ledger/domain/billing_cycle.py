"""Credit-card billing cycle resolution"""

from datetime import date

from miles_ledger.domain.models import CardCycle
from miles_ledger.utils.date_utils import add_months, as_calendar_date, day_in_month


def resolve_statement_closing_date(transaction_date: date, cycle: CardCycle) -> date:
    """
    Closing date of the statement a purchase lands on.

    A purchase made on the closing day itself already belongs to the next
    statement.
    """
    purchase_date = as_calendar_date(transaction_date)
    closing_date = day_in_month(purchase_date.year, purchase_date.month, cycle.closing_day)

    if purchase_date >= closing_date:
        next_month = add_months(purchase_date.replace(day=1), 1)
        closing_date = day_in_month(next_month.year, next_month.month, cycle.closing_day)

    return closing_date


def resolve_first_due_date(transaction_date: date, cycle: CardCycle) -> date:
    """
    Compute the due date of the first installment of a card purchase.

    Rules:
    - Closing/due days beyond the end of a short month clamp to its last day
    - Purchase on or after the closing day rolls to the next statement
    - A statement closed in month C is paid in month C+1 on the due day

    Example:
        closing 20, due 27, purchase 2024-03-05
        -> statement closes 2024-03-20 -> due 2024-04-27
        closing 15, due 10, purchase on the 15th of M
        -> statement closes on the 15th of M+1 -> due on the 10th of M+2
    """
    closing_date = resolve_statement_closing_date(transaction_date, cycle)
    due_month = add_months(closing_date.replace(day=1), 1)
    return day_in_month(due_month.year, due_month.month, cycle.due_day)
