"""
Presentation helpers for loans and their repayment schedules.

The schedule itself is computed by the backend; nothing here recalculates
interest or principal. These helpers only summarise and format what the
server returned.
"""

from dataclasses import dataclass
from typing import Optional

from sacco_portal.models import Loan, LoanScheduleItem


def format_currency(amount: Optional[float], currency: str = "") -> str:
    """Format an amount with thousands separators and two decimals."""
    value = f"{float(amount or 0):,.2f}"
    return f"{currency} {value}" if currency else value


def repayment_progress(loan: Loan) -> float:
    """Percentage of (approved amount + interest) paid so far."""
    total = (loan.approved_amount or 0) + (loan.total_interest or 0)
    if total <= 0:
        return 0.0
    return (loan.total_paid or 0) / total * 100


def is_overdue(loan: Loan) -> bool:
    return (loan.days_overdue or 0) > 0


def outstanding_balance(loan: Loan) -> float:
    """Outstanding balance, falling back to the approved amount before disbursement."""
    return float(loan.outstanding_balance or loan.approved_amount or 0)


@dataclass
class ScheduleSummary:
    """Aggregate view of a repayment schedule."""

    periods: int
    paid_periods: int
    overdue_periods: int
    total_principal: float
    total_interest: float
    total_payment: float
    next_installment: Optional[LoanScheduleItem]

    @property
    def remaining_periods(self) -> int:
        return self.periods - self.paid_periods


def summarize_schedule(schedule: list[LoanScheduleItem]) -> ScheduleSummary:
    items = sorted(schedule, key=lambda item: item.period)
    return ScheduleSummary(
        periods=len(items),
        paid_periods=sum(1 for item in items if item.status == "PAID"),
        overdue_periods=sum(1 for item in items if item.status == "OVERDUE"),
        total_principal=round(sum(item.principal for item in items), 2),
        total_interest=round(sum(item.interest for item in items), 2),
        total_payment=round(sum(item.total_payment for item in items), 2),
        next_installment=next((item for item in items if item.status != "PAID"), None),
    )


SCHEDULE_COLUMNS = ("#", "Due date", "Principal", "Interest", "Payment", "Balance", "Status")


def render_schedule(schedule: list[LoanScheduleItem]) -> list[str]:
    """Render the schedule as fixed-width text rows (header first)."""
    rows = [SCHEDULE_COLUMNS]
    for item in sorted(schedule, key=lambda i: i.period):
        rows.append(
            (
                str(item.period),
                item.due_date,
                format_currency(item.principal),
                format_currency(item.interest),
                format_currency(item.total_payment),
                format_currency(item.balance_after),
                item.status,
            )
        )

    widths = [max(len(row[col]) for row in rows) for col in range(len(SCHEDULE_COLUMNS))]
    lines = []
    for index, row in enumerate(rows):
        cells = [
            cell.ljust(widths[col]) if col in (1, 6) else cell.rjust(widths[col])
            for col, cell in enumerate(row)
        ]
        lines.append("  ".join(cells).rstrip())
        if index == 0:
            lines.append("  ".join("-" * w for w in widths))
    return lines
