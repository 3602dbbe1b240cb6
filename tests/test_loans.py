"""
Tests for loan presentation helpers.
"""

import pytest

from sacco_portal.loans import (
    format_currency,
    is_overdue,
    outstanding_balance,
    render_schedule,
    repayment_progress,
    summarize_schedule,
)
from sacco_portal.models import Loan, LoanScheduleItem


def item(period, status="PENDING", principal=4000.0, interest=500.0):
    return LoanScheduleItem(
        period=period,
        due_date=f"2024-0{period}-01",
        principal=principal,
        interest=interest,
        total_payment=principal + interest,
        balance_after=50000 - principal * period,
        status=status,
    )


class TestFormatting:
    def test_format_currency(self):
        assert format_currency(45000) == "45,000.00"
        assert format_currency(1234.5, "ETB") == "ETB 1,234.50"
        assert format_currency(None) == "0.00"


class TestLoanHelpers:
    def test_repayment_progress(self):
        loan = Loan(id="L1", approved_amount=50000, total_interest=5000, total_paid=11000)
        assert repayment_progress(loan) == pytest.approx(20.0)

    def test_repayment_progress_without_amount(self):
        assert repayment_progress(Loan(id="L1")) == 0.0

    def test_overdue(self):
        assert is_overdue(Loan(id="L1", days_overdue=3)) is True
        assert is_overdue(Loan(id="L1")) is False

    def test_outstanding_falls_back_to_approved(self):
        assert outstanding_balance(Loan(id="L1", approved_amount=20000)) == 20000.0
        assert outstanding_balance(
            Loan(id="L1", approved_amount=20000, outstanding_balance=12000)
        ) == 12000.0


class TestSchedule:
    def test_summary(self):
        schedule = [item(3), item(1, "PAID"), item(2, "OVERDUE")]
        summary = summarize_schedule(schedule)
        assert summary.periods == 3
        assert summary.paid_periods == 1
        assert summary.overdue_periods == 1
        assert summary.remaining_periods == 2
        assert summary.total_principal == 12000.0
        assert summary.total_payment == 13500.0
        assert summary.next_installment.period == 2

    def test_summary_fully_paid(self):
        summary = summarize_schedule([item(1, "PAID")])
        assert summary.next_installment is None

    def test_render(self):
        lines = render_schedule([item(2), item(1, "PAID")])
        assert lines[0].split() == [
            "#", "Due", "date", "Principal", "Interest", "Payment", "Balance", "Status"
        ]
        assert set(lines[1].replace(" ", "")) == {"-"}
        assert lines[2].split()[0] == "1"
        assert lines[2].endswith("PAID")
        assert "4,500.00" in lines[3]
        assert len(lines) == 4
