"""Read-side projections of the loan ledger.

Overdue is never written by a background job: a loan is overdue when it is
still open and its due date lies before "now". Every read path goes through
``is_overdue`` with the same clock so the list endpoints always agree.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from library.models.loan import Loan, LoanStatus
from library.repositories.loan_repo import LoanRepo
from library.utils.timestamps import to_epoch, utcnow


def is_overdue(loan: Loan, now: datetime) -> bool:
    return loan.status != LoanStatus.RETURNED and loan.due_date < now


def effective_status(loan: Loan, now: datetime) -> LoanStatus:
    if loan.status == LoanStatus.RETURNED:
        return LoanStatus.RETURNED
    if loan.due_date < now:
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE


@dataclass
class LoanDetail:
    loan: Loan
    title: str
    barcode: str
    borrower_name: str
    borrower_email: str | None
    status: LoanStatus
    is_overdue: bool

    def to_json(self) -> dict:
        loan = self.loan
        data = {
            "id": loan.id,
            "title_id": loan.title_id,
            "volume_id": loan.volume_id,
            "borrower_id": loan.borrower_id,
            "loan_date": to_epoch(loan.loan_date),
            "due_date": to_epoch(loan.due_date),
            "extension_count": loan.extension_count,
            "status": self.status.value,
            "created_at": to_epoch(loan.created_at),
            "updated_at": to_epoch(loan.updated_at),
            "title": self.title,
            "barcode": self.barcode,
            "borrower_name": self.borrower_name,
            "borrower_email": self.borrower_email,
            "is_overdue": self.is_overdue,
        }
        if loan.return_date is not None:
            data["return_date"] = to_epoch(loan.return_date)
        return data


class LoanStatusProjector:
    def __init__(self, session, loans: LoanRepo | None = None, clock: Callable[[], datetime] = utcnow):
        self.loans = loans or LoanRepo(session)
        self.clock = clock

    def _details(self, rows, now):
        return [
            LoanDetail(
                loan=loan,
                title=title,
                barcode=barcode,
                borrower_name=borrower_name,
                borrower_email=borrower_email,
                status=effective_status(loan, now),
                is_overdue=is_overdue(loan, now),
            )
            for loan, title, barcode, borrower_name, borrower_email in rows
        ]

    def active_loans(self) -> list[LoanDetail]:
        """Every open loan, newest first, each flagged overdue or not."""
        now = self.clock()
        return self._details(self.loans.list_open_details(), now)

    def overdue_loans(self) -> list[LoanDetail]:
        """Open loans past due, most overdue first."""
        now = self.clock()
        return self._details(self.loans.list_overdue_details(now), now)
