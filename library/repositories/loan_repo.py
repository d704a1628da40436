from datetime import datetime

from library.models.borrower import Borrower
from library.models.loan import Loan, LoanStatus
from library.models.title import Title
from library.models.volume import Volume


class LoanRepo:
    def __init__(self, session):
        self.session = session

    def get(self, loan_id: str):
        return self.session.get(Loan, loan_id)

    def add(self, loan: Loan):
        self.session.add(loan)
        # INSERT now so the open-loan unique key is checked inside the transaction
        self.session.flush()
        return loan

    def _detail_query(self):
        return (
            self.session.query(
                Loan,
                Title.title,
                Volume.barcode,
                Borrower.name,
                Borrower.email,
            )
            .join(Title, Loan.title_id == Title.id)
            .join(Volume, Loan.volume_id == Volume.id)
            .join(Borrower, Loan.borrower_id == Borrower.id)
        )

    def list_open_details(self):
        return (
            self._detail_query()
            .filter(Loan.status != LoanStatus.RETURNED.value)
            .order_by(Loan.loan_date.desc())
            .all()
        )

    def list_overdue_details(self, now: datetime):
        return (
            self._detail_query()
            .filter(Loan.status != LoanStatus.RETURNED.value, Loan.due_date < now)
            .order_by(Loan.due_date.asc())
            .all()
        )

    def mark_returned(self, loan_id: str, returned_at: datetime) -> int:
        return (
            self.session.query(Loan)
            .filter(Loan.id == loan_id, Loan.status != LoanStatus.RETURNED.value)
            .update(
                {
                    "status": LoanStatus.RETURNED.value,
                    "return_date": returned_at,
                    "open_volume_id": None,
                    "updated_at": returned_at,
                },
                synchronize_session="fetch",
            )
        )

    def extend(self, loan_id: str, new_due_date: datetime, now: datetime, max_extensions: int) -> int:
        """Single-row conditional UPDATE; returns the number of rows changed (0 or 1)."""
        return (
            self.session.query(Loan)
            .filter(
                Loan.id == loan_id,
                Loan.status != LoanStatus.RETURNED.value,
                Loan.extension_count < max_extensions,
            )
            .update(
                {
                    "due_date": new_due_date,
                    "extension_count": Loan.extension_count + 1,
                    "updated_at": now,
                },
                synchronize_session="fetch",
            )
        )

    def has_open_loan(self, volume_id: str) -> bool:
        return (
            self.session.query(Loan.id)
            .filter(Loan.volume_id == volume_id, Loan.status != LoanStatus.RETURNED.value)
            .first()
            is not None
        )

    def delete_returned_for_volume(self, volume_id: str) -> int:
        return (
            self.session.query(Loan)
            .filter(Loan.volume_id == volume_id, Loan.status == LoanStatus.RETURNED.value)
            .delete(synchronize_session="fetch")
        )

    def delete_returned_for_borrower(self, borrower_id: str) -> int:
        return (
            self.session.query(Loan)
            .filter(Loan.borrower_id == borrower_id, Loan.status == LoanStatus.RETURNED.value)
            .delete(synchronize_session="fetch")
        )
