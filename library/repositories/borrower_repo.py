from __future__ import annotations

from sqlalchemy import func

from library.models.borrower import Borrower, BorrowerGroup
from library.models.loan import Loan, LoanStatus


class BorrowerRepo:
    def __init__(self, session):
        self.session = session

    def get(self, borrower_id: str):
        return self.session.get(Borrower, borrower_id)

    def policy_row(self, borrower_id: str, default_days: int):
        """(name, loan_duration_days) read in one statement, or None."""
        return (
            self.session.query(
                Borrower.name,
                func.coalesce(BorrowerGroup.loan_duration_days, default_days),
            )
            .outerjoin(BorrowerGroup, Borrower.group_id == BorrowerGroup.id)
            .filter(Borrower.id == borrower_id)
            .first()
        )

    def list_with_groups(self):
        open_loans = (
            self.session.query(Loan.borrower_id, func.count(Loan.id).label("active_loan_count"))
            .filter(Loan.status != LoanStatus.RETURNED.value)
            .group_by(Loan.borrower_id)
            .subquery()
        )
        return (
            self.session.query(
                Borrower,
                BorrowerGroup.name,
                BorrowerGroup.loan_duration_days,
                func.coalesce(open_loans.c.active_loan_count, 0),
            )
            .outerjoin(BorrowerGroup, Borrower.group_id == BorrowerGroup.id)
            .outerjoin(open_loans, open_loans.c.borrower_id == Borrower.id)
            .order_by(Borrower.name)
            .all()
        )

    def count_open_loans(self, borrower_id: str) -> int:
        return (
            self.session.query(func.count(Loan.id))
            .filter(Loan.borrower_id == borrower_id, Loan.status != LoanStatus.RETURNED.value)
            .scalar()
        )

    def add(self, borrower: Borrower):
        self.session.add(borrower)
        self.session.flush()
        return borrower

    def delete(self, borrower: Borrower):
        self.session.delete(borrower)
        self.session.flush()


class BorrowerGroupRepo:
    def __init__(self, session):
        self.session = session

    def get(self, group_id: str):
        return self.session.get(BorrowerGroup, group_id)

    def get_by_name(self, name: str, exclude_id: str | None = None):
        query = self.session.query(BorrowerGroup).filter(BorrowerGroup.name == name)
        if exclude_id is not None:
            query = query.filter(BorrowerGroup.id != exclude_id)
        return query.first()

    def count_borrowers(self, group_id: str) -> int:
        return (
            self.session.query(func.count(Borrower.id))
            .filter(Borrower.group_id == group_id)
            .scalar()
        )

    def list_all(self):
        return self.session.query(BorrowerGroup).order_by(BorrowerGroup.name).all()

    def add(self, group: BorrowerGroup):
        self.session.add(group)
        self.session.flush()
        return group

    def delete(self, group: BorrowerGroup):
        self.session.delete(group)
        self.session.flush()
