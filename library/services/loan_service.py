"""Loan ledger: checkout, return and extension of volumes.

A loan is ``active`` until it is returned; ``returned`` is terminal. Creating
and closing a loan also flips the volume's ``loan_status``, and both writes
share one transaction: any failure rolls the session back so a loan row and
its volume never disagree.

Two checkouts racing for the same barcode are settled by the store. The
volume row is read ``FOR UPDATE`` and ``loans.open_volume_id`` is unique, so
the losing transaction ends in ``AlreadyLoaned``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from library.models.loan import Loan, LoanStatus
from library.models.volume import VolumeLoanStatus
from library.repositories.loan_repo import LoanRepo
from library.repositories.volume_repo import VolumeRepo
from library.services.errors import (
    AlreadyLoaned,
    AlreadyReturned,
    CannotExtendReturned,
    ExtensionLimitReached,
    LoanNotFound,
    NotLoanable,
    StoreFailure,
)
from library.services.loan_views import LoanDetail, LoanStatusProjector
from library.services.policy_service import BorrowerPolicyResolver
from library.services.transaction import transaction
from library.utils.timestamps import utcnow

MAX_LOAN_EXTENSIONS = 1


@dataclass
class CreatedLoan:
    id: str
    loan_date: datetime
    due_date: datetime
    loan_duration_days: int


@dataclass
class ReturnedLoan:
    id: str
    return_date: datetime


@dataclass
class ExtendedLoan:
    id: str
    new_due_date: datetime
    extension_count: int
    original_duration_days: int


class LoanLedger:
    def __init__(
        self,
        session,
        volumes: VolumeRepo | None = None,
        loans: LoanRepo | None = None,
        policy: BorrowerPolicyResolver | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.volumes = volumes or VolumeRepo(session)
        self.loans = loans or LoanRepo(session)
        self.policy = policy or BorrowerPolicyResolver(session)
        self.clock = clock
        self.views = LoanStatusProjector(session, loans=self.loans, clock=clock)

    def create_loan(self, borrower_id: str, barcode: str) -> CreatedLoan:
        with transaction(self.session, "create loan", "loans"):
            volume = self.volumes.find_by_barcode(barcode, lock=True)

            if not volume.loanable:
                raise NotLoanable()

            if volume.loan_status != VolumeLoanStatus.AVAILABLE:
                if volume.loan_status in (VolumeLoanStatus.LOST, VolumeLoanStatus.MAINTENANCE):
                    raise AlreadyLoaned(f"This volume is not available ({volume.loan_status})")
                raise AlreadyLoaned()

            borrower_name, loan_duration_days = self.policy.resolve(borrower_id)

            loan_date = self.clock()
            due_date = loan_date + timedelta(days=loan_duration_days)

            try:
                loan = self.loans.add(Loan(
                    title_id=volume.title_id,
                    volume_id=volume.id,
                    borrower_id=borrower_id,
                    loan_date=loan_date,
                    due_date=due_date,
                    extension_count=0,
                    status=LoanStatus.ACTIVE.value,
                    open_volume_id=volume.id,
                    created_at=loan_date,
                    updated_at=loan_date,
                ))
            except IntegrityError as e:
                raise AlreadyLoaned() from e

            self.volumes.set_loan_status(volume.id, VolumeLoanStatus.LOANED)
            result = CreatedLoan(loan.id, loan_date, due_date, loan_duration_days)

        current_app.logger.info(
            f"[loans] Created loan {result.id} for borrower {borrower_name}, volume {barcode} "
            f"(due in {loan_duration_days} days)"
        )
        return result

    def return_loan(self, loan_id: str) -> ReturnedLoan:
        with transaction(self.session, "return loan", "loans"):
            loan = self.loans.get(loan_id)
            if not loan:
                raise LoanNotFound()
            if loan.status == LoanStatus.RETURNED:
                raise AlreadyReturned()

            volume_id = loan.volume_id
            return_date = self.clock()

            # conditional update: a concurrent return leaves nothing to update
            if self.loans.mark_returned(loan_id, return_date) == 0:
                raise AlreadyReturned()
            self.volumes.set_loan_status(volume_id, VolumeLoanStatus.AVAILABLE)

        current_app.logger.info(f"[loans] Returned loan {loan_id}")
        return ReturnedLoan(loan_id, return_date)

    def extend_loan(self, loan_id: str) -> ExtendedLoan:
        with transaction(self.session, "extend loan", "loans"):
            loan = self.loans.get(loan_id)
            if not loan:
                raise LoanNotFound()
            if loan.status == LoanStatus.RETURNED:
                raise CannotExtendReturned()
            if loan.extension_count >= MAX_LOAN_EXTENSIONS:
                raise ExtensionLimitReached(
                    f"Maximum extensions reached ({loan.extension_count}/{MAX_LOAN_EXTENSIONS})",
                    extension_count=loan.extension_count,
                )

            # current window, not a stored original duration
            original_duration = loan.due_date - loan.loan_date
            new_due_date = loan.due_date + original_duration
            extension_count = loan.extension_count + 1

            if self.loans.extend(loan_id, new_due_date, self.clock(), MAX_LOAN_EXTENSIONS) == 0:
                self.session.refresh(loan)
                if loan.status == LoanStatus.RETURNED:
                    raise CannotExtendReturned()
                raise ExtensionLimitReached(
                    f"Maximum extensions reached ({loan.extension_count}/{MAX_LOAN_EXTENSIONS})",
                    extension_count=loan.extension_count,
                )

        current_app.logger.info(f"[loans] Extended loan {loan_id} - new due date: {new_due_date}")
        return ExtendedLoan(loan_id, new_due_date, extension_count, original_duration.days)

    def list_active_loans(self) -> list[LoanDetail]:
        try:
            details = self.views.active_loans()
        except SQLAlchemyError as e:
            current_app.logger.exception(f"[loans] Failed to fetch active loans: {e}")
            raise StoreFailure("Failed to fetch active loans", detail=str(e)) from e
        current_app.logger.info(f"[loans] Fetched {len(details)} active loans")
        return details

    def list_overdue_loans(self) -> list[LoanDetail]:
        try:
            details = self.views.overdue_loans()
        except SQLAlchemyError as e:
            current_app.logger.exception(f"[loans] Failed to fetch overdue loans: {e}")
            raise StoreFailure("Failed to fetch overdue loans", detail=str(e)) from e
        current_app.logger.info(f"[loans] Fetched {len(details)} overdue loans")
        return details
