from library.repositories.borrower_repo import BorrowerRepo
from library.services.errors import BorrowerNotFound

DEFAULT_LOAN_DURATION_DAYS = 21


class BorrowerPolicyResolver:
    """Resolves who is borrowing and for how long.

    The duration comes from the borrower's group at the time of the call and
    is copied into the loan's due date; later group changes never touch
    existing loans.
    """

    def __init__(self, session, borrowers: BorrowerRepo | None = None):
        self.borrowers = borrowers or BorrowerRepo(session)

    def resolve(self, borrower_id: str) -> tuple[str, int]:
        row = self.borrowers.policy_row(borrower_id, DEFAULT_LOAN_DURATION_DAYS)
        if row is None:
            raise BorrowerNotFound()
        name, loan_duration_days = row
        return name, int(loan_duration_days)
