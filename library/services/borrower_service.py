from library.models.borrower import Borrower, BorrowerGroup
from library.repositories.borrower_repo import BorrowerGroupRepo, BorrowerRepo
from library.repositories.loan_repo import LoanRepo
from library.services.errors import (
    BorrowerGroupInUse,
    BorrowerGroupNotFound,
    BorrowerHasActiveLoans,
    BorrowerNotFound,
    InvalidRequest,
)
from library.services.transaction import transaction
from library.utils.validation import json_object, optional_str, positive_int, required_str

CONTACT_FIELDS = ["email", "phone", "address", "city", "zip"]
GROUP_FIELDS = ["name", "loan_duration_days", "description"]


class BorrowerService:
    def __init__(self, session):
        self.session = session
        self.borrowers = BorrowerRepo(session)
        self.groups = BorrowerGroupRepo(session)
        self.loans = LoanRepo(session)

    def list_borrowers(self):
        return self.borrowers.list_with_groups()

    def _check_group(self, group_id):
        if group_id and not self.groups.get(group_id):
            raise BorrowerGroupNotFound()

    def create_borrower(self, data: dict) -> Borrower:
        data = json_object(data)
        name = required_str(data, "name")
        group_id = optional_str(data, "group_id")
        contact = {k: optional_str(data, k) for k in CONTACT_FIELDS}

        with transaction(self.session, "create borrower", "borrowers"):
            self._check_group(group_id)
            borrower = self.borrowers.add(Borrower(name=name, group_id=group_id, **contact))
        return borrower

    def update_borrower(self, borrower_id: str, data: dict) -> Borrower:
        """Partial update; a new group only affects loans created afterwards."""
        data = json_object(data)
        fields = ["name", "group_id"] + CONTACT_FIELDS
        if not any(k in data for k in fields):
            raise InvalidRequest("No fields provided for update")

        changes = {}
        if "name" in data:
            changes["name"] = required_str(data, "name")
        for k in CONTACT_FIELDS + ["group_id"]:
            if k in data:
                changes[k] = optional_str(data, k)

        with transaction(self.session, "update borrower", "borrowers"):
            borrower = self.borrowers.get(borrower_id)
            if not borrower:
                raise BorrowerNotFound()
            if "group_id" in changes:
                self._check_group(changes["group_id"])
            for k, v in changes.items():
                setattr(borrower, k, v)
            self.session.flush()
        return borrower

    def delete_borrower(self, borrower_id: str):
        with transaction(self.session, "delete borrower", "borrowers"):
            borrower = self.borrowers.get(borrower_id)
            if not borrower:
                raise BorrowerNotFound()
            open_loans = self.borrowers.count_open_loans(borrower_id)
            if open_loans > 0:
                raise BorrowerHasActiveLoans(active_loans=open_loans)
            # returned loans still reference the borrower
            self.loans.delete_returned_for_borrower(borrower_id)
            self.borrowers.delete(borrower)

    def list_groups(self):
        return self.groups.list_all()

    def create_group(self, data: dict) -> BorrowerGroup:
        data = json_object(data)
        name = required_str(data, "name")
        days = positive_int(data, "loan_duration_days")
        description = optional_str(data, "description")

        with transaction(self.session, "create borrower group", "borrowers"):
            if self.groups.get_by_name(name):
                raise InvalidRequest(f"Borrower group '{name}' already exists")
            group = self.groups.add(BorrowerGroup(
                name=name,
                loan_duration_days=days,
                description=description,
            ))
        return group

    def update_group(self, group_id: str, data: dict) -> BorrowerGroup:
        """Partial update. Existing loans keep the due date they were created with."""
        data = json_object(data)
        if not any(k in data for k in GROUP_FIELDS):
            raise InvalidRequest("No fields provided for update")

        changes = {}
        if "name" in data:
            changes["name"] = required_str(data, "name")
        if "loan_duration_days" in data:
            changes["loan_duration_days"] = positive_int(data, "loan_duration_days")
        if "description" in data:
            changes["description"] = optional_str(data, "description")

        with transaction(self.session, "update borrower group", "borrowers"):
            group = self.groups.get(group_id)
            if not group:
                raise BorrowerGroupNotFound()
            if "name" in changes and self.groups.get_by_name(changes["name"], exclude_id=group_id):
                raise InvalidRequest(f"Borrower group '{changes['name']}' already exists")
            for k, v in changes.items():
                setattr(group, k, v)
            self.session.flush()
        return group

    def delete_group(self, group_id: str):
        with transaction(self.session, "delete borrower group", "borrowers"):
            group = self.groups.get(group_id)
            if not group:
                raise BorrowerGroupNotFound()
            members = self.groups.count_borrowers(group_id)
            if members > 0:
                raise BorrowerGroupInUse(borrowers=members)
            self.groups.delete(group)
