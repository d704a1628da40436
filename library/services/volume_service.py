from sqlalchemy.exc import IntegrityError

from library.models.volume import Volume, VolumeCondition, VolumeLoanStatus
from library.repositories.loan_repo import LoanRepo
from library.repositories.title_repo import TitleRepo
from library.repositories.volume_repo import VolumeRepo
from library.services.errors import (
    DuplicateBarcode,
    InvalidRequest,
    TitleNotFound,
    VolumeLoaned,
    VolumeNotFound,
)
from library.services.transaction import transaction
from library.utils.validation import json_object, optional_bool, optional_str, required_str

UPDATABLE_FIELDS = ["barcode", "condition", "location_id", "loan_status", "loanable", "individual_notes"]

# statuses the catalog may set by hand; loaned/overdue belong to the loan ledger
MANUAL_LOAN_STATUSES = (
    VolumeLoanStatus.AVAILABLE,
    VolumeLoanStatus.LOST,
    VolumeLoanStatus.MAINTENANCE,
)


def _condition(value) -> VolumeCondition:
    try:
        return VolumeCondition(value)
    except ValueError:
        raise InvalidRequest(f"Unknown condition: {value}")


def _manual_loan_status(value) -> VolumeLoanStatus:
    try:
        status = VolumeLoanStatus(value)
    except ValueError:
        raise InvalidRequest(f"Unknown loan_status: {value}")
    if status not in MANUAL_LOAN_STATUSES:
        raise InvalidRequest(f"loan_status '{status.value}' is set by loans, not by hand")
    return status


class VolumeService:
    """Cataloging side of volumes: creation, lookup, updates and guarded deletion."""

    def __init__(self, session):
        self.session = session
        self.volumes = VolumeRepo(session)
        self.titles = TitleRepo(session)
        self.loans = LoanRepo(session)

    def get_volume(self, volume_id: str) -> Volume:
        return self.volumes.find_by_id(volume_id)

    def get_by_barcode(self, barcode: str) -> Volume:
        return self.volumes.find_by_barcode(barcode)

    def create_volume(self, data: dict) -> Volume:
        data = json_object(data)
        title_id = required_str(data, "title_id")
        barcode = required_str(data, "barcode")
        condition = _condition(optional_str(data, "condition") or VolumeCondition.GOOD.value)

        # damaged copies stay on the shelf for consultation only
        loanable = optional_bool(data, "loanable", True) and condition != VolumeCondition.DAMAGED
        location_id = optional_str(data, "location_id")
        notes = optional_str(data, "individual_notes")

        with transaction(self.session, "create volume", "volumes"):
            if not self.titles.get(title_id):
                raise TitleNotFound()
            if self.volumes.barcode_exists(barcode):
                raise DuplicateBarcode()

            try:
                volume = self.volumes.add(Volume(
                    title_id=title_id,
                    copy_number=self.volumes.next_copy_number(title_id),
                    barcode=barcode,
                    condition=condition.value,
                    location_id=location_id,
                    loan_status=VolumeLoanStatus.AVAILABLE.value,
                    loanable=loanable,
                    individual_notes=notes,
                ))
            except IntegrityError as e:
                raise DuplicateBarcode() from e
        return volume

    def update_volume(self, volume_id: str, data: dict) -> Volume:
        """Partial update of a catalogued copy.

        A ``damaged`` condition always leaves the volume not loanable. The
        loan status may only move between available, lost and maintenance,
        and never while a loan on the volume is open.
        """
        data = json_object(data)
        if not any(k in data for k in UPDATABLE_FIELDS):
            raise InvalidRequest("No fields provided for update")

        changes = {}
        if "barcode" in data:
            changes["barcode"] = required_str(data, "barcode")
        if "condition" in data:
            changes["condition"] = _condition(required_str(data, "condition")).value
        if "location_id" in data:
            changes["location_id"] = optional_str(data, "location_id")
        if "individual_notes" in data:
            changes["individual_notes"] = optional_str(data, "individual_notes")
        if "loanable" in data:
            changes["loanable"] = optional_bool(data, "loanable", True)
        if "loan_status" in data:
            changes["loan_status"] = _manual_loan_status(required_str(data, "loan_status")).value

        with transaction(self.session, "update volume", "volumes"):
            # same row lock as a checkout, so a loan cannot slip in between
            volume = self.volumes.find_by_id(volume_id, lock=True)

            if "loan_status" in changes and self.loans.has_open_loan(volume_id):
                raise VolumeLoaned("Cannot change the loan status of a volume with an open loan")
            if "barcode" in changes and self.volumes.barcode_exists(changes["barcode"], exclude_id=volume_id):
                raise DuplicateBarcode()

            for k, v in changes.items():
                setattr(volume, k, v)
            if volume.condition == VolumeCondition.DAMAGED.value:
                volume.loanable = False

            try:
                self.session.flush()
            except IntegrityError as e:
                raise DuplicateBarcode() from e
        return volume

    def delete_volume(self, volume_id: str):
        with transaction(self.session, "delete volume", "volumes"):
            volume = self.volumes.get(volume_id)
            if not volume:
                raise VolumeNotFound("Volume not found")
            if not self.volumes.can_delete(volume_id):
                raise VolumeLoaned()

            # returned loans still reference the volume
            removed = self.loans.delete_returned_for_volume(volume_id)
            self.volumes.delete(volume)
        return removed
