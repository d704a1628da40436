from __future__ import annotations

from sqlalchemy import func

from library.models.volume import Volume, VolumeLoanStatus
from library.services.errors import VolumeNotFound
from library.utils.timestamps import utcnow

# loan_status values that mean a loan is still open
BUSY_STATUSES = (VolumeLoanStatus.LOANED.value, VolumeLoanStatus.OVERDUE.value)


class VolumeRepo:
    def __init__(self, session):
        self.session = session

    def get(self, volume_id: str):
        return self.session.get(Volume, volume_id)

    def find_by_id(self, volume_id: str, lock: bool = False) -> Volume:
        if lock:
            volume = self.session.query(Volume).filter_by(id=volume_id).with_for_update().first()
        else:
            volume = self.get(volume_id)
        if not volume:
            raise VolumeNotFound("Volume not found")
        return volume

    def find_by_barcode(self, barcode: str, lock: bool = False) -> Volume:
        """Look a volume up by barcode.

        ``lock=True`` reads the row ``FOR UPDATE`` so that concurrent loan
        attempts on the same copy queue behind the current transaction
        (ignored by SQLite, which serializes writers anyway).
        """
        query = self.session.query(Volume).filter_by(barcode=barcode)
        if lock:
            query = query.with_for_update()
        volume = query.first()
        if not volume:
            raise VolumeNotFound()
        return volume

    def barcode_exists(self, barcode: str, exclude_id: str | None = None) -> bool:
        query = self.session.query(Volume.id).filter(Volume.barcode == barcode)
        if exclude_id is not None:
            query = query.filter(Volume.id != exclude_id)
        return query.first() is not None

    def list_by_title(self, title_id: str):
        return (
            self.session.query(Volume)
            .filter_by(title_id=title_id)
            .order_by(Volume.copy_number)
            .all()
        )

    def next_copy_number(self, title_id: str) -> int:
        current = (
            self.session.query(func.max(Volume.copy_number))
            .filter(Volume.title_id == title_id)
            .scalar()
        )
        return (current or 0) + 1

    def set_loan_status(self, volume_id: str, new_status: VolumeLoanStatus):
        self.session.query(Volume).filter_by(id=volume_id).update(
            {"loan_status": VolumeLoanStatus(new_status).value, "updated_at": utcnow()},
            synchronize_session="fetch",
        )

    def can_delete(self, volume_id: str) -> bool:
        volume = self.find_by_id(volume_id)
        return volume.loan_status not in BUSY_STATUSES

    def add(self, volume: Volume):
        self.session.add(volume)
        self.session.flush()
        return volume

    def delete(self, volume: Volume):
        self.session.delete(volume)
        self.session.flush()
