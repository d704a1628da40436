import enum
import uuid

from library.extensions import db
from library.utils.timestamps import utcnow


class VolumeCondition(str, enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged"


class VolumeLoanStatus(str, enum.Enum):
    AVAILABLE = "available"
    LOANED = "loaned"
    OVERDUE = "overdue"
    LOST = "lost"
    MAINTENANCE = "maintenance"


class Volume(db.Model):
    """One physical, barcoded copy of a title.

    ``loan_status`` is maintained by the loan ledger together with the loan
    rows. Catalog updates may only move it between available, lost and
    maintenance while no loan is open.
    """
    __tablename__ = "volumes"
    __table_args__ = (
        db.UniqueConstraint("title_id", "copy_number", name="uq_volumes_title_copy"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title_id = db.Column(db.String(36), db.ForeignKey("titles.id"), nullable=False, index=True)

    copy_number = db.Column(db.Integer, nullable=False)
    barcode = db.Column(db.String(50), unique=True, nullable=False, index=True)

    condition = db.Column(db.String(20), nullable=False, default=VolumeCondition.GOOD.value)
    location_id = db.Column(db.String(36), nullable=True)
    loan_status = db.Column(db.String(20), nullable=False, default=VolumeLoanStatus.AVAILABLE.value, index=True)
    # damaged / reference-only copies are consulted on site
    loanable = db.Column(db.Boolean, nullable=False, default=True, index=True)
    individual_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    title = db.relationship("Title", back_populates="volumes")
