import enum
import uuid

from library.extensions import db
from library.utils.timestamps import utcnow


class LoanStatus(str, enum.Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    # only ever reported by read views, never written
    OVERDUE = "overdue"


class Loan(db.Model):
    __tablename__ = "loans"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    title_id = db.Column(db.String(36), db.ForeignKey("titles.id"), nullable=False, index=True)
    volume_id = db.Column(db.String(36), db.ForeignKey("volumes.id"), nullable=False, index=True)
    borrower_id = db.Column(db.String(36), db.ForeignKey("borrowers.id"), nullable=False, index=True)

    loan_date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    extension_count = db.Column(db.Integer, nullable=False, default=0)
    return_date = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=LoanStatus.ACTIVE.value, index=True)

    # Equals volume_id while the loan is open, NULL once returned.
    # UNIQUE: at most one open loan per volume.
    open_volume_id = db.Column(db.String(36), unique=True, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    title = db.relationship("Title")
    volume = db.relationship("Volume", backref="loans")
    borrower = db.relationship("Borrower", backref="loans")

    @property
    def is_open(self) -> bool:
        return self.status != LoanStatus.RETURNED
