import uuid

from library.extensions import db
from library.utils.timestamps import utcnow

class Title(db.Model):
    __tablename__ = "titles"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(500), nullable=False, index=True)
    subtitle = db.Column(db.String(500), nullable=True)
    isbn = db.Column(db.String(20), nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    volumes = db.relationship("Volume", back_populates="title", order_by="Volume.copy_number")
