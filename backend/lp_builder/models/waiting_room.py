from lp_builder.extensions import db
from .base import BaseModel

ACCOUNT_TYPES = {"individual", "corporate"}
WAITING_PLANS = {"pro", "business", "enterprise"}
ENTRY_STATUSES = {"pending", "approved", "rejected", "invited", "registered"}


class WaitingRoomEntry(BaseModel):
    __tablename__ = "waiting_room_entries"

    account_type = db.Column(db.String(20), nullable=False)
    company_name = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(50), nullable=True)
    remarks = db.Column(db.Text, nullable=True)
    plan = db.Column(db.String(50), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    admin_notes = db.Column(db.Text, nullable=True)
    processed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    processed_by = db.Column(db.String(36), nullable=True)

    replies = db.relationship(
        "WaitingRoomReply",
        back_populates="entry",
        order_by="WaitingRoomReply.created_at",
        cascade="all, delete-orphan",
    )


class WaitingRoomReply(BaseModel):
    __tablename__ = "waiting_room_replies"

    entry_id = db.Column(db.String(36), db.ForeignKey("waiting_room_entries.id"), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    admin_id = db.Column(db.String(36), nullable=False)
    admin_name = db.Column(db.String(255), nullable=False)

    entry = db.relationship("WaitingRoomEntry", back_populates="replies")
