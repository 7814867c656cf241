from lp_builder.extensions import db
from .base import BaseModel

INQUIRY_STATUSES = {"open", "closed"}


class ContactInquiry(BaseModel):
    __tablename__ = "contact_inquiries"

    user_id = db.Column(db.String(36), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    subject = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="open", index=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    admin_note = db.Column(db.Text, nullable=True)
