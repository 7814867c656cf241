from lp_builder.extensions import db
from .base import BaseModel

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
REVIEW_STATUSES = {STATUS_APPROVED, STATUS_REJECTED}


class UpgradeRequest(BaseModel):
    __tablename__ = "upgrade_requests"

    user_id = db.Column(db.String(36), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    current_plan = db.Column(db.String(50), nullable=False)
    desired_plan = db.Column(db.String(50), nullable=False)
    reason = db.Column(db.Text, nullable=True)
    company_name = db.Column(db.String(255), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    reviewed_by = db.Column(db.String(36), nullable=True)
    review_note = db.Column(db.Text, nullable=True)
