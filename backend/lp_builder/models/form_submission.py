from lp_builder.extensions import db
from .base import BaseModel


class FormSubmission(BaseModel):
    __tablename__ = "form_submissions"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    page_slug = db.Column(db.String(200), nullable=False)
    form_title = db.Column(db.String(255), nullable=False)
    fields = db.Column(db.Text, nullable=False)  # JSON list of {fieldName, fieldLabel, value}

    sender_email = db.Column(db.String(255), nullable=True)
    sender_name = db.Column(db.String(255), nullable=True)

    page = db.relationship("Page", back_populates="form_submissions")
