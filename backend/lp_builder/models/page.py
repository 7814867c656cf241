from lp_builder.extensions import db
from .base import BaseModel
from .owner_mixin import OwnerMixin


class Page(BaseModel, OwnerMixin):
    __tablename__ = "pages"

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    status = db.Column(db.String(20), nullable=False, default="draft", index=True)
    is_favorite = db.Column(db.Boolean, nullable=False, default=False)
    template_id = db.Column(db.String(36), nullable=True)

    # JSON serialized as text
    header_config = db.Column(db.Text, nullable=False, default="{}")
    form_config = db.Column(db.Text, nullable=False, default="{}")
    design_definition = db.Column(db.Text, nullable=True)

    # Relationship to Sections (ordered, cascade deletes)
    sections = db.relationship(
        "PageSection",
        back_populates="page",
        order_by="PageSection.order",
        cascade="all, delete-orphan"
    )

    # Visitor submissions go with the page
    form_submissions = db.relationship(
        "FormSubmission",
        back_populates="page",
        cascade="all, delete-orphan"
    )
