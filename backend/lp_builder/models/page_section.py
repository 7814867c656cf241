from lp_builder.extensions import db
from .base import BaseModel


class PageSection(BaseModel):
    __tablename__ = "page_sections"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    role = db.Column(db.String(50), nullable=False, default="other")  # hero, features, cta ...
    order = db.Column(db.Integer, nullable=False, default=0)

    image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)
    mobile_image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)

    config = db.Column(db.Text, nullable=True)  # JSON text
    boundary_offset_top = db.Column(db.Integer, nullable=False, default=0)
    boundary_offset_bottom = db.Column(db.Integer, nullable=False, default=0)

    page = db.relationship("Page", back_populates="sections")
    image = db.relationship("MediaImage", foreign_keys=[image_id])
    mobile_image = db.relationship("MediaImage", foreign_keys=[mobile_image_id])

    __table_args__ = (
        db.Index("idx_page_section_order", "page_id", "order"),
    )
