from lp_builder.extensions import db
from .base import BaseModel


class LpTemplate(BaseModel):
    __tablename__ = "lp_templates"

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True, index=True)
    thumbnail_url = db.Column(db.String(1024), nullable=True)
    source_url = db.Column(db.String(1024), nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)

    header_config = db.Column(db.Text, nullable=False, default="{}")
    form_config = db.Column(db.Text, nullable=False, default="{}")
    design_definition = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.String(36), nullable=True)

    sections = db.relationship(
        "LpTemplateSection",
        back_populates="template",
        order_by="LpTemplateSection.order",
        cascade="all, delete-orphan"
    )


class LpTemplateSection(BaseModel):
    __tablename__ = "lp_template_sections"

    template_id = db.Column(db.String(36), db.ForeignKey("lp_templates.id"), nullable=False, index=True)
    role = db.Column(db.String(50), nullable=False, default="other")
    order = db.Column(db.Integer, nullable=False, default=0)
    image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)
    mobile_image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)
    config = db.Column(db.Text, nullable=True)
    boundary_offset_top = db.Column(db.Integer, nullable=False, default=0)
    boundary_offset_bottom = db.Column(db.Integer, nullable=False, default=0)

    template = db.relationship("LpTemplate", back_populates="sections")
    image = db.relationship("MediaImage", foreign_keys=[image_id])
    mobile_image = db.relationship("MediaImage", foreign_keys=[mobile_image_id])
