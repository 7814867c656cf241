from lp_builder.extensions import db
from .base import BaseModel
from .owner_mixin import OwnerMixin


class CreativeMixin(OwnerMixin):
    """Columns shared by banners and thumbnails."""

    title = db.Column(db.String(200), nullable=False)
    width = db.Column(db.Integer, nullable=False)
    height = db.Column(db.Integer, nullable=False)
    preset_name = db.Column(db.String(100), nullable=True)
    prompt = db.Column(db.Text, nullable=True)
    product_info = db.Column(db.Text, nullable=True)
    reference_image_url = db.Column(db.String(1024), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="draft")

    # JSON serialized as text
    metadata_json = db.Column("metadata", db.Text, nullable=True)
    masks = db.Column(db.Text, nullable=True)


class Banner(BaseModel, CreativeMixin):
    __tablename__ = "banners"

    platform = db.Column(db.String(50), nullable=False)
    image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)

    image = db.relationship("MediaImage")


class Thumbnail(BaseModel, CreativeMixin):
    __tablename__ = "thumbnails"

    category = db.Column(db.String(50), nullable=False)
    image_id = db.Column(db.String(36), db.ForeignKey("media_images.id"), nullable=True)

    image = db.relationship("MediaImage")
