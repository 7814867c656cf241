from lp_builder.extensions import db
from .base import BaseModel
from .owner_mixin import OwnerMixin

SOURCE_UPLOAD = "upload"
SOURCE_AI_GENERATE = "ai-generate"


class MediaImage(BaseModel, OwnerMixin):
    __tablename__ = "media_images"

    file_path = db.Column(db.String(1024), nullable=False)  # public storage URL
    mime = db.Column(db.String(100), nullable=False)
    width = db.Column(db.Integer, nullable=True)
    height = db.Column(db.Integer, nullable=True)
    prompt = db.Column(db.Text, nullable=True)
    source_type = db.Column(db.String(20), nullable=True, index=True)
    file_size = db.Column(db.Integer, nullable=True)
