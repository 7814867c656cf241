from lp_builder.extensions import db
from .base import BaseModel

STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"


class GenerationRun(BaseModel):
    __tablename__ = "generation_runs"

    __table_args__ = (
        db.Index("ix_generation_cursor", "created_at", "id"),
    )

    user_id = db.Column(db.String(36), nullable=True, index=True)
    type = db.Column(db.String(50), nullable=False, index=True)
    endpoint = db.Column(db.String(200), nullable=True)
    model = db.Column(db.String(100), nullable=False, index=True)

    input_prompt = db.Column(db.Text, nullable=False, default="")
    output_result = db.Column(db.Text, nullable=True)
    input_tokens = db.Column(db.Integer, nullable=True)
    output_tokens = db.Column(db.Integer, nullable=True)
    image_count = db.Column(db.Integer, nullable=True)
    estimated_cost = db.Column(db.Numeric(14, 6, asdecimal=True), nullable=True)

    status = db.Column(db.String(20), nullable=False, index=True)
    error_message = db.Column(db.Text, nullable=True)
    duration_ms = db.Column(db.Integer, nullable=True)
