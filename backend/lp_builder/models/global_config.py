from lp_builder.extensions import db
from .base import BaseModel


class GlobalConfig(BaseModel):
    __tablename__ = "global_configs"

    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text, nullable=False)  # JSON text
