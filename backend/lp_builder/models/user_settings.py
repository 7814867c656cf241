from lp_builder.extensions import db
from .base import BaseModel

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class UserSettings(BaseModel):
    __tablename__ = "user_settings"

    user_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True, index=True)

    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    plan = db.Column(db.String(50), nullable=False, default="free", index=True)

    # Stored encrypted, see lp_builder.utils.encryption
    google_api_key = db.Column(db.Text, nullable=True)

    is_banned = db.Column(db.Boolean, nullable=False, default=False)
    banned_at = db.Column(db.DateTime(timezone=True), nullable=True)
    banned_by = db.Column(db.String(36), nullable=True)
    ban_reason = db.Column(db.Text, nullable=True)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN
