from lp_builder.extensions import db


class OwnerMixin:
    # Supabase auth user id; nullable for rows created before sign-in
    user_id = db.Column(
        db.String(36),
        nullable=True,
        index=True
    )

    def is_owned_by(self, user_id):
        return self.user_id is not None and self.user_id == user_id
