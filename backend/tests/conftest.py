import uuid

import pytest
from flask_jwt_extended import create_access_token

from lp_builder import create_app
from lp_builder.extensions import db
from lp_builder.models.user_settings import ROLE_ADMIN, UserSettings


@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create a UserSettings row and return (user_id, auth headers)."""
    def _make(plan="free", role="user", email=None, **fields):
        user_id = str(uuid.uuid4())
        email = email or f"{user_id[:8]}@example.com"

        settings = UserSettings(user_id=user_id, email=email, plan=plan, role=role, **fields)
        db.session.add(settings)
        db.session.commit()

        token = create_access_token(identity=user_id, additional_claims={"email": email})
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def pro_user(make_user):
    return make_user(plan="pro")


@pytest.fixture
def admin(make_user):
    return make_user(role=ROLE_ADMIN)
