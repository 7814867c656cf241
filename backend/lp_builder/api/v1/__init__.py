from flask import Blueprint

# Create the versioned blueprint
v1_bp = Blueprint("v1", __name__)

# Import route modules so they register with v1_bp
from . import health  # noqa: E402,F401
from . import config  # noqa: E402,F401
from . import media  # noqa: E402,F401
from . import pages  # noqa: E402,F401
from . import creatives  # noqa: E402,F401
from . import templates  # noqa: E402,F401
from . import user  # noqa: E402,F401
from . import inquiries  # noqa: E402,F401
from . import billing  # noqa: E402,F401
from . import webhooks  # noqa: E402,F401
from . import ai  # noqa: E402,F401
from . import admin  # noqa: E402,F401
from . import public  # noqa: E402,F401
from . import forms  # noqa: E402,F401
from . import upgrade_requests  # noqa: E402,F401
from . import waiting_room  # noqa: E402,F401
