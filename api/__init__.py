"""
api - JSON API layer.

All route modules register on a single Flask Blueprint
with url_prefix /api.
"""

from flask import Blueprint

api_bp = Blueprint("api", __name__, url_prefix="/api")

# Import route modules so their @api_bp decorators execute
from api import routes_bulk       # noqa: F401, E402
from api import routes_products   # noqa: F401, E402
from api import routes_health     # noqa: F401, E402
from api import errors            # noqa: F401, E402
