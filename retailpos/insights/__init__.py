from flask import Blueprint

bp = Blueprint("insights", __name__, url_prefix="/api/insights")

from . import routes  # noqa: E402,F401
