from flask import Blueprint
from fieldops import get_workspace
from fieldops.decorators.auth import require_permissions

dash_bp = Blueprint('dashboard', __name__)


@dash_bp.get('/stats')
@require_permissions('viewDashboard')
def stats():
    # recomputed on each request
    return get_workspace().dashboard_stats()
