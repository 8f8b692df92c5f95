"""Dashboard blueprint: counts, recent leads and compliance summary for the current business."""
from datetime import date

from flask import Blueprint, g, current_app

from bizhub.database import get_session
from bizhub.exceptions import StorageError
from bizhub.middleware import require_login, require_business
from bizhub.services.dashboard_service import get_dashboard_data
from bizhub.services.storage_service import get_storage_service

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('/')
@require_login
@require_business
def index():
    """Counts, recent leads and the compliance summary for the current business."""
    try:
        storage = get_storage_service()
    except StorageError as e:
        current_app.logger.warning(f"Dashboard without storage: {e.message}")
        storage = None

    data = get_dashboard_data(get_session(), g.ctx.business, storage, today=date.today())
    data['business'] = g.ctx.business.to_dict()
    return data
