from flask_login import login_required

from app.blueprints.dashboard import dashboard_bp
from app.services.dashboard_service import DashboardService
from app.utils.api import success
from app.utils.permissions import current_actor


@dashboard_bp.route('', methods=['GET'])
@login_required
def statistics():
    """仪表盘统计（管理员附带系统统计）"""
    return success(DashboardService.get_statistics(current_actor()))
