"""
系统管理模块 - 审计日志查看
"""
import json
from datetime import datetime

from flask import request
from sqlalchemy import desc

from . import bp
from app.models.sys import AuditLog
from app.utils.api import get_pagination, paginated
from app.utils.permissions import admin_required


@bp.route('/logs')
@admin_required
def audit_logs():
    """审计日志查看器（管理员）"""
    page, limit = get_pagination()

    query = AuditLog.query
    module = request.args.get('module', '')
    action = request.args.get('action', '')
    user_id = request.args.get('user_id', type=int)
    outcome = request.args.get('outcome', '')
    start_date_str = request.args.get('start_date', '')

    if module:
        query = query.filter(AuditLog.module == module)
    if action:
        query = query.filter(AuditLog.action == action)
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if outcome:
        query = query.filter(AuditLog.outcome == outcome)

    # 日期筛选
    if start_date_str:
        try:
            start_date = datetime.strptime(start_date_str, '%Y-%m-%d')
            query = query.filter(AuditLog.created_at >= start_date)
        except ValueError:
            pass

    pagination = query.order_by(desc(AuditLog.created_at), desc(AuditLog.id)).paginate(
        page=page, per_page=limit, error_out=False
    )
    return paginated([_serialize(log) for log in pagination.items], pagination.total, page, limit)


def _serialize(log):
    data = log.to_dict()
    if log.details:
        try:
            data['details'] = json.loads(log.details)
        except ValueError:
            pass
    return data
