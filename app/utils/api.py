"""JSON 接口辅助函数：统一响应信封 { success, data | error }"""
from flask import current_app, jsonify, request

from app.exceptions import ValidationError


def success(data=None, status=200, **extra):
    body = {'success': True, 'data': data}
    body.update(extra)
    return jsonify(body), status


def get_json_body():
    """读取 JSON 请求体，必须是对象"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError('请求体必须是 JSON 对象')
    return payload


def get_pagination():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config.get('ARTICLES_PER_PAGE', 10), type=int)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)
    return max(page, 1), min(max(limit, 1), max_limit)


def paginated(items, total, page, limit):
    pages = (total + limit - 1) // limit if limit else 0
    return success(items, pagination={
        'page': page,
        'limit': limit,
        'total': total,
        'pages': pages,
    })
