"""
审计日志工具模块
用于记录系统中的所有变更操作（操作者、动作、实体、结果）
审计写入失败只记录警告，绝不影响业务操作本身
"""
import inspect
import json
import logging
from functools import wraps

from flask import current_app, has_request_context, request

from app.exceptions import CmsException
from app.extensions import db
from app.models.sys import AuditLog

logger = logging.getLogger('app.audit')

REDACTED = '[REDACTED]'
CIRCULAR = '[Circular Reference]'
DEFAULT_SENSITIVE_KEYS = ('password', 'token', 'accessToken', 'refreshToken', 'authorization')


def sanitize_metadata(value, sensitive_keys=DEFAULT_SENSITIVE_KEYS, _seen=None):
    """
    递归脱敏 JSON 类数据 (dict / list / tuple / 标量)
    - 敏感字段（不区分大小写）替换为 [REDACTED]
    - 当前路径上重复出现的容器视为循环引用，替换为 [Circular Reference]
    - 标量原样返回，输入不会被修改
    """
    if not isinstance(value, (dict, list, tuple)):
        return value

    if _seen is None:
        _seen = set()
    marker = id(value)
    if marker in _seen:
        return CIRCULAR
    _seen.add(marker)

    try:
        if isinstance(value, dict):
            lowered = {k.lower() for k in sensitive_keys}
            result = {}
            for key, item in value.items():
                if isinstance(key, str) and key.lower() in lowered and item is not None:
                    result[key] = REDACTED
                else:
                    result[key] = sanitize_metadata(item, sensitive_keys, _seen)
            return result
        return [sanitize_metadata(item, sensitive_keys, _seen) for item in value]
    finally:
        _seen.discard(marker)


def log_action(module, action, actor=None, entity_id=None, outcome=AuditLog.OUTCOME_SUCCESS,
               details=None, message=None):
    """
    记录审计日志
    :param module: 模块名称 (如 'article', 'category', 'tag')
    :param action: 操作名称 (如 'create', 'submit', 'move')
    :param actor: 操作者 Actor（可为空）
    :param entity_id: 实体 ID
    :param outcome: success / failure
    :param details: 详细信息 (dict)，写入前脱敏
    :return: AuditLog 或 None（写入失败）
    """
    user_id = getattr(actor, 'user_id', None)
    level = 'info' if outcome == AuditLog.OUTCOME_SUCCESS else 'warning'

    logger.log(
        logging.INFO if level == 'info' else logging.WARNING,
        '%s.%s entity=%s user=%s outcome=%s', module, action, entity_id, user_id, outcome,
    )

    try:
        sensitive = current_app.config.get('AUDIT_SENSITIVE_KEYS', DEFAULT_SENSITIVE_KEYS)
        payload = None
        if details:
            payload = json.dumps(sanitize_metadata(details, sensitive), ensure_ascii=False, default=str)

        log = AuditLog(
            user_id=user_id,
            module=module,
            action=action,
            entity_id=entity_id,
            outcome=outcome,
            level=level,
            message=(message or '')[:512] or None,
            details=payload,
        )
        if has_request_context():
            log.endpoint = request.path
            log.method = request.method
            log.ip_address = request.remote_addr
        db.session.add(log)
        db.session.commit()
        return log
    except Exception:
        db.session.rollback()
        logger.warning('审计日志写入失败: %s.%s entity=%s', module, action, entity_id, exc_info=True)
        return None


def audit_log(module, action):
    """
    审计日志装饰器（用于服务层变更操作）
    成功时记录返回实体的 id；抛出异常时记录 failure 并原样抛出。
    被装饰函数需要有 actor 参数。

    使用方法:
    @audit_log('article', 'submit')
    def submit(article_id, actor):
        pass
    """
    def decorator(f):
        signature = inspect.signature(f)

        @wraps(f)
        def decorated_function(*args, **kwargs):
            bound = signature.bind_partial(*args, **kwargs)
            actor = bound.arguments.get('actor')
            target_id = _first_int(bound.arguments.values())
            try:
                result = f(*args, **kwargs)
            except CmsException as e:
                db.session.rollback()
                log_action(module, action, actor=actor, entity_id=target_id,
                           outcome=AuditLog.OUTCOME_FAILURE, message=e.message,
                           details={'kind': e.kind})
                raise
            except Exception:
                db.session.rollback()
                log_action(module, action, actor=actor, entity_id=target_id,
                           outcome=AuditLog.OUTCOME_FAILURE, message='unexpected error')
                raise
            log_action(module, action, actor=actor,
                       entity_id=getattr(result, 'id', None) or target_id)
            return result
        return decorated_function
    return decorator


def _first_int(values):
    for value in values:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None
