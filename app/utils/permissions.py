"""
权限控制工具
请求进入时一次性解析出 Actor（操作者能力），作为显式参数传给服务层，
服务层的状态机守卫不依赖 HTTP 上下文，便于单元测试。
"""
from collections import namedtuple
from functools import wraps

from flask_login import current_user

from app.exceptions import PermissionDenied, Unauthorized

Actor = namedtuple('Actor', ['user_id', 'is_admin'])


def actor_for(user):
    """
    由用户对象构造 Actor
    注意：用户为单角色模型（user.role），多角色需要改为集合判断
    """
    return Actor(user_id=user.id, is_admin=bool(user.is_admin))


def current_actor():
    """当前请求的操作者；未登录时抛出 Unauthorized"""
    if not current_user.is_authenticated:
        raise Unauthorized()
    return actor_for(current_user)


def is_admin():
    """检查当前用户是否是管理员"""
    if not current_user.is_authenticated:
        return False
    return bool(current_user.is_admin)


def admin_required(f):
    """
    管理员权限装饰器
    只有 role.is_admin=True 的用户才能访问
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not is_admin():
            raise PermissionDenied('需要管理员权限')
        return f(*args, **kwargs)
    return decorated_function
