class CmsException(Exception):
    """CMS 系统基础异常类"""
    kind = 'error'

    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = {'success': False}
        error = dict(self.payload or ())
        error['kind'] = self.kind
        error['message'] = self.message
        rv['error'] = error
        return rv


class ValidationError(CmsException):
    """请求数据验证错误"""
    kind = 'validation'

    def __init__(self, message="Invalid data", payload=None):
        super().__init__(message, code=400, payload=payload)


class NotFound(CmsException):
    """引用的实体不存在"""
    kind = 'not_found'

    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class Conflict(CmsException):
    """唯一性冲突 / 非法状态流转 / 自引用 / 存在子节点"""
    kind = 'conflict'

    def __init__(self, message="Conflict", payload=None):
        super().__init__(message, code=400, payload=payload)


class PermissionDenied(CmsException):
    """权限不足"""
    kind = 'forbidden'

    def __init__(self, message="Access denied", payload=None):
        super().__init__(message, code=403, payload=payload)


class Unauthorized(CmsException):
    """未登录"""
    kind = 'unauthorized'

    def __init__(self, message="Authentication required", payload=None):
        super().__init__(message, code=401, payload=payload)


class Unexpected(CmsException):
    """存储 / 外部服务故障，对外只暴露通用信息"""
    kind = 'unexpected'

    def __init__(self, message="Internal server error", payload=None):
        super().__init__(message, code=500, payload=payload)
