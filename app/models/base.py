from datetime import datetime
from sqlalchemy.exc import IntegrityError
from app.extensions import db
from app.exceptions import Conflict


class BaseModel(db.Model):
    """
    CMS 模型基类
    包含：ID主键, 创建时间, 更新时间, 序列化方法
    """
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        """
        通用序列化方法：将模型转换为字典，便于 API 返回 JSON。
        过滤掉以 '_' 开头的私有属性。
        """
        data = {}
        for c in self.__table__.columns:
            if c.name.startswith('_'):
                continue
            val = getattr(self, c.name)
            if isinstance(val, datetime):
                data[c.name] = val.isoformat()
            else:
                data[c.name] = val
        return data


def commit_or_conflict(message='数据已存在 (唯一约束冲突)'):
    """
    提交事务；并发请求绕过了应用层唯一性检查时，
    由数据库唯一约束兜底，转换为 Conflict
    """
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(message)
