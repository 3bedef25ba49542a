from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from app.extensions import db
from .base import BaseModel


class Role(BaseModel):
    """角色"""
    __tablename__ = 'auth_roles'
    name = db.Column(db.String(64), unique=True)
    is_admin = db.Column(db.Boolean, default=False)

    users = db.relationship('User', backref='role', lazy='dynamic')

    def __repr__(self):
        return f'<Role {self.name}>'


class User(UserMixin, BaseModel):
    """用户（仅用于识别操作者，账号管理不在本系统范围内）"""
    __tablename__ = 'auth_users'
    email = db.Column(db.String(128), unique=True, index=True)
    username = db.Column(db.String(64), index=True)
    password_hash = db.Column(db.String(256))
    full_name = db.Column(db.String(128))

    is_active_user = db.Column(db.Boolean, default=True)  # 封号开关
    last_login = db.Column(db.DateTime)

    # 单角色模型：一个用户只挂一个角色
    role_id = db.Column(db.Integer, db.ForeignKey('auth_roles.id'))

    @property
    def password(self):
        raise AttributeError('密码不可读')

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return bool(self.role and self.role.is_admin)

    # Flask-Login 必须属性覆盖
    @property
    def is_active(self):
        return bool(self.is_active_user)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'full_name': self.full_name,
            'role': self.role.name if self.role else None,
            'is_admin': self.is_admin,
        }
