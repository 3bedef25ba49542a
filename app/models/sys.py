from app.extensions import db
from .base import BaseModel


class AuditLog(BaseModel):
    """系统操作审计"""
    __tablename__ = 'sys_audit_logs'

    OUTCOME_SUCCESS = 'success'
    OUTCOME_FAILURE = 'failure'

    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)
    module = db.Column(db.String(32), index=True)  # e.g., 'article', 'category'
    action = db.Column(db.String(64), index=True)  # e.g., 'create', 'publish'
    entity_id = db.Column(db.Integer)
    outcome = db.Column(db.String(16), default=OUTCOME_SUCCESS)
    level = db.Column(db.String(16), default='info')
    message = db.Column(db.String(512))
    endpoint = db.Column(db.String(256))
    method = db.Column(db.String(8))
    ip_address = db.Column(db.String(64))
    details = db.Column(db.Text)  # JSON 详情（已脱敏）

    user = db.relationship('User')
