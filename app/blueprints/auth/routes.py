from datetime import datetime

from flask_login import login_user, logout_user, login_required, current_user

from app.extensions import db
from app.exceptions import PermissionDenied, Unauthorized
from app.models.auth import User
from app.blueprints.auth import auth_bp
from app.blueprints.auth.forms import LoginForm
from app.utils.api import get_json_body, success
from app.utils.audit import log_action
from app.utils.permissions import actor_for
from app.utils.validators import load_form


@auth_bp.route('/login', methods=['POST'])
def login():
    """会话登录（身份签发不在本系统范围内，仅用于识别操作者）"""
    payload = get_json_body()
    form = load_form(LoginForm, payload)

    user = User.query.filter_by(email=form.email.data).first()
    if user is None or not user.verify_password(form.password.data):
        log_action('auth', 'login', outcome='failure', details={'email': form.email.data})
        raise Unauthorized('访问被拒绝：无效的凭证。')

    if not user.is_active_user:
        log_action('auth', 'login', actor=actor_for(user), entity_id=user.id, outcome='failure',
                   message='account disabled')
        raise PermissionDenied('该账户已被系统锁定，请联系管理员。')

    login_user(user, remember=form.remember_me.data)
    user.last_login = datetime.utcnow()
    db.session.commit()

    log_action('auth', 'login', actor=actor_for(user), entity_id=user.id)
    return success(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    log_action('auth', 'logout', actor=actor_for(current_user), entity_id=current_user.id)
    logout_user()
    return success()


@auth_bp.route('/me')
@login_required
def me():
    return success(current_user.to_dict())
