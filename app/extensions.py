from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_caching import Cache

# 初始化扩展对象 (暂不绑定 app)
db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
login_manager = LoginManager()

login_manager.session_protection = 'strong'


@login_manager.user_loader
def load_user(user_id):
    """Flask-Login 用户加载回调"""
    from app.models import User
    return db.session.get(User, int(user_id))


# JSON 接口：未登录直接返回 401，不做页面跳转
@login_manager.unauthorized_handler
def unauthorized():
    from app.exceptions import Unauthorized
    raise Unauthorized()
