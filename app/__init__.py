import logging
import colorlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import config
from app.extensions import db, migrate, login_manager, cache
from app.exceptions import CmsException, Unexpected

# 导入 commands 模块，用于注册 CLI 命令
from app import commands


def create_app(config_name='default'):
    """CMS 应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 5. 注册全局错误处理
    register_error_handlers(app)

    # 6. 注册 CLI 命令
    register_commands(app)

    return app


def register_blueprints(app):
    """注册所有业务模块蓝图"""
    # 认证蓝图
    from app.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    # 文章管理蓝图
    from app.blueprints.articles import articles_bp
    app.register_blueprint(articles_bp, url_prefix='/api/articles')

    # 公开文章蓝图
    from app.blueprints.public import public_bp
    app.register_blueprint(public_bp, url_prefix='/api/public')

    # 分类树蓝图
    from app.blueprints.categories import categories_bp
    app.register_blueprint(categories_bp, url_prefix='/api/categories')

    # 标签蓝图
    from app.blueprints.tags import tags_bp
    app.register_blueprint(tags_bp, url_prefix='/api/tags')

    # 仪表盘蓝图
    from app.blueprints.dashboard import dashboard_bp
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')

    # AI 编辑助手蓝图
    from app.blueprints.ai import ai_bp
    app.register_blueprint(ai_bp, url_prefix='/api/ai')

    # 系统管理蓝图
    from app.blueprints.system import bp as system_bp
    app.register_blueprint(system_bp, url_prefix='/system')


def register_error_handlers(app):
    """领域错误统一映射为 JSON 信封 { success: false, error: { kind, message } }"""

    @app.errorhandler(CmsException)
    def handle_cms_exception(e):
        if isinstance(e, Unexpected):
            app.logger.error(f'{e.kind}: {e.message}')
        return jsonify(e.to_dict()), e.code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        kinds = {404: 'not_found', 405: 'method_not_allowed', 401: 'unauthorized', 403: 'forbidden'}
        body = {'success': False, 'error': {'kind': kinds.get(e.code, 'http_error'), 'message': e.description}}
        return jsonify(body), e.code

    @app.errorhandler(Exception)
    def internal_server_error(e):
        # 不向调用方泄露内部细节
        app.logger.exception('未处理的异常')
        db.session.rollback()
        return jsonify(Unexpected().to_dict()), 500


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)


def configure_logging(app):
    """配置彩色控制台日志，提升开发体验"""
    if app.debug:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)

        formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(blue)s%(name)s%(reset)s %(message)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
