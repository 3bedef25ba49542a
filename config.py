import os
from dotenv import load_dotenv

# 加载 .env 环境变量
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    """基础配置类"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'

    # 数据库配置
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_RECORD_QUERIES = True

    # 内容统计：平均阅读速度 (词/分钟)
    READING_WORDS_PER_MINUTE = int(os.environ.get('READING_WORDS_PER_MINUTE', 200))

    # 分页
    ARTICLES_PER_PAGE = 10
    MAX_PAGE_SIZE = 100

    # 审计日志中需要脱敏的字段
    AUDIT_SENSITIVE_KEYS = ('password', 'token', 'accessToken', 'refreshToken', 'authorization')

    # Gemini / AI 编辑助手配置
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '')
    GEMINI_BASE_URL = os.environ.get('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash-lite')
    GEMINI_TEMPERATURE = float(os.environ.get('GEMINI_TEMPERATURE', 0.4))
    GEMINI_MAX_OUTPUT_TOKENS = int(os.environ.get('GEMINI_MAX_OUTPUT_TOKENS', 2048))
    GEMINI_TIMEOUT = 60.0
    # 未配置外部 AI Key 时启用本地回退（原样返回文档）
    AI_FALLBACK = os.environ.get('AI_FALLBACK', 'false').lower() in ('1', 'true', 'yes')

    # 缓存配置：分类树缓存在变更时按 key 失效。
    # SimpleCache 只在单个进程内有效，多 worker 部署时其他进程最长会返回
    # CACHE_DEFAULT_TIMEOUT 秒的旧数据，需改用共享后端 (如 CACHE_TYPE=RedisCache + CACHE_REDIS_URL)
    CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
    CACHE_REDIS_URL = os.environ.get('CACHE_REDIS_URL')
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get('CACHE_DEFAULT_TIMEOUT', 300))

    @staticmethod
    def init_app(app):
        # 确保 SQLite 实例目录存在
        instance_dir = os.path.join(basedir, 'instance')
        if not os.path.exists(instance_dir):
            os.makedirs(instance_dir)


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'cms.db')


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False

    DATABASE_URL = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'cms_prod.db')
    # PostgreSQL URL 修正（部分平台使用 postgres://）
    if DATABASE_URL and DATABASE_URL.startswith('postgres://'):
        DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = DATABASE_URL

    # 安全设置
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    CACHE_TYPE = 'SimpleCache'
    AI_FALLBACK = False
    GEMINI_API_KEY = ''

    @staticmethod
    def init_app(app):
        pass


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
