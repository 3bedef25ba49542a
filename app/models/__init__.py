# 按照依赖顺序导入
from .base import BaseModel
from .auth import User, Role
from .taxonomy import Category, CategoryClosure, Tag
from .content import Article, article_categories, article_tags
from .sys import AuditLog
