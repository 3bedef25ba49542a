from app.extensions import db
from .base import BaseModel


class Category(BaseModel):
    """文章分类 (树形结构，配合闭包表)"""
    __tablename__ = 'categories'

    TYPE_EVENT = 'event'          # 活动
    TYPE_NEWS_TYPE = 'news_type'  # 新闻类型
    TYPE_OTHER = 'other'          # 其他
    TYPES = (TYPE_EVENT, TYPE_NEWS_TYPE, TYPE_OTHER)

    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(160), unique=True, nullable=False, index=True)
    type = db.Column(db.String(20), default=TYPE_OTHER, nullable=False, index=True)
    description = db.Column(db.Text)
    order = db.Column(db.Integer, default=0, nullable=False)  # 同级排序
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # 自关联：上级分类
    parent_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=True, index=True)
    children = db.relationship('Category', backref=db.backref('parent', remote_side='Category.id'))

    def sort_key(self):
        return (self.order or 0, self.name or '')

    def __repr__(self):
        return f'<Category {self.slug}>'


class CategoryClosure(db.Model):
    """分类闭包表：每一对 (祖先, 后代)，包含自身对"""
    __tablename__ = 'categories_closure'

    id_ancestor = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)
    id_descendant = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)

    def __repr__(self):
        return f'<CategoryClosure {self.id_ancestor}->{self.id_descendant}>'


class Tag(BaseModel):
    """通用标签"""
    __tablename__ = 'tags'
    name = db.Column(db.String(64), unique=True, nullable=False)
    slug = db.Column(db.String(80), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)

    def __repr__(self):
        return f'<Tag {self.slug}>'
