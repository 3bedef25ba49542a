from app.extensions import db
from .base import BaseModel

EMPTY_DOCUMENT = '{"type":"doc","content":[]}'

# 多对多：文章 <-> 分类 / 标签（关联表无附加字段）
article_categories = db.Table('article_categories',
    db.Column('article_id', db.Integer, db.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    db.Column('category_id', db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)
)

article_tags = db.Table('article_tags',
    db.Column('article_id', db.Integer, db.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    db.Column('tag_id', db.Integer, db.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True)
)


class Article(BaseModel):
    """CMS 文章"""
    __tablename__ = 'articles'

    STATUS_DRAFT = 'draft'                # 草稿
    STATUS_SUBMITTED = 'submitted'        # 已提交
    STATUS_UNDER_REVIEW = 'under_review'  # 审核中
    STATUS_APPROVED = 'approved'          # 审核通过
    STATUS_REJECTED = 'rejected'          # 已驳回
    STATUS_PUBLISHED = 'published'        # 已发布
    STATUSES = (
        STATUS_DRAFT, STATUS_SUBMITTED, STATUS_UNDER_REVIEW,
        STATUS_APPROVED, STATUS_REJECTED, STATUS_PUBLISHED,
    )

    title = db.Column(db.String(256), nullable=False)
    subtitle = db.Column(db.String(256))
    slug = db.Column(db.String(300), unique=True, nullable=False, index=True)
    excerpt = db.Column(db.Text)
    content_json = db.Column(db.Text, nullable=False, default=EMPTY_DOCUMENT)  # TipTap 文档
    content_html = db.Column(db.Text)  # 渲染后的 HTML 镜像

    status = db.Column(db.String(20), default=STATUS_DRAFT, nullable=False, index=True)

    author_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)
    author_name = db.Column(db.String(128))
    featured_image = db.Column(db.String(512))

    # SEO
    seo_title = db.Column(db.String(256))
    seo_description = db.Column(db.Text)
    seo_keywords = db.Column(db.Text)

    is_featured = db.Column(db.Boolean, default=False)
    is_breaking_news = db.Column(db.Boolean, default=False)
    allow_comments = db.Column(db.Boolean, default=True)
    visibility = db.Column(db.String(64), default='web,mobile')

    # 审核与发布
    review_notes = db.Column(db.Text)
    scheduled_at = db.Column(db.DateTime)
    published_at = db.Column(db.DateTime)  # 首次发布时写入，之后不再修改

    # 内容统计，随内容更新重新计算
    word_count = db.Column(db.Integer, default=0)
    character_count = db.Column(db.Integer, default=0)
    reading_time = db.Column(db.Integer, default=1)
    views = db.Column(db.Integer, default=0)

    author = db.relationship('User', backref=db.backref('articles', lazy='dynamic'))
    categories = db.relationship('Category', secondary=article_categories, backref='articles')
    tags = db.relationship('Tag', secondary=article_tags, backref='articles')

    def to_dict(self, with_relations=True):
        data = super().to_dict()
        if with_relations:
            data['categories'] = [{'id': c.id, 'name': c.name, 'slug': c.slug} for c in self.categories]
            data['tags'] = [{'id': t.id, 'name': t.name, 'slug': t.slug} for t in self.tags]
        return data

    def __repr__(self):
        return f'<Article {self.slug} [{self.status}]>'
