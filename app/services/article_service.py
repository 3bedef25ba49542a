"""
文章生命周期服务
状态机: draft -> submitted -> (under_review) -> approved / rejected -> published
管理员可以通过 update 直接设置任意状态（管理覆盖）。

所有操作都接收显式的 Actor（操作者能力），不读取 HTTP 上下文。
"""
import json
from datetime import datetime

from flask import current_app

from app.exceptions import Conflict, NotFound, PermissionDenied, ValidationError
from app.extensions import db
from app.models.base import commit_or_conflict
from app.models.content import EMPTY_DOCUMENT, Article, article_categories
from app.models.taxonomy import Category, Tag
from app.services.category_service import CategoryService
from app.utils.audit import audit_log
from app.utils.content_stats import DEFAULT_WORDS_PER_MINUTE, calculate_stats
from app.utils.slug import generate_slug

# 可直接赋值的字段（出现在请求中即更新）
SIMPLE_FIELDS = (
    'subtitle', 'excerpt', 'content_html', 'author_name', 'featured_image',
    'seo_title', 'seo_description', 'seo_keywords', 'visibility', 'scheduled_at',
)
FLAG_FIELDS = ('is_featured', 'is_breaking_news', 'allow_comments')

OWNER_EDITABLE = (Article.STATUS_DRAFT, Article.STATUS_SUBMITTED)
REVIEWABLE = (Article.STATUS_SUBMITTED, Article.STATUS_UNDER_REVIEW)


class ArticleService:
    """文章状态机 + 内容统计 + slug 维护"""

    # ==================== 查询 ====================

    @staticmethod
    def get(article_id):
        article = db.session.get(Article, article_id)
        if article is None:
            raise NotFound('文章不存在')
        return article

    @staticmethod
    def get_by_slug(slug, published_only=True):
        query = Article.query.filter_by(slug=slug)
        if published_only:
            query = query.filter_by(status=Article.STATUS_PUBLISHED)
        article = query.first()
        if article is None:
            raise NotFound('文章不存在')
        return article

    @staticmethod
    def list_articles(page=1, limit=10, status=None, category_id=None, tag_id=None,
                      search=None, author_id=None):
        """
        文章列表（按创建时间倒序）
        category_id 会包含该分类整棵子树下的文章
        :return: (items, total)
        """
        query = Article.query

        if status:
            if status not in Article.STATUSES:
                raise ValidationError(f'未知的文章状态: {status}')
            query = query.filter(Article.status == status)

        if category_id is not None:
            subtree = CategoryService.descendant_ids(category_id) or [category_id]
            query = query.filter(Article.id.in_(
                db.session.query(article_categories.c.article_id)
                .filter(article_categories.c.category_id.in_(subtree))
            ))

        if tag_id is not None:
            query = query.filter(Article.tags.any(Tag.id == tag_id))

        if search:
            pattern = f'%{search}%'
            query = query.filter(Article.title.ilike(pattern) | Article.excerpt.ilike(pattern))

        if author_id is not None:
            query = query.filter(Article.author_id == author_id)

        pagination = query.order_by(Article.created_at.desc(), Article.id.desc()) \
            .paginate(page=page, per_page=limit, error_out=False)
        return pagination.items, pagination.total

    @staticmethod
    def list_my_articles(actor, page=1, limit=10):
        return ArticleService.list_articles(page=page, limit=limit, author_id=actor.user_id)

    @staticmethod
    def list_published(page=1, limit=10, category_slug=None, tag_slug=None):
        """公开接口：只返回已发布文章，按发布时间倒序"""
        query = Article.query.filter(Article.status == Article.STATUS_PUBLISHED)

        if category_slug:
            category = Category.query.filter_by(slug=category_slug).first()
            if category is None:
                return [], 0
            subtree = CategoryService.descendant_ids(category.id) or [category.id]
            query = query.filter(Article.categories.any(Category.id.in_(subtree)))

        if tag_slug:
            query = query.filter(Article.tags.any(Tag.slug == tag_slug))

        pagination = query.order_by(Article.published_at.desc(), Article.id.desc()) \
            .paginate(page=page, per_page=limit, error_out=False)
        return pagination.items, pagination.total

    @staticmethod
    def record_view(article):
        article.views = (article.views or 0) + 1
        db.session.commit()
        return article

    # ==================== 生命周期 ====================

    @staticmethod
    @audit_log('article', 'create')
    def create(data, actor):
        """
        创建文章，状态固定为草稿，操作者为所有者
        未提供 slug 时由标题生成
        """
        title = data.get('title')
        if not title:
            raise ValidationError('标题不能为空')

        slug = data.get('slug') or generate_slug(title)
        if not slug:
            raise ValidationError('无法从标题生成 slug')
        if Article.query.filter_by(slug=slug).first():
            raise Conflict('文章 slug 已存在')

        categories = _load_categories(data.get('category_ids'))
        tags = _load_tags(data.get('tag_ids'))

        article = Article(
            title=title,
            slug=slug,
            status=Article.STATUS_DRAFT,
            author_id=actor.user_id,
            content_json=_serialize_content(data.get('content')),
        )
        for field in SIMPLE_FIELDS:
            if data.get(field) is not None:
                setattr(article, field, data[field])
        for field in FLAG_FIELDS:
            if data.get(field) is not None:
                setattr(article, field, bool(data[field]))
        # SEO 默认取标题 / 摘要
        article.seo_title = article.seo_title or title
        article.seo_description = article.seo_description or article.excerpt

        _apply_stats(article)
        article.categories = categories
        article.tags = tags

        db.session.add(article)
        commit_or_conflict('文章 slug 已存在')
        return article

    @staticmethod
    @audit_log('article', 'update')
    def update(article_id, data, actor):
        """
        部分更新文章
        - 非管理员：只能修改自己的草稿/已提交文章，状态只能设为 draft/submitted
        - 管理员：任意阶段可修改，可直接设置任意状态
        - 内容变化时重新计算统计
        - 标题变化且未显式给出 slug 时自动重新生成；与其他文章冲突则保留原 slug
        """
        article = ArticleService.get(article_id)
        _ensure_can_edit(article, actor)

        new_status = data.get('status')
        if new_status is not None:
            if new_status not in Article.STATUSES:
                raise ValidationError(f'未知的文章状态: {new_status}')
            if not actor.is_admin and new_status not in OWNER_EDITABLE:
                raise PermissionDenied('普通用户只能将文章设为草稿或已提交')

        explicit_slug = data.get('slug')
        if explicit_slug and explicit_slug != article.slug:
            owner = Article.query.filter_by(slug=explicit_slug).first()
            if owner is not None and owner.id != article.id:
                raise Conflict('文章 slug 已存在')

        categories = _load_categories(data['category_ids']) if data.get('category_ids') is not None else None
        tags = _load_tags(data['tag_ids']) if data.get('tag_ids') is not None else None

        new_title = data.get('title')
        title_changed = bool(new_title) and new_title != article.title

        if new_title:
            article.title = new_title
        for field in SIMPLE_FIELDS:
            if field in data:
                setattr(article, field, data[field])
        for field in FLAG_FIELDS:
            if data.get(field) is not None:
                setattr(article, field, bool(data[field]))

        if data.get('content') is not None:
            article.content_json = _serialize_content(data['content'])
            _apply_stats(article)

        if new_status is not None:
            if new_status == Article.STATUS_PUBLISHED:
                _mark_published(article)
            else:
                article.status = new_status

        if explicit_slug:
            article.slug = explicit_slug
        elif title_changed:
            candidate = generate_slug(new_title)
            owner = Article.query.filter(Article.slug == candidate, Article.id != article.id).first() \
                if candidate else None
            if candidate and owner is None:
                article.slug = candidate

        if categories is not None:
            article.categories = categories
        if tags is not None:
            article.tags = tags

        commit_or_conflict('文章 slug 已存在')
        return article

    @staticmethod
    @audit_log('article', 'submit')
    def submit(article_id, actor):
        """草稿 -> 已提交（所有者）"""
        article = ArticleService.get(article_id)
        _ensure_owner(article, actor)
        if article.status != Article.STATUS_DRAFT:
            raise Conflict('只有草稿可以提交审核')

        article.status = Article.STATUS_SUBMITTED
        db.session.commit()
        return article

    @staticmethod
    @audit_log('article', 'approve')
    def approve(article_id, actor, notes=None):
        """已提交/审核中 -> 审核通过（管理员）"""
        return _review(article_id, actor, Article.STATUS_APPROVED, notes)

    @staticmethod
    @audit_log('article', 'reject')
    def reject(article_id, actor, notes=None):
        """已提交/审核中 -> 已驳回（管理员）"""
        return _review(article_id, actor, Article.STATUS_REJECTED, notes)

    @staticmethod
    @audit_log('article', 'publish')
    def publish(article_id, actor):
        """
        发布：所有者只能发布审核通过的文章，管理员可以发布任意状态的文章
        published_at 只在首次发布时写入
        """
        article = ArticleService.get(article_id)
        if not actor.is_admin:
            _ensure_owner(article, actor)
            if article.status != Article.STATUS_APPROVED:
                raise Conflict('只有审核通过的文章可以发布')

        _mark_published(article)
        db.session.commit()
        return article

    @staticmethod
    @audit_log('article', 'delete')
    def delete(article_id, actor):
        """物理删除（管理员），同时清理分类/标签关联"""
        if not actor.is_admin:
            raise PermissionDenied('只有管理员可以删除文章')
        article = ArticleService.get(article_id)
        article.categories = []
        article.tags = []
        db.session.delete(article)
        db.session.commit()


def _review(article_id, actor, target_status, notes):
    if not actor.is_admin:
        raise PermissionDenied('只有管理员可以审核文章')
    article = ArticleService.get(article_id)
    if article.status not in REVIEWABLE:
        raise Conflict('文章当前状态不可审核')

    article.status = target_status
    if notes:
        article.review_notes = notes
    db.session.commit()
    return article


def _ensure_owner(article, actor):
    if actor.is_admin:
        return
    if article.author_id != actor.user_id:
        raise PermissionDenied('只能操作自己的文章')


def _ensure_can_edit(article, actor):
    if actor.is_admin:
        return
    _ensure_owner(article, actor)
    if article.status not in OWNER_EDITABLE:
        raise PermissionDenied('只能修改草稿或已提交的文章')


def _mark_published(article):
    article.status = Article.STATUS_PUBLISHED
    if article.published_at is None:
        article.published_at = datetime.utcnow()


def _serialize_content(content):
    if content is None:
        return EMPTY_DOCUMENT
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


def _apply_stats(article):
    words_per_minute = current_app.config.get('READING_WORDS_PER_MINUTE', DEFAULT_WORDS_PER_MINUTE)
    stats = calculate_stats(article.content_json, words_per_minute)
    article.word_count = stats.word_count
    article.character_count = stats.character_count
    article.reading_time = stats.reading_time


def _load_categories(ids):
    if not ids:
        return []
    wanted = set(ids)
    found = Category.query.filter(Category.id.in_(wanted)).all()
    missing = wanted - {c.id for c in found}
    if missing:
        raise NotFound(f'分类不存在: {sorted(missing)}')
    return found


def _load_tags(ids):
    if not ids:
        return []
    wanted = set(ids)
    found = Tag.query.filter(Tag.id.in_(wanted)).all()
    missing = wanted - {t.id for t in found}
    if missing:
        raise NotFound(f'标签不存在: {sorted(missing)}')
    return found
