from app.exceptions import Conflict, NotFound, PermissionDenied, ValidationError
from app.extensions import db
from app.models.base import commit_or_conflict
from app.models.taxonomy import Tag
from app.utils.audit import audit_log
from app.utils.slug import generate_slug


class TagService:
    """标签（扁平结构）CRUD"""

    @staticmethod
    def list_tags(page=1, limit=10, search=None):
        """:return: (items, total)"""
        query = Tag.query
        if search:
            pattern = f'%{search}%'
            query = query.filter(Tag.name.ilike(pattern) | Tag.slug.ilike(pattern))
        pagination = query.order_by(Tag.created_at.desc(), Tag.id.desc()) \
            .paginate(page=page, per_page=limit, error_out=False)
        return pagination.items, pagination.total

    @staticmethod
    def get(tag_id):
        tag = db.session.get(Tag, tag_id)
        if tag is None:
            raise NotFound('标签不存在')
        return tag

    @staticmethod
    @audit_log('tag', 'create')
    def create(data, actor):
        name = data.get('name')
        slug = data.get('slug') or generate_slug(name)
        if not name or not slug:
            raise ValidationError('标签名称无效')

        if Tag.query.filter((Tag.name == name) | (Tag.slug == slug)).first():
            raise Conflict('标签名称或 slug 已存在')

        tag = Tag(name=name, slug=slug, description=data.get('description'))
        db.session.add(tag)
        commit_or_conflict('标签名称或 slug 已存在')
        return tag

    @staticmethod
    @audit_log('tag', 'update')
    def update(tag_id, patch, actor):
        tag = TagService.get(tag_id)

        new_name = patch.get('name')
        if new_name and new_name != tag.name:
            if Tag.query.filter(Tag.name == new_name, Tag.id != tag.id).first():
                raise Conflict('标签名称已存在')
        new_slug = patch.get('slug')
        if new_slug and new_slug != tag.slug:
            if Tag.query.filter(Tag.slug == new_slug, Tag.id != tag.id).first():
                raise Conflict('标签 slug 已存在')

        if new_name:
            tag.name = new_name
        if new_slug:
            tag.slug = new_slug
        if 'description' in patch:
            tag.description = patch['description']

        commit_or_conflict('标签名称或 slug 已存在')
        return tag

    @staticmethod
    @audit_log('tag', 'delete')
    def delete(tag_id, actor):
        """删除标签，文章关联随之移除"""
        if not actor.is_admin:
            raise PermissionDenied('只有管理员可以删除标签')
        tag = TagService.get(tag_id)
        tag.articles = []
        db.session.delete(tag)
        db.session.commit()
