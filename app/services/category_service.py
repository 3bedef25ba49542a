"""
分类树服务
维护 parent/child 关系与闭包表 (categories_closure)：
每个节点都有自身对 (id, id)，以及每个祖先到它的 (ancestor, id) 记录。
"""
from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError

from app.exceptions import Conflict, NotFound, PermissionDenied, ValidationError
from app.extensions import cache, db
from app.models.base import commit_or_conflict
from app.models.taxonomy import Category, CategoryClosure
from app.utils.audit import audit_log
from app.utils.slug import generate_slug

TREE_CACHE_KEY = 'category_tree:{}'

UPDATABLE_FIELDS = ('name', 'slug', 'type', 'description', 'order', 'is_active')


class CategoryService:
    """分类树维护"""

    # ==================== 查询 ====================

    @staticmethod
    def get(category_id):
        category = db.session.get(Category, category_id)
        if category is None:
            raise NotFound('分类不存在')
        return category

    @staticmethod
    def get_tree(category_type=None):
        """
        返回分类森林（dict 结构，children 递归填充）
        同级按 order 升序、name 升序排列；可按类型过滤，
        父节点被过滤掉的分类作为根节点返回
        """
        if category_type is not None and category_type not in Category.TYPES:
            raise ValidationError(f'未知的分类类型: {category_type}')

        key = TREE_CACHE_KEY.format(category_type or 'all')
        tree = cache.get(key)
        if tree is not None:
            return tree

        query = Category.query
        if category_type:
            query = query.filter_by(type=category_type)
        categories = sorted(query.all(), key=Category.sort_key)

        nodes = {c.id: dict(c.to_dict(), children=[]) for c in categories}
        roots = []
        for c in categories:
            node = nodes[c.id]
            if c.parent_id is not None and c.parent_id in nodes:
                nodes[c.parent_id]['children'].append(node)
            else:
                roots.append(node)

        cache.set(key, roots)
        return roots

    @staticmethod
    def get_node(category_id):
        """单个节点及其直接子节点"""
        category = CategoryService.get(category_id)
        data = category.to_dict()
        data['children'] = [c.to_dict() for c in sorted(category.children, key=Category.sort_key)]
        return data

    @staticmethod
    def descendant_ids(category_id):
        """子树中所有节点 ID（含自身）"""
        rows = db.session.query(CategoryClosure.id_descendant).filter_by(id_ancestor=category_id).all()
        return [r[0] for r in rows]

    @staticmethod
    def ancestor_ids(category_id):
        """所有祖先节点 ID（含自身）"""
        rows = db.session.query(CategoryClosure.id_ancestor).filter_by(id_descendant=category_id).all()
        return [r[0] for r in rows]

    @staticmethod
    def ancestors(category_id):
        """从根到父节点的路径（面包屑）"""
        category = CategoryService.get(category_id)
        path = []
        node = category.parent
        while node is not None:
            path.append(node)
            node = node.parent
        path.reverse()
        return path

    # ==================== 变更 ====================

    @staticmethod
    @audit_log('category', 'create')
    def create(data, actor):
        """
        创建分类
        :param data: name, type, parent_id, slug, description, order, is_active
        """
        _require_admin(actor)

        name = data.get('name')
        slug = data.get('slug') or generate_slug(name)
        if not slug:
            raise ValidationError('无法从名称生成 slug')

        category_type = data.get('type') or Category.TYPE_OTHER
        if category_type not in Category.TYPES:
            raise ValidationError(f'未知的分类类型: {category_type}')

        if Category.query.filter_by(slug=slug).first():
            raise Conflict('分类 slug 已存在')

        parent_id = data.get('parent_id')
        if parent_id is not None and db.session.get(Category, parent_id) is None:
            raise NotFound('上级分类不存在')

        category = Category(
            name=name,
            slug=slug,
            type=category_type,
            description=data.get('description'),
            order=data.get('order') or 0,
            is_active=data.get('is_active', True) is not False,
            parent_id=parent_id,
        )
        db.session.add(category)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise Conflict('分类 slug 已存在')

        # 闭包表：自身对 + 复制父节点的所有祖先对
        rows = [{'id_ancestor': category.id, 'id_descendant': category.id}]
        if parent_id is not None:
            rows.extend({'id_ancestor': a, 'id_descendant': category.id}
                        for a in CategoryService.ancestor_ids(parent_id))
        db.session.execute(insert(CategoryClosure), rows)

        commit_or_conflict('分类 slug 已存在')
        _invalidate_tree_cache()
        return category

    @staticmethod
    @audit_log('category', 'update')
    def update(category_id, patch, actor):
        """
        部分更新：只修改 patch 中出现的字段
        patch 中出现 parent_id 时执行移动（None 表示移到根）
        """
        _require_admin(actor)
        category = CategoryService.get(category_id)

        new_slug = patch.get('slug')
        if new_slug and new_slug != category.slug:
            owner = Category.query.filter_by(slug=new_slug).first()
            if owner is not None and owner.id != category.id:
                raise Conflict('分类 slug 已存在')

        if patch.get('type') is not None and patch['type'] not in Category.TYPES:
            raise ValidationError(f'未知的分类类型: {patch["type"]}')

        if 'parent_id' in patch:
            _reparent(category, patch['parent_id'])

        if patch.get('name'):
            category.name = patch['name']
        if new_slug:
            category.slug = new_slug
        if patch.get('type') is not None:
            category.type = patch['type']
        if 'description' in patch:
            category.description = patch['description']
        if patch.get('order') is not None:
            category.order = patch['order']
        if patch.get('is_active') is not None:
            category.is_active = patch['is_active']

        commit_or_conflict('分类 slug 已存在')
        _invalidate_tree_cache()
        return category

    @staticmethod
    @audit_log('category', 'move')
    def move(category_id, new_parent_id, actor):
        """显式移动节点；new_parent_id 为 None 时移到根"""
        _require_admin(actor)
        category = CategoryService.get(category_id)
        _reparent(category, new_parent_id)
        db.session.commit()
        _invalidate_tree_cache()
        return category

    @staticmethod
    @audit_log('category', 'delete')
    def delete(category_id, actor):
        """删除分类：存在子节点时拒绝"""
        _require_admin(actor)
        category = CategoryService.get(category_id)
        if category.children:
            raise Conflict('分类下存在子分类，请先删除或移动子分类')

        db.session.execute(
            delete(CategoryClosure).where(
                (CategoryClosure.id_ancestor == category.id) |
                (CategoryClosure.id_descendant == category.id)
            )
        )
        category.articles = []
        db.session.delete(category)
        db.session.commit()
        _invalidate_tree_cache()

    @staticmethod
    def rebuild_closure():
        """
        根据 parent_id 重建整张闭包表（数据修复 / 初始化用）
        :return: 写入的记录数
        """
        categories = Category.query.all()
        parents = {c.id: c.parent_id for c in categories}

        rows = []
        for category_id in parents:
            node, seen = category_id, set()
            while node is not None:
                if node in seen:
                    raise Conflict(f'分类 {category_id} 的上级链存在循环')
                seen.add(node)
                rows.append({'id_ancestor': node, 'id_descendant': category_id})
                node = parents.get(node)

        db.session.execute(delete(CategoryClosure))
        if rows:
            db.session.execute(insert(CategoryClosure), rows)
        db.session.commit()
        _invalidate_tree_cache()
        return len(rows)


def _require_admin(actor):
    if actor is None or not actor.is_admin:
        raise PermissionDenied('只有管理员可以维护分类')


def _reparent(category, new_parent_id):
    """修改上级并重写整棵子树的闭包记录"""
    if new_parent_id is None:
        if category.parent_id is None:
            return
        _detach_subtree(category.id)
        category.parent_id = None
        return

    if new_parent_id == category.id:
        raise Conflict('分类不能作为自己的上级')
    if db.session.get(Category, new_parent_id) is None:
        raise NotFound('上级分类不存在')
    if new_parent_id in CategoryService.descendant_ids(category.id):
        raise Conflict('不能将分类移动到它自己的子分类下')
    if category.parent_id == new_parent_id:
        return

    _detach_subtree(category.id)
    _attach_subtree(category.id, new_parent_id)
    category.parent_id = new_parent_id


def _detach_subtree(node_id):
    """删除 (子树外的祖先, 子树内的节点) 记录，子树内部关系保留"""
    subtree = CategoryService.descendant_ids(node_id)
    outer = [a for a in CategoryService.ancestor_ids(node_id) if a != node_id]
    if not subtree or not outer:
        return
    db.session.execute(
        delete(CategoryClosure).where(
            CategoryClosure.id_descendant.in_(subtree),
            CategoryClosure.id_ancestor.in_(outer),
        )
    )


def _attach_subtree(node_id, parent_id):
    """新上级的每个祖先（含自身）× 子树的每个节点"""
    rows = [
        {'id_ancestor': a, 'id_descendant': d}
        for a in CategoryService.ancestor_ids(parent_id)
        for d in CategoryService.descendant_ids(node_id)
    ]
    if rows:
        db.session.execute(insert(CategoryClosure), rows)


def _invalidate_tree_cache():
    keys = [TREE_CACHE_KEY.format(t) for t in ('all',) + Category.TYPES]
    cache.delete_many(*keys)
