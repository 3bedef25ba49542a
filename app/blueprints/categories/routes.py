from flask import request
from flask_login import login_required

from app.blueprints.categories import categories_bp
from app.blueprints.categories.forms import CategoryForm, CategoryUpdateForm, CategoryMoveForm, CREATE_FIELDS
from app.exceptions import ValidationError
from app.services.category_service import CategoryService
from app.utils.api import get_json_body, success
from app.utils.permissions import current_actor
from app.utils.validators import collect_patch, load_form


@categories_bp.route('', methods=['GET'])
@categories_bp.route('/tree', methods=['GET'])
@login_required
def tree():
    """分类树（?type=event|news_type|other）"""
    return success(CategoryService.get_tree(request.args.get('type') or None))


@categories_bp.route('/<int:id>', methods=['GET'])
@login_required
def detail(id):
    return success(CategoryService.get_node(id))


@categories_bp.route('', methods=['POST'])
@login_required
def create():
    payload = get_json_body()
    form = load_form(CategoryForm, payload)
    category = CategoryService.create(collect_patch(form, payload, CREATE_FIELDS), current_actor())
    return success(CategoryService.get_node(category.id), 201)


@categories_bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    payload = get_json_body()
    form = load_form(CategoryUpdateForm, payload)
    CategoryService.update(id, collect_patch(form, payload, CREATE_FIELDS), current_actor())
    return success(CategoryService.get_node(id))


@categories_bp.route('/<int:id>/move', methods=['PATCH', 'POST'])
@login_required
def move(id):
    payload = get_json_body()
    if 'parent_id' not in payload:
        raise ValidationError('缺少 parent_id')
    form = load_form(CategoryMoveForm, payload)
    CategoryService.move(id, collect_patch(form, payload, ('parent_id',))['parent_id'], current_actor())
    return success(CategoryService.get_node(id))


@categories_bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    CategoryService.delete(id, current_actor())
    return success({'id': id})
