from flask import request
from flask_login import login_required

from app.blueprints.tags import tags_bp
from app.blueprints.tags.forms import TagForm, TagUpdateForm, FIELDS
from app.services.tag_service import TagService
from app.utils.api import get_json_body, get_pagination, paginated, success
from app.utils.permissions import current_actor
from app.utils.validators import collect_patch, load_form


@tags_bp.route('', methods=['GET'])
@login_required
def index():
    page, limit = get_pagination()
    items, total = TagService.list_tags(page=page, limit=limit, search=request.args.get('search') or None)
    return paginated([t.to_dict() for t in items], total, page, limit)


@tags_bp.route('/<int:id>', methods=['GET'])
@login_required
def detail(id):
    return success(TagService.get(id).to_dict())


@tags_bp.route('', methods=['POST'])
@login_required
def create():
    payload = get_json_body()
    form = load_form(TagForm, payload)
    tag = TagService.create(collect_patch(form, payload, FIELDS), current_actor())
    return success(tag.to_dict(), 201)


@tags_bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    payload = get_json_body()
    form = load_form(TagUpdateForm, payload)
    tag = TagService.update(id, collect_patch(form, payload, FIELDS), current_actor())
    return success(tag.to_dict())


@tags_bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    TagService.delete(id, current_actor())
    return success({'id': id})
