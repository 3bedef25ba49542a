"""文章管理接口（状态流转逻辑全部在 ArticleService 中）"""
from flask import request
from flask_login import login_required

from app.blueprints.articles import articles_bp
from app.blueprints.articles.forms import (
    ArticleForm, ArticleUpdateForm, ReviewForm, CREATE_FIELDS, UPDATE_FIELDS,
)
from app.services.article_service import ArticleService
from app.utils.api import get_json_body, get_pagination, paginated, success
from app.utils.permissions import current_actor
from app.utils.validators import collect_patch, load_form


@articles_bp.route('', methods=['GET'])
@login_required
def index():
    """文章列表（支持状态 / 分类子树 / 标签 / 关键词筛选）"""
    page, limit = get_pagination()
    items, total = ArticleService.list_articles(
        page=page,
        limit=limit,
        status=request.args.get('status') or None,
        category_id=request.args.get('category_id', type=int),
        tag_id=request.args.get('tag_id', type=int),
        search=request.args.get('search') or None,
    )
    return paginated([a.to_dict() for a in items], total, page, limit)


@articles_bp.route('/mine', methods=['GET'])
@login_required
def mine():
    page, limit = get_pagination()
    items, total = ArticleService.list_my_articles(current_actor(), page=page, limit=limit)
    return paginated([a.to_dict() for a in items], total, page, limit)


@articles_bp.route('/<int:id>', methods=['GET'])
@login_required
def detail(id):
    return success(ArticleService.get(id).to_dict())


@articles_bp.route('', methods=['POST'])
@login_required
def create():
    payload = get_json_body()
    form = load_form(ArticleForm, payload)
    article = ArticleService.create(collect_patch(form, payload, CREATE_FIELDS), current_actor())
    return success(article.to_dict(), 201)


@articles_bp.route('/<int:id>', methods=['PUT', 'PATCH'])
@login_required
def update(id):
    payload = get_json_body()
    form = load_form(ArticleUpdateForm, payload)
    article = ArticleService.update(id, collect_patch(form, payload, UPDATE_FIELDS), current_actor())
    return success(article.to_dict())


@articles_bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    ArticleService.delete(id, current_actor())
    return success({'id': id})


@articles_bp.route('/<int:id>/submit', methods=['POST'])
@login_required
def submit(id):
    return success(ArticleService.submit(id, current_actor()).to_dict())


@articles_bp.route('/<int:id>/approve', methods=['POST'])
@login_required
def approve(id):
    form = load_form(ReviewForm, request.get_json(silent=True) or {})
    return success(ArticleService.approve(id, current_actor(), notes=form.notes.data).to_dict())


@articles_bp.route('/<int:id>/reject', methods=['POST'])
@login_required
def reject(id):
    form = load_form(ReviewForm, request.get_json(silent=True) or {})
    return success(ArticleService.reject(id, current_actor(), notes=form.notes.data).to_dict())


@articles_bp.route('/<int:id>/publish', methods=['POST'])
@login_required
def publish(id):
    return success(ArticleService.publish(id, current_actor()).to_dict())
