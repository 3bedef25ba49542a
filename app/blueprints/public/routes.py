"""公开文章接口（无需登录，只暴露已发布内容）"""
from flask import request

from app.blueprints.public import public_bp
from app.services.article_service import ArticleService
from app.utils.api import get_pagination, paginated, success


@public_bp.route('/articles', methods=['GET'])
def articles():
    page, limit = get_pagination()
    items, total = ArticleService.list_published(
        page=page,
        limit=limit,
        category_slug=request.args.get('category') or None,
        tag_slug=request.args.get('tag') or None,
    )
    return paginated([a.to_dict() for a in items], total, page, limit)


@public_bp.route('/articles/<slug>', methods=['GET'])
def article_detail(slug):
    """文章详情页，增加阅读数"""
    article = ArticleService.get_by_slug(slug)
    ArticleService.record_view(article)
    return success(article.to_dict())
