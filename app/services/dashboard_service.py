"""仪表盘统计服务"""
from datetime import datetime, timedelta

from sqlalchemy import extract, func

from app.extensions import db
from app.models.auth import User
from app.models.content import Article
from app.models.taxonomy import Category, Tag

TOP_LIMIT = 5
MONTHS_BACK = 6


class DashboardService:
    """文章概况 / 状态分布 / 热门与最新文章 / 月度趋势"""

    @staticmethod
    def get_statistics(actor, now=None):
        """
        汇总统计
        :param actor: 操作者；管理员额外返回系统统计 (用户 / 分类 / 标签总数)
        :param now: 统计基准时间 (UTC)，默认当前时间
        """
        now = now or datetime.utcnow()
        month_start = datetime(now.year, now.month, 1)
        # 以周日为一周起点
        week_start = datetime(now.year, now.month, now.day) - timedelta(days=(now.weekday() + 1) % 7)

        # 状态分布
        status_counts = {status: 0 for status in Article.STATUSES}
        rows = db.session.query(Article.status, func.count(Article.id)).group_by(Article.status).all()
        for status, count in rows:
            status_counts[status] = count

        overview = {
            'total_articles': sum(status_counts.values()),
            'published_count': status_counts[Article.STATUS_PUBLISHED],
            'total_views': int(db.session.query(func.coalesce(func.sum(Article.views), 0)).scalar()),
            'this_month_count': Article.query.filter(Article.created_at >= month_start).count(),
            'this_week_count': Article.query.filter(Article.created_at >= week_start).count(),
        }

        top_articles = Article.query.order_by(Article.views.desc(), Article.id.desc()).limit(TOP_LIMIT).all()
        recent_articles = Article.query.order_by(Article.created_at.desc(), Article.id.desc()) \
            .limit(TOP_LIMIT).all()

        return {
            'overview': overview,
            'status_counts': status_counts,
            'top_articles': [_summary(a) for a in top_articles],
            'recent_articles': [_summary(a) for a in recent_articles],
            'articles_by_month': DashboardService.articles_by_month(now),
            'system_stats': _system_stats() if actor.is_admin else None,
        }

    @staticmethod
    def articles_by_month(now=None, months=MONTHS_BACK):
        """最近 N 个月 (含当月) 的新建文章数，只返回有数据的月份，按时间升序"""
        now = now or datetime.utcnow()
        year, month = now.year, now.month - months
        while month < 1:
            month += 12
            year -= 1
        since = datetime(year, month, 1)

        year_col = extract('year', Article.created_at)
        month_col = extract('month', Article.created_at)
        rows = db.session.query(year_col, month_col, func.count(Article.id)) \
            .filter(Article.created_at >= since) \
            .group_by(year_col, month_col) \
            .order_by(year_col, month_col).all()
        return [{'year': int(y), 'month': int(m), 'count': c} for y, m, c in rows]


def _summary(article):
    author = article.author
    return {
        'id': article.id,
        'title': article.title,
        'views': article.views or 0,
        'status': article.status,
        'created_at': article.created_at.isoformat() if article.created_at else None,
        'author': {
            'id': author.id,
            'username': author.username,
            'full_name': author.full_name,
        } if author else None,
    }


def _system_stats():
    return {
        'total_users': User.query.count(),
        'total_categories': Category.query.count(),
        'total_tags': Tag.query.count(),
    }
