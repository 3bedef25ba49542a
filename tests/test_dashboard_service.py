from datetime import datetime

from app.extensions import db
from app.models.content import Article
from app.services.article_service import ArticleService
from app.services.category_service import CategoryService
from app.services.dashboard_service import DashboardService
from app.services.tag_service import TagService


def make(actor, title, created_at=None, views=0):
    article = ArticleService.create({'title': title}, actor)
    if created_at is not None or views:
        article.created_at = created_at or article.created_at
        article.views = views
        db.session.commit()
    return article


class TestStatistics:

    def test_empty_database(self, admin):
        stats = DashboardService.get_statistics(admin)
        assert stats['overview'] == {
            'total_articles': 0,
            'published_count': 0,
            'total_views': 0,
            'this_month_count': 0,
            'this_week_count': 0,
        }
        assert stats['status_counts'] == {status: 0 for status in Article.STATUSES}
        assert stats['top_articles'] == []
        assert stats['articles_by_month'] == []

    def test_status_counts_and_views(self, admin, editor):
        draft = make(editor, 'Draft', views=3)
        live = make(editor, 'Live', views=10)
        ArticleService.publish(live.id, admin)
        submitted = make(editor, 'Queued')
        ArticleService.submit(submitted.id, editor)

        stats = DashboardService.get_statistics(editor)
        assert stats['overview']['total_articles'] == 3
        assert stats['overview']['published_count'] == 1
        assert stats['overview']['total_views'] == 13
        assert stats['status_counts']['draft'] == 1
        assert stats['status_counts']['submitted'] == 1
        assert stats['status_counts']['published'] == 1
        assert [a['id'] for a in stats['top_articles']][:2] == [live.id, draft.id]
        assert stats['top_articles'][0]['author']['username'] == 'editor'

    def test_system_stats_only_for_admin(self, admin, editor):
        CategoryService.create({'name': 'News'}, admin)
        TagService.create({'name': 'Energy'}, editor)

        assert DashboardService.get_statistics(editor)['system_stats'] is None
        assert DashboardService.get_statistics(admin)['system_stats'] == {
            'total_users': 3,
            'total_categories': 1,
            'total_tags': 1,
        }

    def test_month_and_week_windows(self, editor):
        # 2024-05-15 是周三，本周从 05-12 (周日) 开始
        now = datetime(2024, 5, 15, 12, 0)
        make(editor, 'Today', created_at=datetime(2024, 5, 15, 9, 0))
        make(editor, 'Sunday', created_at=datetime(2024, 5, 12, 0, 30))
        make(editor, 'Early May', created_at=datetime(2024, 5, 2))
        make(editor, 'April', created_at=datetime(2024, 4, 20))

        overview = DashboardService.get_statistics(editor, now=now)['overview']
        assert overview['this_week_count'] == 2
        assert overview['this_month_count'] == 3

    def test_recent_articles_newest_first(self, editor):
        make(editor, 'Old', created_at=datetime(2024, 1, 1))
        new = make(editor, 'New', created_at=datetime(2024, 3, 1))
        recent = DashboardService.get_statistics(editor)['recent_articles']
        assert recent[0]['id'] == new.id


class TestArticlesByMonth:

    def test_groups_last_six_months(self, editor):
        now = datetime(2024, 3, 10)
        make(editor, 'Too old', created_at=datetime(2023, 8, 31))
        make(editor, 'Sep', created_at=datetime(2023, 9, 1))
        make(editor, 'Jan a', created_at=datetime(2024, 1, 5))
        make(editor, 'Jan b', created_at=datetime(2024, 1, 25))
        make(editor, 'Mar', created_at=datetime(2024, 3, 2))

        assert DashboardService.articles_by_month(now) == [
            {'year': 2023, 'month': 9, 'count': 1},
            {'year': 2024, 'month': 1, 'count': 2},
            {'year': 2024, 'month': 3, 'count': 1},
        ]
