import pytest

from app.exceptions import Conflict, NotFound, PermissionDenied, ValidationError
from app.extensions import cache, db
from app.models.taxonomy import Category, CategoryClosure
from app.services.article_service import ArticleService
from app.services.category_service import TREE_CACHE_KEY, CategoryService


def closure_pairs():
    return {(row.id_ancestor, row.id_descendant) for row in CategoryClosure.query.all()}


@pytest.fixture
def forest(admin):
    """
    news
    ├── domestic
    │   └── city
    └── world
    events
    """
    news = CategoryService.create({'name': 'News', 'order': 1}, admin)
    domestic = CategoryService.create({'name': 'Domestic', 'parent_id': news.id, 'order': 1}, admin)
    city = CategoryService.create({'name': 'City', 'parent_id': domestic.id}, admin)
    world = CategoryService.create({'name': 'World', 'parent_id': news.id, 'order': 2}, admin)
    events = CategoryService.create({'name': 'Events', 'type': Category.TYPE_EVENT, 'order': 2}, admin)
    return {'news': news, 'domestic': domestic, 'city': city, 'world': world, 'events': events}


class TestCreate:

    def test_root_gets_self_pair_only(self, admin):
        category = CategoryService.create({'name': 'Solo'}, admin)
        assert closure_pairs() == {(category.id, category.id)}
        assert category.slug == 'solo'
        assert category.type == Category.TYPE_OTHER

    def test_child_copies_ancestor_pairs(self, forest):
        news, domestic, city = forest['news'], forest['domestic'], forest['city']
        pairs = closure_pairs()
        assert {(city.id, city.id), (domestic.id, city.id), (news.id, city.id)} <= pairs
        assert sorted(CategoryService.ancestor_ids(city.id)) == sorted([news.id, domestic.id, city.id])

    def test_missing_parent_is_not_found(self, admin):
        with pytest.raises(NotFound):
            CategoryService.create({'name': 'Orphan', 'parent_id': 999}, admin)
        assert Category.query.count() == 0

    def test_duplicate_slug_is_conflict(self, admin):
        CategoryService.create({'name': 'News'}, admin)
        with pytest.raises(Conflict):
            CategoryService.create({'name': 'news!'}, admin)

    def test_unknown_type_is_validation_error(self, admin):
        with pytest.raises(ValidationError):
            CategoryService.create({'name': 'X', 'type': 'weird'}, admin)

    def test_non_admin_forbidden(self, editor):
        with pytest.raises(PermissionDenied):
            CategoryService.create({'name': 'Nope'}, editor)


class TestTree:

    def test_forest_ordered_by_order_then_name(self, forest):
        tree = CategoryService.get_tree()
        assert [n['name'] for n in tree] == ['News', 'Events']
        news = tree[0]
        assert [n['name'] for n in news['children']] == ['Domestic', 'World']
        assert [n['name'] for n in news['children'][0]['children']] == ['City']

    def test_same_order_sorted_by_name(self, admin):
        CategoryService.create({'name': 'Zeta'}, admin)
        CategoryService.create({'name': 'Alpha'}, admin)
        assert [n['name'] for n in CategoryService.get_tree()] == ['Alpha', 'Zeta']

    def test_filter_by_type(self, forest):
        tree = CategoryService.get_tree(Category.TYPE_EVENT)
        assert [n['name'] for n in tree] == ['Events']

    def test_unknown_type_is_validation_error(self, forest):
        with pytest.raises(ValidationError):
            CategoryService.get_tree('weird')

    def test_cache_invalidated_on_mutation(self, admin, forest):
        before = CategoryService.get_tree()
        CategoryService.create({'name': 'Sports', 'order': 3}, admin)
        after = CategoryService.get_tree()
        assert len(after) == len(before) + 1

        CategoryService.update(forest['events'].id, {'name': 'Happenings'}, admin)
        assert 'Happenings' in [n['name'] for n in CategoryService.get_tree()]

    def test_tree_cache_lives_in_configured_backend(self, admin, forest):
        CategoryService.get_tree()
        CategoryService.get_tree(Category.TYPE_EVENT)
        assert cache.get(TREE_CACHE_KEY.format('all')) is not None
        assert cache.get(TREE_CACHE_KEY.format(Category.TYPE_EVENT)) is not None

        CategoryService.move(forest['world'].id, None, admin)
        assert cache.get(TREE_CACHE_KEY.format('all')) is None
        assert cache.get(TREE_CACHE_KEY.format(Category.TYPE_EVENT)) is None

    def test_node_lists_direct_children(self, forest):
        node = CategoryService.get_node(forest['news'].id)
        assert [c['name'] for c in node['children']] == ['Domestic', 'World']

    def test_ancestors_path_from_root(self, forest):
        path = CategoryService.ancestors(forest['city'].id)
        assert [c.name for c in path] == ['News', 'Domestic']


class TestMove:

    def test_self_parent_is_conflict(self, admin, forest):
        news = forest['news']
        with pytest.raises(Conflict):
            CategoryService.move(news.id, news.id, admin)
        with pytest.raises(Conflict):
            CategoryService.update(news.id, {'parent_id': news.id}, admin)

    def test_move_into_own_subtree_is_conflict(self, admin, forest):
        with pytest.raises(Conflict):
            CategoryService.move(forest['news'].id, forest['city'].id, admin)
        db.session.refresh(forest['news'])
        assert forest['news'].parent_id is None

    def test_missing_new_parent_is_not_found(self, admin, forest):
        with pytest.raises(NotFound):
            CategoryService.move(forest['world'].id, 999, admin)

    def test_move_rewrites_subtree_closure(self, admin, forest):
        news, domestic, city, events = forest['news'], forest['domestic'], forest['city'], forest['events']
        CategoryService.move(domestic.id, events.id, admin)

        assert domestic.parent_id == events.id
        pairs = closure_pairs()
        assert (news.id, domestic.id) not in pairs
        assert (news.id, city.id) not in pairs
        assert {(events.id, domestic.id), (events.id, city.id), (domestic.id, city.id)} <= pairs
        assert sorted(CategoryService.descendant_ids(events.id)) == sorted([events.id, domestic.id, city.id])

    def test_move_to_root(self, admin, forest):
        domestic, city = forest['domestic'], forest['city']
        CategoryService.move(domestic.id, None, admin)

        assert domestic.parent_id is None
        assert sorted(CategoryService.ancestor_ids(city.id)) == sorted([domestic.id, city.id])
        assert [n['name'] for n in CategoryService.get_tree()] == ['Domestic', 'News', 'Events']

    def test_closure_matches_rebuild_after_moves(self, admin, forest):
        CategoryService.move(forest['world'].id, forest['city'].id, admin)
        CategoryService.move(forest['domestic'].id, forest['events'].id, admin)
        moved = closure_pairs()

        CategoryService.rebuild_closure()
        assert closure_pairs() == moved


class TestUpdateAndDelete:

    def test_partial_update_keeps_other_fields(self, admin, forest):
        world = forest['world']
        CategoryService.update(world.id, {'description': 'Global'}, admin)
        assert world.name == 'World'
        assert world.order == 2
        assert world.description == 'Global'
        assert world.parent_id == forest['news'].id

    def test_update_slug_collision_is_conflict(self, admin, forest):
        with pytest.raises(Conflict):
            CategoryService.update(forest['world'].id, {'slug': 'news'}, admin)

    def test_delete_with_children_is_conflict(self, admin, forest):
        with pytest.raises(Conflict):
            CategoryService.delete(forest['news'].id, admin)
        assert db.session.get(Category, forest['news'].id) is not None

    def test_childless_category_deletes(self, admin):
        a = CategoryService.create({'name': 'A'}, admin)
        a_id = a.id
        CategoryService.delete(a_id, admin)
        assert db.session.get(Category, a_id) is None
        assert closure_pairs() == set()

    def test_delete_succeeds_after_children_detached(self, admin):
        a = CategoryService.create({'name': 'A'}, admin)
        b = CategoryService.create({'name': 'B', 'parent_id': a.id}, admin)
        a_id = a.id
        with pytest.raises(Conflict):
            CategoryService.delete(a_id, admin)

        CategoryService.move(b.id, None, admin)
        CategoryService.delete(a_id, admin)
        assert db.session.get(Category, a_id) is None
        assert closure_pairs() == {(b.id, b.id)}

    def test_delete_succeeds_after_children_deleted(self, admin, forest):
        for name in ('city', 'domestic', 'world'):
            CategoryService.delete(forest[name].id, admin)
        news_id = forest['news'].id
        CategoryService.delete(news_id, admin)
        assert db.session.get(Category, news_id) is None

    def test_delete_leaf_removes_closure_and_associations(self, admin, editor, forest):
        city = forest['city']
        article = ArticleService.create({'title': 'Local', 'category_ids': [city.id]}, editor)
        city_id = city.id

        CategoryService.delete(city_id, admin)
        assert db.session.get(Category, city_id) is None
        assert all(city_id not in pair for pair in closure_pairs())
        assert ArticleService.get(article.id).categories == []

    def test_delete_missing_is_not_found(self, admin):
        with pytest.raises(NotFound):
            CategoryService.delete(404, admin)


class TestRebuild:

    def test_rebuild_from_parent_links(self, admin, forest):
        expected = closure_pairs()
        db.session.query(CategoryClosure).delete()
        db.session.commit()
        assert closure_pairs() == set()

        written = CategoryService.rebuild_closure()
        assert written == len(expected)
        assert closure_pairs() == expected
