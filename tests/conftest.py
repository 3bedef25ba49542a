"""
Shared fixtures: in-memory SQLite app, seeded roles/users and Actor capabilities.
"""
import json

import pytest

from app import create_app
from app.extensions import db
from app.models.auth import Role, User
from app.utils.permissions import Actor, actor_for


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    admin_role = Role(name='Admin', is_admin=True)
    editor_role = Role(name='Editor', is_admin=False)
    admin = User(username='admin', email='admin@example.com', password='admin-pass', role=admin_role)
    editor = User(username='editor', email='editor@example.com', password='editor-pass', role=editor_role)
    other = User(username='other', email='other@example.com', password='other-pass', role=editor_role)
    db.session.add_all([admin_role, editor_role, admin, editor, other])
    db.session.commit()
    return {'admin': admin, 'editor': editor, 'other': other}


@pytest.fixture
def admin(users):
    return actor_for(users['admin'])


@pytest.fixture
def editor(users):
    return actor_for(users['editor'])


@pytest.fixture
def other_editor(users):
    return actor_for(users['other'])


@pytest.fixture
def anonymous_editor():
    """未落库的操作者，用于纯权限判断"""
    return Actor(user_id=999, is_admin=False)


def doc(*texts):
    """构造 TipTap 文档：每段文本一个 paragraph"""
    return {
        'type': 'doc',
        'content': [
            {'type': 'paragraph', 'content': [{'type': 'text', 'text': t}]} for t in texts
        ],
    }


def login(client, email, password):
    return client.post('/auth/login', data=json.dumps({'email': email, 'password': password}),
                       content_type='application/json')


@pytest.fixture
def login_as(client, users):
    passwords = {'admin': 'admin-pass', 'editor': 'editor-pass', 'other': 'other-pass'}

    def _login(name):
        response = login(client, users[name].email, passwords[name])
        assert response.status_code == 200
        return client
    return _login
