import click
from flask.cli import with_appcontext
from app.extensions import db
from app.models.auth import User, Role
from app.models.taxonomy import Category, Tag
from app.models.content import Article
from app.models.sys import AuditLog


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前数据库中的数据统计。
    """
    click.echo(click.style('📊 CMS 数据库状态:', fg='cyan', bold=True))

    try:
        counts = {
            '用户 (Users)': User.query.count(),
            '文章 (Articles)': Article.query.count(),
            '分类 (Categories)': Category.query.count(),
            '标签 (Tags)': Tag.query.count(),
            '审计日志 (Logs)': AuditLog.query.count(),
        }
        for label, count in counts.items():
            click.echo(f" - {label}: \t{count}")

        for status_value in Article.STATUSES:
            n = Article.query.filter_by(status=status_value).count()
            click.echo(f"   · {status_value}: {n}")

        if counts['用户 (Users)'] > 0:
            click.echo(click.style('✔ 数据库连接正常，数据已存在。', fg='green'))
        else:
            click.echo(click.style('⚠ 数据库为空，请运行 flask forge 生成数据。', fg='yellow'))

    except Exception as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查是否执行了 'flask db upgrade'")


def _paragraph(text):
    return {'type': 'paragraph', 'content': [{'type': 'text', 'text': text}]}


@click.command('forge')
@click.option('--admin-password', default='admin', help='管理员初始密码')
@with_appcontext
def forge(admin_password):
    """
    [初始化指令] 重建数据库并填充演示数据（角色、账号、分类树、标签、各状态文章）。
    警告：这将清除数据库中的现有数据！
    """
    from app.services.article_service import ArticleService
    from app.services.category_service import CategoryService
    from app.services.tag_service import TagService
    from app.utils.permissions import actor_for

    click.echo(click.style('⚡ 初始化 CMS 演示数据...', fg='cyan', bold=True))

    # 1. 清除旧数据
    db.drop_all()
    db.create_all()

    # 2. 角色与账号
    admin_role = Role(name='Admin', is_admin=True)
    editor_role = Role(name='Editor', is_admin=False)
    db.session.add_all([admin_role, editor_role])
    admin = User(username='admin', email='admin@cms.local', full_name='Administrator',
                 password=admin_password, role=admin_role)
    editor = User(username='editor', email='editor@cms.local', full_name='Editor',
                  password='editor', role=editor_role)
    db.session.add_all([admin, editor])
    db.session.commit()
    click.echo(' - 账号: admin@cms.local / editor@cms.local')

    admin_actor = actor_for(admin)
    editor_actor = actor_for(editor)

    # 3. 分类树
    news = CategoryService.create({'name': 'Tin tức', 'type': Category.TYPE_NEWS_TYPE, 'order': 1}, admin_actor)
    domestic = CategoryService.create({'name': 'Trong nước', 'type': Category.TYPE_NEWS_TYPE,
                                       'parent_id': news.id, 'order': 1}, admin_actor)
    CategoryService.create({'name': 'Quốc tế', 'type': Category.TYPE_NEWS_TYPE,
                            'parent_id': news.id, 'order': 2}, admin_actor)
    events = CategoryService.create({'name': 'Sự kiện', 'type': Category.TYPE_EVENT, 'order': 2}, admin_actor)
    # 按 parent_id 重算闭包表，校验逐个插入的结果
    pairs = CategoryService.rebuild_closure()
    click.echo(f' - 分类: {Category.query.count()} (闭包记录 {pairs})')

    # 4. 标签
    tags = [TagService.create({'name': name}, admin_actor) for name in ('Dầu khí', 'An toàn', 'Công nghệ')]
    click.echo(f' - 标签: {len(tags)}')

    # 5. 各状态文章
    def make(title, category):
        return ArticleService.create({
            'title': title,
            'excerpt': f'{title} - demo',
            'content': {'type': 'doc', 'content': [_paragraph(f'{title}. ' * 40)]},
            'category_ids': [category.id],
            'tag_ids': [tags[0].id],
        }, editor_actor)

    make('Bản nháp đầu tiên', domestic)
    submitted = make('Bài viết chờ duyệt', domestic)
    ArticleService.submit(submitted.id, editor_actor)
    approved = make('Bài viết đã duyệt', events)
    ArticleService.submit(approved.id, editor_actor)
    ArticleService.approve(approved.id, admin_actor, notes='OK')
    published = make('Bài viết đã xuất bản', news)
    ArticleService.submit(published.id, editor_actor)
    ArticleService.approve(published.id, admin_actor)
    ArticleService.publish(published.id, editor_actor)
    click.echo(f' - 文章: {Article.query.count()}')

    click.echo(click.style('✔ 初始化完成', fg='green'))
