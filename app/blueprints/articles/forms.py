from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectField, BooleanField, DateTimeField, SelectMultipleField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from app.models.content import Article
from app.utils.validators import JSONField, coerce_int, validate_document, validate_slug

STATUS_CHOICES = [(s, s) for s in Article.STATUSES]


class ArticleForm(FlaskForm):
    """文章创建表单"""
    title = StringField('标题', validators=[DataRequired(message='标题不能为空'), Length(max=256)])
    subtitle = StringField('副标题', validators=[Optional(), Length(max=256)])
    slug = StringField('Slug', validators=[Optional(), Length(max=300), validate_slug])
    excerpt = TextAreaField('摘要', validators=[Optional()])
    # content 为 TipTap 编辑器生成的 JSON 文档
    content = JSONField('内容', validators=[validate_document])
    content_html = TextAreaField('HTML', validators=[Optional()])
    author_name = StringField('作者署名', validators=[Optional(), Length(max=128)])
    featured_image = StringField('封面图', validators=[Optional(), Length(max=512)])
    seo_title = StringField('SEO 标题', validators=[Optional(), Length(max=256)])
    seo_description = TextAreaField('SEO 描述', validators=[Optional()])
    seo_keywords = TextAreaField('SEO 关键词', validators=[Optional()])
    is_featured = BooleanField('推荐')
    is_breaking_news = BooleanField('突发新闻')
    allow_comments = BooleanField('允许评论', default=True)
    visibility = StringField('可见渠道', validators=[Optional(), Length(max=64)])
    scheduled_at = DateTimeField('定时发布', format=['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S'],
                                 validators=[Optional()])
    category_ids = SelectMultipleField('分类', choices=[], coerce=coerce_int, validate_choice=False)
    tag_ids = SelectMultipleField('标签', choices=[], coerce=coerce_int, validate_choice=False)


class ArticleUpdateForm(ArticleForm):
    """文章更新表单：所有字段可选，可修改状态"""
    title = StringField('标题', validators=[Optional(), Length(max=256)])
    # 空值时跳过选项校验，由 Optional 终止验证链
    status = SelectField('状态', choices=STATUS_CHOICES, validate_choice=False,
                         validators=[Optional(), AnyOf(Article.STATUSES, message='未知的文章状态')])


class ReviewForm(FlaskForm):
    """审核意见"""
    notes = TextAreaField('审核意见', validators=[Optional(), Length(max=2000)])


CREATE_FIELDS = (
    'title', 'subtitle', 'slug', 'excerpt', 'content', 'content_html', 'author_name',
    'featured_image', 'seo_title', 'seo_description', 'seo_keywords', 'is_featured',
    'is_breaking_news', 'allow_comments', 'visibility', 'scheduled_at', 'category_ids', 'tag_ids',
)
UPDATE_FIELDS = CREATE_FIELDS + ('status',)
