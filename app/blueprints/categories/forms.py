from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectField, IntegerField, BooleanField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from app.models.taxonomy import Category
from app.utils.validators import validate_slug

TYPE_CHOICES = [(t, t) for t in Category.TYPES]


class CategoryForm(FlaskForm):
    """分类创建表单"""
    name = StringField('名称', validators=[DataRequired(message='名称不能为空'), Length(max=128)])
    slug = StringField('Slug', validators=[Optional(), Length(max=160), validate_slug])
    type = SelectField('类型', choices=TYPE_CHOICES, validate_choice=False,
                       validators=[Optional(), AnyOf(Category.TYPES, message='未知的分类类型')])
    parent_id = IntegerField('上级分类', validators=[Optional()])
    description = TextAreaField('描述', validators=[Optional()])
    order = IntegerField('排序', validators=[Optional()])
    is_active = BooleanField('启用', default=True)


class CategoryUpdateForm(CategoryForm):
    """分类更新表单：所有字段可选"""
    name = StringField('名称', validators=[Optional(), Length(max=128)])


class CategoryMoveForm(FlaskForm):
    """移动分类：parent_id 为 null 表示移到根"""
    parent_id = IntegerField('上级分类', validators=[Optional()])


CREATE_FIELDS = ('name', 'slug', 'type', 'parent_id', 'description', 'order', 'is_active')
