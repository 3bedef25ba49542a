from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from app.utils.validators import validate_slug


class TagForm(FlaskForm):
    """标签表单"""
    name = StringField('名称', validators=[DataRequired(message='名称不能为空'), Length(max=64)])
    slug = StringField('Slug', validators=[Optional(), Length(max=80), validate_slug])
    description = TextAreaField('描述', validators=[Optional()])


class TagUpdateForm(TagForm):
    name = StringField('名称', validators=[Optional(), Length(max=64)])


FIELDS = ('name', 'slug', 'description')
