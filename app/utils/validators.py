"""
表单验证器
JSON 请求体通过 WTForms 表单校验，字段级错误统一转换为 ValidationError
"""
from werkzeug.datastructures import MultiDict
from wtforms import Field
from wtforms.validators import ValidationError as FieldValidationError

from app.exceptions import ValidationError
from app.utils.content_stats import parse_document
from app.utils.slug import is_valid_slug


class JSONField(Field):
    """接收任意 JSON 值（TipTap 文档等），不做类型转换"""

    def process_formdata(self, valuelist):
        if valuelist:
            self.data = valuelist[0]

    def _value(self):
        return self.data


def validate_slug(form, field):
    """验证 slug 格式"""
    if field.data and not is_valid_slug(field.data):
        raise FieldValidationError('slug 只能包含小写字母、数字和连字符')


def validate_document(form, field):
    """验证 TipTap 文档：必须是 JSON 对象（或其字符串形式）"""
    if field.data is None:
        return
    document = parse_document(field.data)
    if not isinstance(document, dict):
        raise FieldValidationError('内容必须是有效的 JSON 文档')


def coerce_int(value):
    """多选 ID 列表的转换函数：只接受整数或数字字符串"""
    if isinstance(value, bool):
        raise ValueError('not an integer')
    return int(value)


def _to_form_value(value):
    if isinstance(value, bool):
        return 'y' if value else ''
    if isinstance(value, (int, float)):
        return str(value)
    return value


def load_form(form_cls, payload):
    """
    用 JSON 请求体填充并校验表单
    - null 字段视为未提供（由调用方按需处理，如 parent_id: null 表示移到根）
    - 列表字段按多值传入
    校验失败抛出 ValidationError，payload 中带字段错误
    """
    formdata = MultiDict()
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, list):
            formdata.setlist(key, [_to_form_value(v) for v in value])
        else:
            formdata.add(key, _to_form_value(value))

    form = form_cls(formdata=formdata, meta={'csrf': False})
    if not form.validate():
        raise ValidationError('请求数据无效', payload={'fields': form.errors})
    return form


def collect_patch(form, payload, fields):
    """
    部分更新：只收集请求体中出现的字段
    显式传入 null 的字段保留 None
    """
    patch = {}
    for name in fields:
        if name not in payload:
            continue
        patch[name] = None if payload[name] is None else form[name].data
    return patch
