"""
Slug 生成工具
将标题 / 名称转换为 URL 友好的标识（处理越南语等带声调字符）
"""
import re
import unicodedata

_COMBINING_MARKS = re.compile('[\u0300-\u036f]')
_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def generate_slug(text):
    """
    生成 slug：
    小写 -> NFD 分解去除声调符号 -> 非字母数字连续段折叠为单个连字符 -> 去除首尾连字符

    >>> generate_slug('Hello World!!')
    'hello-world'
    """
    if not text or not text.strip():
        return ''

    slug = text.lower()
    # đ 不是组合字符，NFD 无法分解
    slug = slug.replace('đ', 'd')
    slug = unicodedata.normalize('NFD', slug)
    slug = _COMBINING_MARKS.sub('', slug)
    slug = _NON_ALNUM.sub('-', slug)
    return slug.strip('-')


def is_valid_slug(value):
    """slug 只能包含小写字母、数字和单个连字符"""
    return bool(value) and generate_slug(value) == value
