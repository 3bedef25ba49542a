"""
内容统计工具
从 TipTap (ProseMirror) JSON 文档中提取纯文本，计算字数 / 字符数 / 阅读时长
"""
import json
import math
from collections import namedtuple

DEFAULT_WORDS_PER_MINUTE = 200

ContentStats = namedtuple('ContentStats', ['word_count', 'character_count', 'reading_time'])


def extract_text(node):
    """递归提取文本节点：每个 text 节点的文本后追加一个空格"""
    parts = []
    if isinstance(node, dict):
        if node.get('type') == 'text' and isinstance(node.get('text'), str):
            parts.append(node['text'] + ' ')
        children = node.get('content')
        if isinstance(children, list):
            for child in children:
                parts.append(extract_text(child))
    elif isinstance(node, list):
        for child in node:
            parts.append(extract_text(child))
    return ''.join(parts)


def parse_document(content):
    """接受 JSON 字符串或已解析的 dict/list，无法解析时返回 None"""
    if isinstance(content, (dict, list)):
        return content
    if not content or not isinstance(content, str):
        return None
    try:
        return json.loads(content)
    except ValueError:
        return None


def calculate_stats(content, words_per_minute=DEFAULT_WORDS_PER_MINUTE):
    """
    计算内容统计
    :param content: TipTap 文档 (JSON 字符串或 dict)
    :return: ContentStats(word_count, character_count, reading_time)
             阅读时长向上取整，最少 1 分钟
    """
    document = parse_document(content)
    text = extract_text(document) if document is not None else ''

    word_count = len(text.split())
    character_count = len(text)
    reading_time = max(1, math.ceil(word_count / words_per_minute))
    return ContentStats(word_count, character_count, reading_time)
