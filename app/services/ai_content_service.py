"""
AI 编辑助手服务
把当前 TipTap 文档与编辑指令转发给 Gemini generateContent 接口，
解析返回文本中的 JSON 信封 {contentJson, summary}
使用 httpx 直接调用 API，无需 SDK
"""
import json
from typing import Dict, List, Optional

import httpx
from flask import current_app

from app.exceptions import Unexpected, ValidationError

INSTRUCTIONS = """You are an AI editor assisting journalists with articles represented in TipTap JSON (ProseMirror) format.
Always respond with a strict JSON object using the schema:
{
  "contentJson": "<valid TipTap JSON string>",
  "summary": "<short description of the changes (<=50 words)>"
}
Do not wrap the JSON in markdown fences or add extra commentary outside the JSON.
Preserve valid TipTap structure (type/doc/content structure, marks, attrs).
"""


class AiContentService:
    """Gemini 内容编辑服务封装 - 使用 httpx 直接调用 API"""

    def __init__(self):
        self._http_client = None  # 缓存 httpx 客户端

    def _get_http_client(self) -> httpx.Client:
        """获取或创建 httpx 客户端"""
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=current_app.config.get('GEMINI_TIMEOUT', 60.0))
        return self._http_client

    @staticmethod
    def is_configured() -> bool:
        key = current_app.config.get('GEMINI_API_KEY', '')
        return bool(key and len(key) >= 10)

    def generate(self, prompt: str, content_json: str, history: Optional[List[Dict]] = None) -> Dict:
        """
        生成 / 改写文章内容

        Args:
            prompt: 编辑指令
            content_json: 当前文档 (TipTap JSON 字符串)
            history: 对话历史 [{"role": "user"|"assistant", "content": "..."}, ...]

        Returns:
            {"raw_text": str, "updated_content_json": str|None, "summary": str|None}
        """
        if not content_json or not content_json.strip():
            raise ValidationError('contentJson 不能为空')

        if not self.is_configured():
            if current_app.config.get('AI_FALLBACK', False):
                # 本地回退：原样返回文档
                return {
                    'raw_text': '',
                    'updated_content_json': content_json,
                    'summary': '（本地回退）未配置外部 AI，内容未修改。',
                }
            raise ValidationError('AI 服务未配置，请设置 GEMINI_API_KEY')

        config = current_app.config
        base_url = config.get('GEMINI_BASE_URL', '').rstrip('/')
        endpoint = f"{base_url}/v1beta/models/{config['GEMINI_MODEL']}:generateContent"
        payload = {
            'contents': build_contents(prompt, content_json, history),
            'generationConfig': {
                'temperature': config.get('GEMINI_TEMPERATURE', 0.4),
                'maxOutputTokens': config.get('GEMINI_MAX_OUTPUT_TOKENS', 2048),
            },
        }

        try:
            response = self._get_http_client().post(
                endpoint,
                params={'key': config['GEMINI_API_KEY']},
                headers={'Content-Type': 'application/json'},
                json=payload,
            )
        except httpx.TimeoutException:
            current_app.logger.error('Gemini API 超时')
            raise Unexpected('AI 服务响应超时，请稍后重试。')
        except httpx.HTTPError as e:
            current_app.logger.error(f'Gemini API 连接失败: {e}')
            raise Unexpected('无法连接到 AI 服务，请检查网络连接。')

        if response.status_code != 200:
            current_app.logger.error(f'Gemini API 返回错误 ({response.status_code}): {response.text[:500]}')
            raise Unexpected('AI 服务暂时不可用')

        return parse_response(response.text)


def normalize_role(role):
    if role in ('model', 'assistant'):
        return 'model'
    return 'user'


def build_contents(prompt, content_json, history=None):
    """固定指令 + 历史对话 + 当前文档与编辑请求"""
    contents = [{'role': 'user', 'parts': [{'text': INSTRUCTIONS}]}]

    for message in history or []:
        contents.append({
            'role': normalize_role(message.get('role')),
            'parts': [{'text': message.get('content') or ''}],
        })

    request_text = (
        'Current article JSON (TipTap):\n'
        f'{content_json}\n\n'
        'User request:\n'
        f'{prompt}\n'
    )
    contents.append({'role': 'user', 'parts': [{'text': request_text}]})
    return contents


def extract_json(text):
    """去掉 ``` 代码围栏，取最外层 {...}"""
    if not text or not text.strip():
        return None

    trimmed = text.strip()
    if trimmed.startswith('```'):
        end_fence = trimmed.rfind('```')
        if end_fence > 0:
            trimmed = trimmed[3:end_fence].strip()

    start = trimmed.find('{')
    end = trimmed.rfind('}')
    if start >= 0 and end > start:
        return trimmed[start:end + 1]
    return None


def parse_response(body):
    """解析 generateContent 响应，JSON 信封无效时只返回原始文本"""
    result = {'raw_text': '', 'updated_content_json': None, 'summary': None}

    try:
        document = json.loads(body)
        text = document['candidates'][0]['content']['parts'][0].get('text') or ''
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return result

    result['raw_text'] = text
    envelope = extract_json(text)
    if envelope:
        try:
            data = json.loads(envelope)
        except ValueError:
            return result
        if isinstance(data, dict):
            content = data.get('contentJson')
            if content is not None and not isinstance(content, str):
                content = json.dumps(content, ensure_ascii=False)
            result['updated_content_json'] = content
            result['summary'] = data.get('summary')
    return result


# 全局单例
ai_content_service = AiContentService()
