"""AI 编辑助手路由"""
from flask_login import login_required, current_user

from app.blueprints.ai import ai_bp
from app.exceptions import ValidationError
from app.services.ai_content_service import ai_content_service
from app.utils.api import get_json_body, success
from app.utils.audit import log_action
from app.utils.permissions import actor_for


@ai_bp.route('/content', methods=['POST'])
@login_required
def generate_content():
    """
    请求体: {"prompt": str, "contentJson": str, "history": [{"role", "content"}, ...]}
    """
    payload = get_json_body()
    prompt = payload.get('prompt')
    content_json = payload.get('contentJson')
    history = payload.get('history') or []

    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError('prompt 不能为空')
    if not isinstance(content_json, str):
        raise ValidationError('contentJson 必须是字符串')
    if not isinstance(history, list) or not all(isinstance(m, dict) for m in history):
        raise ValidationError('history 格式不正确')

    # 最多保留最近 10 条上下文
    result = ai_content_service.generate(prompt, content_json, history[-10:])

    log_action('ai', 'generate_content', actor=actor_for(current_user),
               details={'prompt': prompt[:200], 'history': len(history)})
    return success({
        'rawText': result['raw_text'],
        'updatedContentJson': result['updated_content_json'],
        'summary': result['summary'],
    })
