# kbnotify/handlers/users.py
import logging
from typing import Optional, Dict, Any
from marshmallow import ValidationError

from kbnotify.core.context import HandlerContext
from kbnotify.schemas.records import load_user

logger = logging.getLogger(__name__)

def handle_user_created(ctx: HandlerContext, user_id: str, data: Optional[Dict[str, Any]]) -> None:
    """
    'users/{userId}' 문서 생성 시 전체 회원에게 신규 회원을 알립니다.
    - 이름(firstName, lastName) 중 하나라도 없으면 알림을 보내지 않습니다.
    - 발송은 브로드캐스트 토픽으로 한 번만 이루어집니다.
    """
    logger.info(f"=== 신규 사용자 문서 생성 (ID: {user_id}) ===")
    try:
        user = load_user(user_id, data or {})
    except ValidationError as e:
        logger.warning(f"사용자 문서 형식 오류로 알림을 건너뜁니다 (ID: {user_id}): {e.messages}")
        return

    if not user.first_name or not user.last_name:
        logger.info(f"이름 필드가 없어 신규 회원 알림을 건너뜁니다 (ID: {user_id})")
        return

    ctx.notifications.notify_new_member(user_id, user.first_name, user.last_name)
