# kbnotify/handlers/events.py
import logging
from typing import Optional, Dict, Any

from kbnotify.core.context import HandlerContext
from kbnotify.schemas.records import load_event
from kbnotify.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

def handle_event_created(ctx: HandlerContext, event_id: str, data: Optional[Dict[str, Any]]) -> None:
    """
    'events/{eventId}' 문서 생성 시 이벤트 작성자를 제외한 전체 회원에게 알립니다.
    제목이 없으면 사용자 조회나 발송 없이 바로 종료합니다.
    어떤 단계에서 오류가 나도 로그만 남기고 종료합니다.
    """
    try:
        event = load_event(event_id, data or {})

        if not event.title or not event.title.strip():
            logger.info(f"제목이 없는 이벤트는 알리지 않습니다 (event: {event_id})")
            return

        creator_name = ctx.users.get_display_name(event.created_by)
        formatted_date = (
            DateTimeUtils.format_event_datetime(event.date, ctx.config.EVENT_TIMEZONE) if event.date else None
        )

        tokens = ctx.users.broadcast_tokens(exclude_user_id=event.created_by)
        if not tokens:
            logger.info(f"이벤트 알림을 받을 사용자가 없습니다 (event: {event_id})")
            return

        ctx.notifications.notify_new_event(
            tokens,
            event_id=event_id,
            title=event.title.strip(),
            creator_name=creator_name,
            formatted_date=formatted_date,
            location=(event.location or "").strip() or None
        )

    except Exception as e:
        logger.error(f"이벤트 알림 처리 중 오류 발생 (event: {event_id}): {e}", exc_info=True)
