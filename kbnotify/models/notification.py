# kbnotify/models/notification.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스. 값은 클라이언트 딥링크 라우팅에 그대로 쓰입니다."""
    NEW_MEMBER = "newMember"
    POST_LIKE = "like"
    COMMENT = "comment"
    PRIOR_COMMENT = "priorComment"
    MENTION = "mention"
    NEW_POST = "newPost"
    NEW_EVENT = "newEvent"

@dataclass
class PushNotification:
    """
    메시징 게이트웨이로 보낼 푸시 알림 한 건의 내용.
    data는 FCM 규칙에 따라 문자열 값만 담습니다.
    """
    type: NotificationType
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)

    def data_payload(self) -> Optional[Dict[str, str]]:
        """FCM data 필드용 딕셔너리. 비어 있으면 None."""
        return {k: str(v) for k, v in self.data.items()} or None
