# kbnotify/core/context.py
from dataclasses import dataclass
from typing import Type

from kbnotify.core.config import Config
from kbnotify.services.firestore_service import UserDirectory
from kbnotify.services.notification_service import NotificationService

@dataclass(frozen=True)
class HandlerContext:
    """
    핸들러 호출마다 명시적으로 전달되는 의존성 묶음.
    전역 싱글턴 대신 이 객체를 통해 사용자 조회와 알림 발송 서비스에 접근합니다.
    """
    config: Type[Config]
    users: UserDirectory
    notifications: NotificationService
