# kbnotify/services/messaging_service.py
import logging
from dataclasses import dataclass, field
from typing import Optional, List
from firebase_admin import messaging

from kbnotify.models.notification import PushNotification

logger = logging.getLogger(__name__)

# send_each_for_multicast 한 번에 보낼 수 있는 최대 토큰 수
FCM_MULTICAST_LIMIT = 500

@dataclass
class MulticastResult:
    """여러 배치로 나누어 보낸 멀티캐스트 결과의 합계."""
    success_count: int = 0
    failure_count: int = 0
    failed_tokens: List[str] = field(default_factory=list)

class MessagingService:
    """
    Firebase Cloud Messaging 발송을 담당하는 게이트웨이 서비스.
    - 단일 토큰, 토픽, 다중 토큰(멀티캐스트) 세 가지 형태를 지원합니다.
    - 모든 발송은 fire-and-forget: 오류는 로그로 남기고 호출자에게 올리지 않습니다.
    """
    def __init__(self, dry_run: bool = False, batch_size: int = FCM_MULTICAST_LIMIT, app=None):
        self.dry_run = dry_run
        self.batch_size = max(1, min(batch_size, FCM_MULTICAST_LIMIT))
        self.app = app

    @staticmethod
    def _apns_config(notification: PushNotification) -> messaging.APNSConfig:
        """iOS 클라이언트용 aps 블록 (기본 사운드, 배지 1, 백그라운드 갱신 허용)."""
        return messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    alert=messaging.ApsAlert(title=notification.title, body=notification.body),
                    sound='default',
                    badge=1,
                    content_available=True
                )
            )
        )

    def build_message(self, notification: PushNotification, token: Optional[str] = None,
                      topic: Optional[str] = None) -> messaging.Message:
        """단일 토큰 또는 토픽 대상 메시지를 생성합니다."""
        return messaging.Message(
            notification=messaging.Notification(title=notification.title, body=notification.body),
            data=notification.data_payload(),
            apns=self._apns_config(notification),
            token=token,
            topic=topic
        )

    def build_multicast(self, notification: PushNotification, tokens: List[str]) -> messaging.MulticastMessage:
        """여러 토큰 대상 메시지를 생성합니다."""
        return messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=notification.title, body=notification.body),
            data=notification.data_payload(),
            apns=self._apns_config(notification)
        )

    def send_to_token(self, token: str, notification: PushNotification) -> Optional[str]:
        """한 기기로 알림을 보내고 메시지 ID를 반환합니다. 실패 시 None."""
        try:
            message_id = messaging.send(self.build_message(notification, token=token), dry_run=self.dry_run, app=self.app)
            logger.info(f"{notification.type.value} 알림 발송 완료 (token: {token[:12]}..., id: {message_id})")
            return message_id
        except Exception as e:
            logger.error(f"{notification.type.value} 알림 발송 실패 (token: {token[:12]}...): {e}", exc_info=True)
            return None

    def send_to_topic(self, topic: str, notification: PushNotification) -> Optional[str]:
        """토픽 구독자 전체에게 알림을 보내고 메시지 ID를 반환합니다. 실패 시 None."""
        try:
            message_id = messaging.send(self.build_message(notification, topic=topic), dry_run=self.dry_run, app=self.app)
            logger.info(f"{notification.type.value} 토픽 알림 발송 완료 (topic: {topic}, id: {message_id})")
            return message_id
        except Exception as e:
            logger.error(f"{notification.type.value} 토픽 알림 발송 실패 (topic: {topic}): {e}", exc_info=True)
            return None

    def send_multicast(self, tokens: List[str], notification: PushNotification) -> Optional[MulticastResult]:
        """
        여러 기기로 같은 알림을 보냅니다.
        토큰 수가 batch_size를 넘으면 나누어 보내고, 실패한 배치가 있어도 나머지 배치는 계속 보냅니다.

        :return: 배치 결과 합계. 보낼 토큰이 없으면 None.
        """
        if not tokens:
            return None

        result = MulticastResult()
        for start in range(0, len(tokens), self.batch_size):
            chunk = tokens[start:start + self.batch_size]
            try:
                response = messaging.send_each_for_multicast(
                    self.build_multicast(notification, chunk), dry_run=self.dry_run, app=self.app
                )
            except Exception as e:
                logger.error(f"{notification.type.value} 멀티캐스트 배치 발송 실패 ({len(chunk)}개 토큰): {e}", exc_info=True)
                result.failure_count += len(chunk)
                result.failed_tokens.extend(chunk)
                continue

            result.success_count += response.success_count
            result.failure_count += response.failure_count
            for token, send_response in zip(chunk, response.responses):
                if not send_response.success:
                    result.failed_tokens.append(token)
                    logger.warning(f"토큰 발송 실패 (token: {token[:12]}...): {send_response.exception}")

        logger.info(
            f"{notification.type.value} 멀티캐스트 발송 완료: 성공 {result.success_count}, 실패 {result.failure_count}"
        )
        return result
