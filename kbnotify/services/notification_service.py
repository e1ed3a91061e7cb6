# kbnotify/services/notification_service.py
from typing import Optional, List

from kbnotify.models.notification import NotificationType, PushNotification
from kbnotify.services.messaging_service import MessagingService, MulticastResult


class NotificationService:
    """
    알림 종류별 제목/본문/딥링크 데이터를 구성하여 메시징 게이트웨이로 넘기는 서비스.
    수신자 결정은 핸들러가, 실제 발송은 MessagingService가 담당합니다.
    """
    def __init__(self, gateway: MessagingService, broadcast_topic: str = 'allUsers', preview_length: int = 100):
        self.gateway = gateway
        self.broadcast_topic = broadcast_topic
        self.preview_length = preview_length

    def _preview(self, text: Optional[str]) -> str:
        """알림 본문에 넣을 댓글 미리보기. 길면 잘라서 '...'을 붙입니다."""
        text = (text or "").strip()
        if len(text) <= self.preview_length:
            return text
        return text[:self.preview_length].rstrip() + "..."

    def notify_new_member(self, user_id: str, first_name: str, last_name: str) -> Optional[str]:
        """신규 회원 가입을 브로드캐스트 토픽 구독자 전체에게 알립니다."""
        notification = PushNotification(
            type=NotificationType.NEW_MEMBER,
            title="🦍❄️ New Member Alert!",
            body=f"Welcome {first_name} {last_name} to Kappa Beta!",
            data={"type": NotificationType.NEW_MEMBER.value, "userId": user_id}
        )
        return self.gateway.send_to_topic(self.broadcast_topic, notification)

    def notify_post_liked(self, token: str, liker_name: str) -> Optional[str]:
        notification = PushNotification(
            type=NotificationType.POST_LIKE,
            title="❤️ New Like",
            body=f"{liker_name} liked your post"
        )
        return self.gateway.send_to_token(token, notification)

    def notify_post_commented(self, token: str, commenter_name: str, content: str) -> Optional[str]:
        """게시글 작성자에게 새 댓글을 알립니다."""
        notification = PushNotification(
            type=NotificationType.COMMENT,
            title="💬 New Comment",
            body=f'{commenter_name} commented on your post: "{self._preview(content)}"'
        )
        return self.gateway.send_to_token(token, notification)

    def notify_prior_commenters(self, tokens: List[str], commenter_name: str) -> Optional[MulticastResult]:
        """같은 게시글에 먼저 댓글을 단 사용자들에게 한 번의 멀티캐스트로 알립니다."""
        notification = PushNotification(
            type=NotificationType.PRIOR_COMMENT,
            title="💬 New Comment",
            body=f"{commenter_name} commented on the same post"
        )
        return self.gateway.send_multicast(tokens, notification)

    def notify_mention(self, token: str, commenter_name: str, content: str, post_id: str) -> Optional[str]:
        """댓글에서 멘션된 사용자에게 댓글 전문을 인용하여 알립니다. 미리보기 길이 제한을 적용하지 않습니다."""
        notification = PushNotification(
            type=NotificationType.MENTION,
            title=f"{commenter_name} mentioned you",
            body=f'"{(content or "").strip()}"',
            data={"type": NotificationType.MENTION.value, "postId": post_id}
        )
        return self.gateway.send_to_token(token, notification)

    def notify_new_post(self, tokens: List[str], author_name: str) -> Optional[MulticastResult]:
        notification = PushNotification(
            type=NotificationType.NEW_POST,
            title="📝 New Post",
            body=f"{author_name} just posted something new!"
        )
        return self.gateway.send_multicast(tokens, notification)

    def notify_new_event(self, tokens: List[str], event_id: str, title: str, creator_name: str,
                         formatted_date: Optional[str] = None, location: Optional[str] = None) -> Optional[MulticastResult]:
        """
        새 이벤트를 알립니다.
        일정이나 장소가 없으면 본문에서 해당 부분을 생략합니다.
        """
        body = f"{creator_name} created a new event"
        if formatted_date:
            body += f" on {formatted_date}"
        if location:
            body += f" at {location}"

        notification = PushNotification(
            type=NotificationType.NEW_EVENT,
            title=f"📅 New Event: {title}",
            body=body,
            data={"type": NotificationType.NEW_EVENT.value, "eventId": event_id}
        )
        return self.gateway.send_multicast(tokens, notification)
