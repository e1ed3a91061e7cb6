# kbnotify/services/test_messaging_service.py
"""FCM 게이트웨이 서비스 테스트 (firebase_admin.messaging 호출은 mock으로 대체)"""

from types import SimpleNamespace
from unittest.mock import patch

from kbnotify.models.notification import NotificationType, PushNotification
from kbnotify.services.messaging_service import MessagingService

SEND = 'kbnotify.services.messaging_service.messaging.send'
SEND_MULTICAST = 'kbnotify.services.messaging_service.messaging.send_each_for_multicast'


def _notification(data=None):
    return PushNotification(type=NotificationType.NEW_POST, title="📝 New Post", body="James Reed just posted something new!",
                            data=data or {})


def _batch_response(tokens, failed=()):
    responses = [
        SimpleNamespace(success=token not in failed, message_id=None if token in failed else f"id-{token}",
                        exception=RuntimeError("UNREGISTERED") if token in failed else None)
        for token in tokens
    ]
    return SimpleNamespace(
        responses=responses,
        success_count=sum(1 for r in responses if r.success),
        failure_count=sum(1 for r in responses if not r.success)
    )


def test_send_to_token_builds_direct_message():
    """단일 토큰 메시지에 알림, data, aps 블록이 포함되는지 확인"""
    service = MessagingService(dry_run=True)
    with patch(SEND, return_value="projects/kb/messages/1") as send:
        message_id = service.send_to_token("token-1", _notification({"type": "mention", "postId": "p1"}))

    assert message_id == "projects/kb/messages/1"
    message = send.call_args.args[0]
    assert send.call_args.kwargs["dry_run"] is True
    assert message.token == "token-1"
    assert message.topic is None
    assert message.notification.title == "📝 New Post"
    assert message.data == {"type": "mention", "postId": "p1"}
    aps = message.apns.payload.aps
    assert (aps.sound, aps.badge, aps.content_available) == ('default', 1, True)
    assert aps.alert.body == "James Reed just posted something new!"


def test_send_to_topic_uses_topic_target():
    service = MessagingService()
    with patch(SEND, return_value="msg") as send:
        service.send_to_topic("allUsers", _notification())

    message = send.call_args.args[0]
    assert message.topic == "allUsers"
    assert message.token is None
    assert message.data is None


def test_send_errors_are_swallowed():
    """게이트웨이 예외는 로그만 남기고 None 반환"""
    service = MessagingService()
    with patch(SEND, side_effect=RuntimeError("network down")):
        assert service.send_to_token("token-1", _notification()) is None
        assert service.send_to_topic("allUsers", _notification()) is None


def test_multicast_splits_into_batches():
    """batch_size 단위로 나누어 여러 번 호출"""
    service = MessagingService(batch_size=2)
    tokens = ["t1", "t2", "t3", "t4", "t5"]

    with patch(SEND_MULTICAST, side_effect=lambda message, **kwargs: _batch_response(message.tokens)) as send:
        result = service.send_multicast(tokens, _notification())

    assert [call.args[0].tokens for call in send.call_args_list] == [["t1", "t2"], ["t3", "t4"], ["t5"]]
    assert result.success_count == 5
    assert result.failure_count == 0


def test_multicast_batch_size_capped_at_fcm_limit():
    assert MessagingService(batch_size=10000).batch_size == 500
    assert MessagingService(batch_size=0).batch_size == 1


def test_multicast_collects_failed_tokens():
    service = MessagingService()
    with patch(SEND_MULTICAST, return_value=_batch_response(["t1", "t2", "t3"], failed={"t2"})):
        result = service.send_multicast(["t1", "t2", "t3"], _notification())

    assert result.success_count == 2
    assert result.failure_count == 1
    assert result.failed_tokens == ["t2"]


def test_multicast_batch_error_does_not_stop_other_batches():
    """한 배치 전체가 실패해도 다음 배치는 계속 발송"""
    service = MessagingService(batch_size=2)
    responses = [RuntimeError("quota exceeded"), _batch_response(["t3"])]

    with patch(SEND_MULTICAST, side_effect=responses) as send:
        result = service.send_multicast(["t1", "t2", "t3"], _notification())

    assert send.call_count == 2
    assert result.success_count == 1
    assert result.failed_tokens == ["t1", "t2"]


def test_multicast_without_tokens_makes_no_call():
    service = MessagingService()
    with patch(SEND_MULTICAST) as send:
        assert service.send_multicast([], _notification()) is None
    send.assert_not_called()
