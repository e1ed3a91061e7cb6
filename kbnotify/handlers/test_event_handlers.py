# kbnotify/handlers/test_event_handlers.py
"""새 이벤트 알림 핸들러 테스트"""

from datetime import datetime, timezone

from kbnotify.handlers.events import handle_event_created
from kbnotify.models.notification import NotificationType


def _seed_users(firestore_db):
    firestore_db.add_user("creator", "James", "Reed", token="token-creator")
    firestore_db.add_user("u2", "Andre", "Cole", token="token-2")
    firestore_db.add_user("u3", "Brian", "Moss")


def test_new_event_multicasts_with_deep_link(ctx, firestore_db, gateway):
    """작성자와 토큰 없는 사용자를 제외하고 newEvent 타입으로 멀티캐스트"""
    _seed_users(firestore_db)
    event = {
        "title": "Founders Day Cookout",
        "createdBy": "creator",
        "date": datetime(2025, 3, 15, 23, 0, tzinfo=timezone.utc),
        "location": "Memorial Park",
    }

    handle_event_created(ctx, "e1", event)

    assert len(gateway.sent) == 1
    kind, tokens, notification = gateway.sent[0]
    assert kind == 'multicast'
    assert tokens == ["token-2"]
    assert notification.type == NotificationType.NEW_EVENT
    assert notification.title == "📅 New Event: Founders Day Cookout"
    assert notification.body == (
        "James Reed created a new event on Saturday, March 15, 2025 at 7:00 PM at Memorial Park"
    )
    assert notification.data == {"type": "newEvent", "eventId": "e1"}


def test_event_date_as_iso_string(ctx, firestore_db, gateway):
    _seed_users(firestore_db)

    handle_event_created(ctx, "e1", {"title": "Study Hall", "createdBy": "creator", "date": "2025-01-06T14:05:00Z"})

    assert gateway.sent[0][2].body == "James Reed created a new event on Monday, January 6, 2025 at 9:05 AM"


def test_empty_title_makes_no_lookups(ctx, firestore_db, gateway):
    """제목이 비어 있으면 사용자 조회도 발송도 없음"""
    _seed_users(firestore_db)

    handle_event_created(ctx, "e1", {"title": "", "createdBy": "creator", "location": "Memorial Park"})
    handle_event_created(ctx, "e2", {"createdBy": "creator"})

    assert gateway.sent == []
    assert firestore_db.access_count == 0


def test_unknown_creator_uses_default_name(ctx, firestore_db, gateway):
    _seed_users(firestore_db)

    handle_event_created(ctx, "e1", {"title": "Step Practice", "createdBy": "nobody"})

    _, tokens, notification = gateway.sent[0]
    assert sorted(tokens) == ["token-2", "token-creator"]
    assert notification.body == "Someone created a new event"


def test_errors_are_swallowed(ctx, firestore_db, gateway, monkeypatch):
    """사용자 스캔 중 오류가 나도 예외를 올리지 않음"""
    _seed_users(firestore_db)

    def broken_scan(exclude_user_id=None):
        raise ConnectionError("firestore unavailable")

    monkeypatch.setattr(ctx.users, "broadcast_tokens", broken_scan)

    handle_event_created(ctx, "e1", {"title": "Step Practice", "createdBy": "creator"})
    handle_event_created(ctx, "e2", {"title": "Step Practice", "date": "not-a-date"})

    assert gateway.sent == []
