# main.py
"""
Cloud Functions 진입점.
Firestore 문서 생성/수정 이벤트를 kbnotify 핸들러로 연결합니다.
"""
import threading
from typing import Optional

from firebase_functions import firestore_fn, options

from kbnotify import create_context
from kbnotify.core.context import HandlerContext
from kbnotify.handlers.users import handle_user_created
from kbnotify.handlers.posts import handle_post_liked, handle_post_commented, handle_post_created
from kbnotify.handlers.events import handle_event_created

options.set_global_options(max_instances=10)

_context: Optional[HandlerContext] = None
_context_lock = threading.Lock()

def get_context() -> HandlerContext:
    """
    인스턴스당 한 번만 컨텍스트를 만들고 이후 호출에서는 재사용합니다.
    한 인스턴스가 여러 요청을 동시에 처리할 수 있으므로 생성은 락 안에서 한 번만 수행합니다.
    """
    global _context
    if _context is None:
        with _context_lock:
            if _context is None:
                _context = create_context()
    return _context

def _to_dict(snapshot) -> Optional[dict]:
    return snapshot.to_dict() if snapshot is not None and snapshot.exists else None


# --- 이벤트 -> 핸들러 연결 (트리거 데코레이터와 분리하여 직접 호출 가능) ---

def dispatch_user_created(event) -> None:
    handle_user_created(get_context(), event.params["userId"], _to_dict(event.data))

def dispatch_post_created(event) -> None:
    handle_post_created(get_context(), event.params["postId"], _to_dict(event.data))

def dispatch_post_updated(event) -> None:
    # 좋아요와 댓글은 같은 문서 갱신 이벤트에서 각각 독립적으로 판단
    ctx = get_context()
    post_id = event.params["postId"]
    before = _to_dict(event.data.before)
    after = _to_dict(event.data.after)
    handle_post_liked(ctx, post_id, before, after)
    handle_post_commented(ctx, post_id, before, after)

def dispatch_event_created(event) -> None:
    handle_event_created(get_context(), event.params["eventId"], _to_dict(event.data))


# --- Cloud Functions 트리거 ---

@firestore_fn.on_document_created(document="users/{userId}")
def send_new_user_notification(event: firestore_fn.Event[Optional[firestore_fn.DocumentSnapshot]]) -> None:
    dispatch_user_created(event)


@firestore_fn.on_document_created(document="posts/{postId}")
def send_new_post_notification(event: firestore_fn.Event[Optional[firestore_fn.DocumentSnapshot]]) -> None:
    dispatch_post_created(event)


@firestore_fn.on_document_updated(document="posts/{postId}")
def send_post_activity_notifications(
        event: firestore_fn.Event[firestore_fn.Change[Optional[firestore_fn.DocumentSnapshot]]]) -> None:
    dispatch_post_updated(event)


@firestore_fn.on_document_created(document="events/{eventId}")
def send_new_event_notification(event: firestore_fn.Event[Optional[firestore_fn.DocumentSnapshot]]) -> None:
    dispatch_event_created(event)
