# kbnotify/services/firestore_service.py
import logging
from typing import Optional, List, Iterable
from firebase_admin import firestore
from marshmallow import ValidationError

from kbnotify.models.user import UserRecord
from kbnotify.schemas.records import load_user

logger = logging.getLogger(__name__)

class UserDirectory:
    """
    알림 수신자 확인을 위한 'users' 컬렉션 조회 서비스.
    핸들러 입장에서 사용자 문서는 읽기 전용입니다.
    """
    def __init__(self, db=None, default_display_name: str = "Someone"):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')
        self.default_display_name = default_display_name

    def _to_record(self, doc) -> Optional[UserRecord]:
        try:
            return load_user(doc.id, doc.to_dict() or {})
        except ValidationError as e:
            logger.warning(f"사용자 문서 형식 오류, 없는 사용자로 처리합니다 (ID: {doc.id}): {e.messages}")
            return None

    def get_user(self, user_id: Optional[str]) -> Optional[UserRecord]:
        """사용자 문서를 ID로 조회합니다. 문서가 없으면 None."""
        if not user_id:
            return None
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            logger.info(f"사용자 문서를 찾을 수 없음 (ID: {user_id})")
            return None
        return self._to_record(doc)

    def get_token(self, user_id: Optional[str]) -> Optional[str]:
        """사용자의 FCM 토큰. 사용자나 토큰이 없으면 None."""
        user = self.get_user(user_id)
        return user.fcm_token if user and user.has_token else None

    def get_display_name(self, user_id: Optional[str]) -> str:
        user = self.get_user(user_id)
        if user and user.display_name:
            return user.display_name
        return self.default_display_name

    def resolve_tokens(self, user_ids: Iterable[str]) -> List[str]:
        """
        주어진 사용자들의 FCM 토큰 목록을 반환합니다.
        - 입력 순서를 유지하고 같은 토큰은 한 번만 포함합니다.
        - 토큰이 없는 사용자는 건너뜁니다.
        """
        tokens = []
        for user_id in dict.fromkeys(user_ids):
            token = self.get_token(user_id)
            if token:
                tokens.append(token)
        return list(dict.fromkeys(tokens))

    def broadcast_tokens(self, exclude_user_id: Optional[str] = None) -> List[str]:
        """
        전체 사용자를 스캔하여 exclude_user_id와 토큰 없는 사용자를 제외한 토큰 목록을 반환합니다.
        쿼리 필터 없이 메모리에서 거릅니다.
        """
        tokens = []
        for doc in self.users_ref.stream():
            if doc.id == exclude_user_id:
                continue
            user = self._to_record(doc)
            if user is None or not user.has_token:
                continue
            tokens.append(user.fcm_token)
        tokens = list(dict.fromkeys(tokens))
        logger.info(f"브로드캐스트 대상 토큰 {len(tokens)}개 수집 (제외: {exclude_user_id})")
        return tokens
