# kbnotify/models/user.py
from dataclasses import dataclass
from typing import Optional

@dataclass
class UserRecord:
    """
    Firestore 'users' 컬렉션의 문서 구조 중 알림 발송에 필요한 부분.
    """
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    fcm_token: Optional[str] = None # 클라이언트의 FCM 등록 토큰 (갱신될 때마다 덮어씀)

    @property
    def display_name(self) -> str:
        """'이름 성' 형식의 표시 이름. 둘 다 없으면 빈 문자열."""
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()

    @property
    def has_token(self) -> bool:
        return bool(self.fcm_token)
