# kbnotify/models/event.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class EventRecord:
    """
    Firestore 'events' 컬렉션의 문서 구조.
    """
    event_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = None
    created_by: Optional[str] = None # 이벤트를 만든 사용자 ID
    created_at: Optional[datetime] = None
