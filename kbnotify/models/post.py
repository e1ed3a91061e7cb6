# kbnotify/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict

@dataclass
class MentionRecord:
    """댓글 본문 안의 '@이름' 멘션 정보."""
    user_id: str
    mention_id: Optional[str] = None
    name: Optional[str] = None
    range: Dict[str, int] = field(default_factory=dict) # {'location': 시작 오프셋, 'length': 길이}

@dataclass
class CommentRecord:
    """Post 문서의 'comments' 배열에 저장되는 댓글."""
    comment_id: Optional[str]
    author_id: str
    content: str = ""
    author_name: Optional[str] = None
    timestamp: Optional[datetime] = None
    mentions: List[MentionRecord] = field(default_factory=list)

@dataclass
class PostRecord:
    """
    Firestore 'posts' 컬렉션의 문서 구조.
    likes는 좋아요를 누른 사용자 ID 목록(집합 의미), comments는 작성 순서대로 쌓입니다.
    """
    post_id: str
    author_id: str
    content: str = ""
    author_name: Optional[str] = None
    timestamp: Optional[datetime] = None
    likes: List[str] = field(default_factory=list)
    comments: List[CommentRecord] = field(default_factory=list)

    def commenter_ids(self) -> List[str]:
        """댓글 작성자 ID를 처음 등장한 순서대로 중복 없이 반환합니다."""
        return list(dict.fromkeys(c.author_id for c in self.comments if c.author_id))
