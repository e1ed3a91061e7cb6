# kbnotify/schemas/records.py
from marshmallow import Schema, fields, post_load, EXCLUDE, ValidationError

from kbnotify.models.user import UserRecord
from kbnotify.models.post import PostRecord, CommentRecord, MentionRecord
from kbnotify.models.event import EventRecord
from kbnotify.utils.datetime_utils import DateTimeUtils

# --- 공용 필드 ---

class FirestoreDateTime(fields.Field):
    """Firestore Timestamp / datetime / ISO 문자열을 UTC datetime으로 읽어들이는 필드."""

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return DateTimeUtils.from_firestore(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def _serialize(self, value, attr, obj, **kwargs):
        return DateTimeUtils.to_iso_string(value) if value else None


class FirestoreRecordSchema(Schema):
    """
    iOS 클라이언트가 쓰는 camelCase 문서를 읽기 위한 기본 스키마.
    알림 로직에 필요 없는 필드(email, password 등)는 무시합니다.
    """
    class Meta:
        unknown = EXCLUDE

# --- 중첩 스키마 ---

class MentionSchema(FirestoreRecordSchema):
    """댓글 안의 멘션 한 건."""
    mention_id = fields.Str(data_key='id', load_default=None, allow_none=True)
    user_id = fields.Str(data_key='userId', required=True)
    name = fields.Str(load_default=None, allow_none=True)
    range = fields.Dict(keys=fields.Str(), load_default=dict)

    @post_load
    def make_record(self, data, **kwargs):
        return MentionRecord(**data)

class CommentSchema(FirestoreRecordSchema):
    """Post 문서의 comments 배열 원소."""
    comment_id = fields.Str(data_key='id', load_default=None, allow_none=True)
    author_id = fields.Str(data_key='authorId', required=True)
    author_name = fields.Str(data_key='authorName', load_default=None, allow_none=True)
    content = fields.Str(load_default="", allow_none=True)
    timestamp = FirestoreDateTime(load_default=None, allow_none=True)
    mentions = fields.List(fields.Nested(MentionSchema), load_default=list, allow_none=True)

    @post_load
    def make_record(self, data, **kwargs):
        data['content'] = data.get('content') or ""
        data['mentions'] = data.get('mentions') or []
        return CommentRecord(**data)

# --- 문서 스키마 ---

class UserRecordSchema(FirestoreRecordSchema):
    """'users/{userId}' 문서."""
    user_id = fields.Str(required=True)
    first_name = fields.Str(data_key='firstName', load_default=None, allow_none=True)
    last_name = fields.Str(data_key='lastName', load_default=None, allow_none=True)
    fcm_token = fields.Str(data_key='fcmToken', load_default=None, allow_none=True)

    @post_load
    def make_record(self, data, **kwargs):
        return UserRecord(**data)

class PostRecordSchema(FirestoreRecordSchema):
    """'posts/{postId}' 문서."""
    post_id = fields.Str(required=True)
    author_id = fields.Str(data_key='authorId', required=True)
    author_name = fields.Str(data_key='authorName', load_default=None, allow_none=True)
    content = fields.Str(load_default="", allow_none=True)
    timestamp = FirestoreDateTime(load_default=None, allow_none=True)
    likes = fields.List(fields.Str(), load_default=list, allow_none=True)
    comments = fields.List(fields.Nested(CommentSchema), load_default=list, allow_none=True)

    @post_load
    def make_record(self, data, **kwargs):
        data['content'] = data.get('content') or ""
        data['likes'] = data.get('likes') or []
        data['comments'] = data.get('comments') or []
        return PostRecord(**data)

class EventRecordSchema(FirestoreRecordSchema):
    """'events/{eventId}' 문서."""
    event_id = fields.Str(required=True)
    title = fields.Str(load_default=None, allow_none=True)
    description = fields.Str(load_default=None, allow_none=True)
    date = FirestoreDateTime(load_default=None, allow_none=True)
    location = fields.Str(load_default=None, allow_none=True)
    created_by = fields.Str(data_key='createdBy', load_default=None, allow_none=True)
    created_at = FirestoreDateTime(data_key='createdAt', load_default=None, allow_none=True)

    @post_load
    def make_record(self, data, **kwargs):
        return EventRecord(**data)


def load_user(user_id: str, data: dict) -> UserRecord:
    """Firestore 문서 딕셔너리를 UserRecord로 변환합니다. 형식이 잘못되면 ValidationError."""
    return UserRecordSchema().load({**(data or {}), 'user_id': user_id})

def load_post(post_id: str, data: dict) -> PostRecord:
    """Firestore 문서 딕셔너리를 PostRecord로 변환합니다."""
    return PostRecordSchema().load({**(data or {}), 'post_id': post_id})

def load_event(event_id: str, data: dict) -> EventRecord:
    """Firestore 문서 딕셔너리를 EventRecord로 변환합니다."""
    return EventRecordSchema().load({**(data or {}), 'event_id': event_id})
