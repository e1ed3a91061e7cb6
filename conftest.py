# conftest.py
"""
테스트 공용 픽스처.
Firestore와 FCM 게이트웨이를 메모리 기반 가짜 객체로 대체합니다.
"""
import itertools
import pytest

from kbnotify import build_context
from kbnotify.core.config import TestingConfig
from kbnotify.services.messaging_service import MulticastResult


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def get(self):
        self.collection.reads.append(self.id)
        return FakeSnapshot(self.id, self.collection.docs.get(self.id))


class FakeCollection:
    def __init__(self):
        self.docs = {}
        self.reads = []
        self.scans = 0

    def document(self, doc_id):
        return FakeDocumentRef(self, doc_id)

    def stream(self):
        self.scans += 1
        return iter([FakeSnapshot(doc_id, data) for doc_id, data in self.docs.items()])


class FakeFirestore:
    """collection().document().get() 과 collection().stream() 만 지원하는 가짜 Firestore 클라이언트."""
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())

    def add_user(self, user_id, first_name=None, last_name=None, token=None, **extra):
        data = dict(extra)
        if first_name is not None:
            data['firstName'] = first_name
        if last_name is not None:
            data['lastName'] = last_name
        if token is not None:
            data['fcmToken'] = token
        self.collection('users').docs[user_id] = data

    @property
    def access_count(self):
        return sum(len(c.reads) + c.scans for c in self.collections.values())


class FakeGateway:
    """MessagingService 대신 발송 요청을 기록만 하는 가짜 게이트웨이."""
    def __init__(self):
        self.sent = []
        self._ids = itertools.count(1)

    def send_to_token(self, token, notification):
        self.sent.append(('token', token, notification))
        return f"msg-{next(self._ids)}"

    def send_to_topic(self, topic, notification):
        self.sent.append(('topic', topic, notification))
        return f"msg-{next(self._ids)}"

    def send_multicast(self, tokens, notification):
        if not tokens:
            return None
        self.sent.append(('multicast', list(tokens), notification))
        return MulticastResult(success_count=len(tokens))

    def of_kind(self, kind):
        return [entry for entry in self.sent if entry[0] == kind]


@pytest.fixture
def firestore_db():
    return FakeFirestore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def ctx(firestore_db, gateway):
    return build_context(TestingConfig, db=firestore_db, gateway=gateway)
