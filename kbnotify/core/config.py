# kbnotify/core/config.py

import os

def _env_bool(key: str, default: bool = False) -> bool:
    """'1', 'true', 'yes' (대소문자 무시)를 True로 읽습니다."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes')

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 서비스 계정 키 파일 경로. 비어 있으면 Cloud Functions 런타임의 기본 자격 증명(ADC)을 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 신규 회원 알림을 받는 FCM 토픽. iOS 클라이언트가 로그인 시 이 토픽을 구독합니다.
    BROADCAST_TOPIC = os.getenv('BROADCAST_TOPIC', 'allUsers')

    # 이벤트 일정을 알림 본문에 표시할 때 사용할 timezone
    EVENT_TIMEZONE = os.getenv('EVENT_TIMEZONE', 'America/New_York')

    # send_each_for_multicast 한 번에 담을 수 있는 최대 토큰 수 (FCM 제한 500)
    MULTICAST_BATCH_SIZE = int(os.getenv('MULTICAST_BATCH_SIZE', 500))

    # True이면 FCM이 메시지 검증만 하고 실제로 전달하지 않습니다.
    FCM_DRY_RUN = _env_bool('FCM_DRY_RUN')

    # 이름을 찾을 수 없는 사용자를 알림에 표시할 때 쓰는 이름
    DEFAULT_DISPLAY_NAME = os.getenv('DEFAULT_DISPLAY_NAME', 'Someone')

    # 댓글 알림 본문에 인용할 최대 글자 수
    COMMENT_PREVIEW_LENGTH = int(os.getenv('COMMENT_PREVIEW_LENGTH', 100))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

class DevelopmentConfig(Config):
    """로컬 에뮬레이터 개발 환경을 위한 설정 클래스입니다."""
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    # 개발 중에는 실제 기기로 푸시가 나가지 않도록 기본값을 dry run으로 둡니다.
    FCM_DRY_RUN = _env_bool('FCM_DRY_RUN', default=True)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    FCM_DRY_RUN = True
    BROADCAST_TOPIC = 'allUsers'
    EVENT_TIMEZONE = 'America/New_York'
    MULTICAST_BATCH_SIZE = 500
    DEFAULT_DISPLAY_NAME = 'Someone'
    COMMENT_PREVIEW_LENGTH = 100

class ProductionConfig(Config):
    """배포된 Cloud Functions 환경을 위한 설정 클래스입니다."""
    pass

# config_by_name: KBNOTIFY_ENV 값에 따라 kbnotify/__init__.py의 create_context에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
