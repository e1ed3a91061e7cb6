# kbnotify/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional, Type
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from kbnotify.core.config import Config, config_by_name
from kbnotify.core.context import HandlerContext

# - 서비스 모듈
from kbnotify.services.firestore_service import UserDirectory
from kbnotify.services.messaging_service import MessagingService
from kbnotify.services.notification_service import NotificationService


def build_context(config: Type[Config], db=None, gateway: Optional[MessagingService] = None) -> HandlerContext:
    """
    설정과 외부 클라이언트로부터 HandlerContext를 조립합니다.
    테스트에서는 db와 gateway에 가짜 객체를 주입합니다.
    """
    gateway = gateway or MessagingService(dry_run=config.FCM_DRY_RUN, batch_size=config.MULTICAST_BATCH_SIZE)
    return HandlerContext(
        config=config,
        users=UserDirectory(db=db, default_display_name=config.DEFAULT_DISPLAY_NAME),
        notifications=NotificationService(
            gateway=gateway,
            broadcast_topic=config.BROADCAST_TOPIC,
            preview_length=config.COMMENT_PREVIEW_LENGTH
        )
    )


def create_context(config_name: Optional[str] = None) -> HandlerContext:
    """
    알림 핸들러 컨텍스트 팩토리 함수.
    Cloud Functions 인스턴스당 한 번 호출되어 Firebase 앱과 서비스를 초기화합니다.
    """
    # =====================================================================================
    # 3. 설정 선택
    # =====================================================================================
    config_name = config_name or os.getenv('KBNOTIFY_ENV', 'production')
    if config_name not in config_by_name:
        raise ValueError(f"알 수 없는 설정 이름입니다: {config_name} (가능한 값: {', '.join(config_by_name)})")
    config = config_by_name[config_name]

    # =====================================================================================
    # 4. 로깅
    # =====================================================================================
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    )

    # =====================================================================================
    # 5. Firebase Admin 초기화
    # =====================================================================================
    if not firebase_admin._apps:
        cred_path = config.FIREBASE_CREDENTIALS_PATH
        if cred_path:
            if not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
        else:
            # Cloud Functions 런타임에서는 기본 서비스 계정을 사용
            firebase_admin.initialize_app()

    # =====================================================================================
    # 6. 서비스 조립 및 반환
    # =====================================================================================
    context = build_context(config, db=firestore.client())
    logging.info(f"Notification context created for '{config_name}' environment.")
    return context
