# kbnotify/utils/datetime_utils.py
"""
알림 핸들러 전체에서 일관된 시간/날짜 처리를 위한 유틸리티 모듈

이 모듈의 목적:
1. Firestore Timestamp / datetime / ISO 문자열을 UTC datetime으로 통일
2. 이벤트 일정을 사람이 읽을 수 있는 en-US 문자열로 변환
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from dateutil import parser as dateutil_parser
from dateutil import tz

logger = logging.getLogger(__name__)

# 이벤트 알림에 표시할 기본 timezone
DEFAULT_EVENT_TIMEZONE = "America/New_York"


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2025-03-15T19:00:00Z
        - 2025-03-15T19:00:00-05:00
        - 2025-03-15T19:00:00.123456Z
        - 2025-03-15T19:00:00 (UTC로 가정)
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 ISO 포맷 문자열로 변환 (Z 접미사 포함)"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')

    @staticmethod
    def from_firestore(value: Any) -> Optional[datetime]:
        """
        Firestore 문서에서 읽은 시간 값을 UTC datetime으로 변환

        변환 규칙:
        - None -> None
        - datetime (DatetimeWithNanoseconds 포함) -> UTC datetime
        - 문자열 -> ISO 파싱
        - 'timestamp()'를 가진 객체 (protobuf Timestamp 등) -> UTC datetime
        """
        if value is None:
            return None

        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)

        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)

        if hasattr(value, 'timestamp'):
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)

        raise ValueError(f"datetime으로 변환할 수 없는 값입니다: {value!r} ({type(value)})")

    @staticmethod
    def get_timezone(name: Optional[str]) -> tzinfo:
        """IANA timezone 이름으로 tzinfo를 반환합니다. 알 수 없는 이름이면 UTC."""
        zone = tz.gettz(name) if name else None
        if zone is None:
            logger.warning(f"알 수 없는 timezone '{name}', UTC로 대체합니다.")
            return timezone.utc
        return zone

    @staticmethod
    def format_event_datetime(dt: datetime, timezone_name: str = DEFAULT_EVENT_TIMEZONE) -> str:
        """
        이벤트 일정을 en-US 형식의 문자열로 변환

        예: 'Saturday, March 15, 2025 at 7:00 PM'
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        local = dt.astimezone(DateTimeUtils.get_timezone(timezone_name))

        hour = local.hour % 12 or 12
        meridiem = 'AM' if local.hour < 12 else 'PM'
        return (
            f"{local.strftime('%A')}, {local.strftime('%B')} {local.day}, {local.year} "
            f"at {hour}:{local.minute:02d} {meridiem}"
        )

