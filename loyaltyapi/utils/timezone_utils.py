"""
타임존 유틸리티

행사 날짜는 운영 지역 타임존(settings.TIMEZONE) 기준 달력 날짜로 판단한다.
"""

from datetime import date, datetime, timezone
from typing import Optional

import pytz


def utc_now() -> datetime:
    """현재 UTC 시간을 반환합니다."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """naive datetime 은 UTC 로 가정합니다 (SQLite 는 tzinfo 를 저장하지 않음)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def local_now(tz_name: str) -> datetime:
    return datetime.now(pytz.timezone(tz_name))


def to_local(dt: datetime, tz_name: str) -> datetime:
    return ensure_aware(dt).astimezone(pytz.timezone(tz_name))


def local_date(dt: datetime, tz_name: str) -> date:
    return to_local(dt, tz_name).date()


def is_event_expired(
    event_date: datetime, tz_name: str, now: Optional[datetime] = None
) -> bool:
    """
    행사 날짜가 이미 지났는지 확인합니다.

    같은 날 입장 시 등록할 수 있도록 시각이 아닌 현지 달력 날짜로 비교합니다.
    """
    current = to_local(now, tz_name) if now else local_now(tz_name)
    return local_date(event_date, tz_name) < current.date()
