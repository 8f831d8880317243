"""
공용 테스트 픽스처

- 인메모리 SQLite (StaticPool) 로 매 테스트마다 새 스키마를 만든다
- TestClient 는 get_db 를 테스트 세션으로 바꾸고 텔레그램 알림을 Mock 으로 교체한다
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from loyaltyapi.config import Settings
from loyaltyapi.core.security import create_access_token
from loyaltyapi.database.session import get_db
from loyaltyapi.models import Base, CatalogItem, Event, Profile
from loyaltyapi.services.telegram_service import TelegramNotifier
from loyaltyapi.utils.timezone_utils import utc_now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    """환경 변수와 무관한 고정 설정"""
    return Settings(
        _env_file=None,
        TEST_CODES_ENABLED=True,
        REGISTRATION_TEST_CODE="00000",
        BINGO_TEST_CODE="B0000",
        VISIT_REWARD=5,
        VISIT_REWARD_EVERY=5,
        VISIT_MILESTONE_REWARD=5,
        BINGO_REWARD=100,
        TIMEZONE="Europe/Moscow",
    )


@pytest.fixture
def notifier():
    return Mock(spec=TelegramNotifier)


@pytest.fixture
def client(engine, notifier, monkeypatch):
    """테스트 클라이언트 픽스처"""
    from loyaltyapi.config import settings as app_settings
    from loyaltyapi.main import create_app

    monkeypatch.setattr(app_settings, "TEST_CODES_ENABLED", True)

    app = create_app()
    TestingSession = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.container.services.telegram_notifier.override(providers.Object(notifier))
    try:
        yield TestClient(app)
    finally:
        app.container.services.telegram_notifier.reset_override()
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """telegram_id 를 담은 Bearer 헤더 생성기"""

    def _make(telegram_id: int, **claims) -> dict:
        token = create_access_token({"telegram_id": telegram_id, **claims})
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def make_profile(db_session):
    def _make(telegram_id: int, balance: int = 0, role: str = "user", **fields) -> int:
        db_session.add(Profile(telegram_id=telegram_id, balance=balance, role=role, **fields))
        db_session.commit()
        return telegram_id

    return _make


@pytest.fixture
def make_event(db_session):
    def _make(event_id: str = "evt-1", title: str = "Karaoke Night", days_from_now: int = 1) -> str:
        db_session.add(
            Event(
                id=event_id,
                title=title,
                event_date=utc_now() + timedelta(days=days_from_now),
            )
        )
        db_session.commit()
        return event_id

    return _make


@pytest.fixture
def make_item(db_session):
    def _make(item_id: str = "mic_rental", name: str = "Mic rental", price: int = 30) -> str:
        db_session.add(CatalogItem(id=item_id, name=name, price=price))
        db_session.commit()
        return item_id

    return _make
