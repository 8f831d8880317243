"""
기본 데이터 시드 스크립트
카탈로그 상품, 첫 행사(등록 코드 포함), root 프로필을 초기 데이터로 설정

사용 예시:
    python scripts/seed_data.py --root-telegram-id 123456789
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
from datetime import timedelta

from loyaltyapi.config import settings
from loyaltyapi.core.rewards import get_catalog_item_price
from loyaltyapi.database.connection import SessionLocal
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models import CatalogItem, UserRole
from loyaltyapi.repositories.profile_repository import ProfileRepository
from loyaltyapi.schemas.events import EventCreateRequest
from loyaltyapi.services.event_service import EventService
from loyaltyapi.utils.timezone_utils import utc_now


def seed_catalog_data():
    """기본 카탈로그 상품 시드"""

    default_items = [
        {"id": "extra_card", "name": "Extra bingo card", "price": 25},
        {"id": "free_ticket", "name": "Free entry ticket", "price": 100},
        {"id": "song_skip", "name": "Skip the song queue", "price": 40},
        {"id": "duet_pass", "name": "Duet with the host", "price": 60},
    ]

    db = SessionLocal()
    try:
        for item_data in default_items:
            existing = db.get(CatalogItem, item_data["id"])
            if not existing:
                db.add(CatalogItem(**item_data))
                price = get_catalog_item_price(item_data["id"], item_data["price"])
                print(f"✅ 상품 추가: {item_data['name']} ({price} coins)")
            else:
                print(f"⏭️  이미 존재하는 상품: {item_data['name']}")

        db.commit()
        print(f"✅ 카탈로그 시드 데이터 생성 완료: {len(default_items)}개 상품")

    except Exception as e:
        db.rollback()
        print(f"❌ 카탈로그 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        db.close()


def seed_root_profile(telegram_id: int):
    """root 프로필 생성/승격"""
    db = SessionLocal()
    try:
        with unit_of_work(db):
            repo = ProfileRepository(db)
            repo.get_or_create(telegram_id)
            repo.set_role(telegram_id, UserRole.ROOT.value)
        print(f"✅ root 프로필: {telegram_id}")
    finally:
        db.close()


def seed_event_data(created_by: int):
    """다음 주 행사 1개 + 등록 코드"""
    db = SessionLocal()
    try:
        response = EventService(db, settings).create_event(
            EventCreateRequest(
                title="Karaoke Bingo Night",
                event_date=utc_now() + timedelta(days=7),
                location="Main hall",
            ),
            created_by=created_by,
        )
        print(f"✅ 행사 생성: {response.title} ({response.event_date:%Y-%m-%d})")
        print(f"🔑 등록 코드: {response.code}")
    finally:
        db.close()


def main():
    """시드 데이터 실행"""
    parser = argparse.ArgumentParser(description="Seed loyalty data")
    parser.add_argument("--root-telegram-id", type=int, required=True)
    parser.add_argument("--skip-event", action="store_true")
    args = parser.parse_args()

    print("🌱 시드 데이터 생성을 시작합니다...")
    print()

    print("🎁 카탈로그 시드 중...")
    seed_catalog_data()
    print()

    print("👑 root 프로필 시드 중...")
    seed_root_profile(args.root_telegram_id)
    print()

    if not args.skip_event:
        print("🎤 행사 시드 중...")
        seed_event_data(args.root_telegram_id)
        print()

    print("🎉 모든 시드 데이터 생성이 완료되었습니다!")


if __name__ == "__main__":
    main()
