"""
리뎀션 엔진 테스트

코드는 한 번만 사용되고, 실패한 리뎀션은 코드와 잔액을 바꾸지 않는다.
"""

from unittest.mock import patch

import pytest

from loyaltyapi.core.exceptions import (
    AlreadyRegisteredError,
    CodeAlreadyUsedError,
    CodeNotFoundError,
    EventExpiredError,
    InsufficientBalanceError,
    InvalidCodeFormatError,
    TargetNotFoundError,
)
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.services.redemption_service import RedemptionService
from loyaltyapi.utils.timezone_utils import utc_now


@pytest.fixture
def service(db_session, settings):
    return RedemptionService(db_session, settings)


def issue(service, namespace, **kwargs):
    registry = service.registry
    if namespace == CodeNamespace.REGISTRATION:
        code = registry.issue_registration_code(kwargs["event_id"])
    elif namespace == CodeNamespace.PURCHASE:
        code = registry.issue_purchase_code(kwargs["catalog_item_id"])
    else:
        code = registry.issue_prize_code(kwargs.get("coins_amount"))
    service.db.commit()
    return code


def balance(service, telegram_id):
    return service.ledger.get_balance(telegram_id).balance


class TestRegistration:
    """등록 코드 리뎀션 테스트"""

    def test_register_credits_visit_reward(self, service, make_profile, make_event):
        # Given
        make_profile(7001)
        make_event("evt-1", title="Karaoke Night")
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-1")

        # When
        result = service.redeem_registration(7001, code.value)

        # Then
        assert result.event.id == "evt-1"
        assert result.event.title == "Karaoke Night"
        assert result.coins_earned == 5
        assert result.new_balance == 5
        assert [a.slug for a in result.newly_unlocked_achievements] == ["first_verse"]

    def test_code_stays_usable_for_other_users(self, service, make_profile, make_event):
        """등록 코드는 행사 전체가 공유한다"""
        make_profile(7001)
        make_profile(7002)
        make_event("evt-1")
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-1")

        service.redeem_registration(7001, code.value)
        result = service.redeem_registration(7002, code.value)

        assert result.new_balance == 5
        assert service.code_repo.get_by_value(code.value).used_at is None

    def test_duplicate_registration(self, service, make_profile, make_event):
        # Given
        make_profile(7001)
        make_event("evt-1")
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-1")
        service.redeem_registration(7001, code.value)

        # When / Then
        with pytest.raises(AlreadyRegisteredError) as exc_info:
            service.redeem_registration(7001, code.value)
        assert exc_info.value.status_code == 409
        assert balance(service, 7001) == 5
        assert len(service.registration_repo.list_for_event("evt-1")) == 1

    def test_concurrent_duplicate_registration(self, service, make_profile, make_event):
        """사전 조회를 통과한 중복 요청도 유니크 제약에서 막힌다"""
        # Given: 첫 등록 완료 후, 두 번째 요청이 아직 등록 전 상태를 읽었다고 가정
        make_profile(7001)
        make_event("evt-1")
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-1")
        service.redeem_registration(7001, code.value)

        # When / Then
        with patch.object(service.registration_repo, "get", return_value=None):
            with pytest.raises(AlreadyRegisteredError):
                service.redeem_registration(7001, code.value)

        assert len(service.registration_repo.list_for_event("evt-1")) == 1
        assert balance(service, 7001) == 5

    def test_expired_event(self, service, make_profile, make_event):
        make_profile(7001)
        make_event("evt-old", days_from_now=-3)
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-old")

        with pytest.raises(EventExpiredError):
            service.redeem_registration(7001, code.value)
        assert balance(service, 7001) == 0

    def test_closed_code(self, service, make_profile, make_event):
        make_profile(7001)
        make_event("evt-1")
        code = issue(service, CodeNamespace.REGISTRATION, event_id="evt-1")
        service.code_repo.close(code.id, utc_now())
        service.db.commit()

        with pytest.raises(CodeAlreadyUsedError):
            service.redeem_registration(7001, code.value)

    def test_missing_event_keeps_code(self, service, make_profile):
        """대상 행사가 없으면 TargetNotFound, 코드는 그대로"""
        make_profile(7001)
        code = issue(service, CodeNamespace.REGISTRATION, event_id="ghost")

        with pytest.raises(TargetNotFoundError):
            service.redeem_registration(7001, code.value)
        assert service.code_repo.get_by_value(code.value).used_at is None

    def test_wrong_namespace_is_not_found(self, service, make_profile, make_item):
        make_profile(7001)
        make_item("mic_rental")
        code = issue(service, CodeNamespace.PURCHASE, catalog_item_id="mic_rental")

        with pytest.raises(CodeNotFoundError):
            service.redeem_registration(7001, code.value)

    def test_bad_format(self, service, make_profile):
        make_profile(7001)
        with pytest.raises(InvalidCodeFormatError):
            service.redeem_registration(7001, "12")

    def test_test_code_can_repeat(self, service, make_profile):
        """테스트 코드는 저장소 없이 매번 방문 보상을 준다"""
        make_profile(7001)

        first = service.redeem_registration(7001, "00000")
        second = service.redeem_registration(7001, "00000")

        assert first.event.id == "test"
        assert second.new_balance == 10


class TestPurchase:
    """구매 / 구매 코드 테스트"""

    def test_purchase_item_issues_ticket(self, service, make_profile, make_item):
        # Given
        make_profile(7001, balance=100)
        make_item("mic_rental", price=30)

        # When
        result = service.purchase_item(7001, "mic_rental")

        # Then
        assert result.item.price == 30
        assert result.bonus_coins == 10
        assert result.new_balance == 80
        assert len(result.ticket.code) == 5
        ticket = service.registry.ticket_repo.get_by_code(result.ticket.code)
        assert ticket.telegram_id == 7001
        assert ticket.source_code is None

    def test_purchase_unknown_item(self, service, make_profile):
        make_profile(7001, balance=100)
        with pytest.raises(TargetNotFoundError):
            service.purchase_item(7001, "nothing")

    def test_redeem_purchase_code_once(self, service, make_profile, make_item):
        # Given
        make_profile(7001, balance=100)
        make_item("mic_rental", price=30)
        code = issue(service, CodeNamespace.PURCHASE, catalog_item_id="mic_rental")

        # When
        result = service.redeem_purchase_code(7001, code.value)

        # Then
        assert result.new_balance == 80
        used = service.code_repo.get_by_value(code.value)
        assert used.used_by == 7001
        assert used.used_at is not None
        ticket = service.registry.ticket_repo.get_by_code(result.ticket.code)
        assert ticket.source_code == code.value

        with pytest.raises(CodeAlreadyUsedError):
            service.redeem_purchase_code(7001, code.value)
        assert balance(service, 7001) == 80

    def test_insufficient_balance_leaves_code_unused(self, service, make_profile, make_item):
        make_profile(7001, balance=10)
        make_item("mic_rental", price=30)
        code = issue(service, CodeNamespace.PURCHASE, catalog_item_id="mic_rental")

        with pytest.raises(InsufficientBalanceError) as exc_info:
            service.redeem_purchase_code(7001, code.value)

        assert exc_info.value.details == {"required": 30, "available": 10}
        assert service.code_repo.get_by_value(code.value).used_at is None
        assert balance(service, 7001) == 10

    def test_shop_payload_input(self, service, make_profile, make_item):
        make_profile(7001, balance=100)
        make_item("mic_rental", price=30)
        code = issue(service, CodeNamespace.PURCHASE, catalog_item_id="mic_rental")

        result = service.redeem_purchase_code(
            7001, f"https://t.me/karaoke_bot?startapp=shop-{code.value[1:]}"
        )

        assert result.item.id == "mic_rental"

    def test_lost_race_does_not_double_charge(self, service, make_profile, make_item):
        """
        동시 요청 시뮬레이션

        두 번째 요청이 사용 전 상태를 읽었더라도 조건부 UPDATE 에서 실패해야 한다.
        """
        # Given: 첫 번째 요청이 먼저 사용
        make_profile(7001, balance=100)
        make_item("mic_rental", price=30)
        code = issue(service, CodeNamespace.PURCHASE, catalog_item_id="mic_rental")
        stale = service.code_repo.get_by_value(code.value)
        service.redeem_purchase_code(7001, code.value)

        # When: 두 번째 요청은 오래된 (미사용) 행을 본다
        with patch.object(service.code_repo, "find_first", return_value=stale):
            with pytest.raises(CodeAlreadyUsedError):
                service.redeem_purchase_code(7001, code.value)

        # Then
        assert balance(service, 7001) == 80
        assert service.ledger.get_history(7001).total_count == 1


class TestPrize:
    """빙고 경품 코드 테스트"""

    def test_claim_prize(self, service, make_profile):
        make_profile(7001)
        code = issue(service, CodeNamespace.PRIZE, coins_amount=75)

        result = service.claim_prize(7001, code.value.lower())

        assert result.coins_earned == 75
        assert result.new_balance == 75
        assert [a.slug for a in result.newly_unlocked_achievements] == ["first_bingo"]

    def test_prize_used_twice(self, service, make_profile):
        make_profile(7001)
        make_profile(7002)
        code = issue(service, CodeNamespace.PRIZE)
        service.claim_prize(7001, code.value)

        with pytest.raises(CodeAlreadyUsedError):
            service.claim_prize(7002, code.value)
        assert balance(service, 7002) == 0

    def test_bingo_test_code(self, service, make_profile, settings):
        make_profile(7001)

        result = service.claim_prize(7001, "B0000")

        assert result.coins_earned == settings.BINGO_REWARD

    def test_code_with_foreign_target_is_rejected(self, service, make_profile):
        """구매 경로에 경품 코드 행이 들어오면 대상 없음으로 처리하고 코드를 남긴다"""
        make_profile(7001, balance=500)
        code = issue(service, CodeNamespace.PRIZE, coins_amount=50)
        prize_row = service.code_repo.get_by_value(code.value)

        with patch.object(service, "_load_unused", return_value=prize_row):
            with pytest.raises(TargetNotFoundError):
                service.redeem_purchase_code(7001, code.value)

        assert service.code_repo.get_by_value(code.value).used_at is None
        assert balance(service, 7001) == 500

    def test_stale_read_on_prize(self, service, make_profile):
        make_profile(7001)
        make_profile(7002)
        code = issue(service, CodeNamespace.PRIZE, coins_amount=50)
        stale = service.code_repo.get_by_value(code.value)
        service.claim_prize(7001, code.value)

        with patch.object(service, "_load_unused", return_value=stale):
            with pytest.raises(CodeAlreadyUsedError):
                service.claim_prize(7002, code.value)

        assert balance(service, 7001) == 50
        assert balance(service, 7002) == 0
