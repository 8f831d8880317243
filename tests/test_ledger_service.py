import pytest

from loyaltyapi.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.schemas.catalog import CatalogItemSchema
from loyaltyapi.services.ledger_service import LedgerService


@pytest.fixture
def ledger(db_session, settings):
    return LedgerService(db_session, settings)


class TestCreditDebit:
    """기본 잔액 연산 테스트"""

    def test_credit_records_ledger_entry(self, ledger, make_profile):
        # Given
        make_profile(7001, balance=10)

        # When
        with unit_of_work(ledger.db):
            new_balance = ledger.credit(7001, 15, "manual", "ref-1")

        # Then
        assert new_balance == 25
        history = ledger.get_history(7001)
        assert history.balance == 25
        assert history.total_count == 1
        entry = history.entries[0]
        assert entry.delta == 15
        assert entry.balance_after == 25
        assert entry.transaction_type == "CREDIT"
        assert entry.ref_id == "ref-1"

    def test_debit_insufficient_changes_nothing(self, ledger, make_profile):
        make_profile(7001, balance=10)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            ledger.debit(7001, 11, "transfer_subtract", "ref-2")

        assert exc_info.value.details == {"required": 11, "available": 10}
        assert ledger.get_balance(7001).balance == 10
        assert ledger.get_history(7001).total_count == 0

    def test_debit_to_exactly_zero(self, ledger, make_profile):
        make_profile(7001, balance=10)

        with unit_of_work(ledger.db):
            assert ledger.debit(7001, 10, "transfer_subtract", "ref-3") == 0

    def test_non_positive_amount_rejected(self, ledger, make_profile):
        make_profile(7001)

        with pytest.raises(ValidationError):
            ledger.credit(7001, 0, "manual", "ref-4")
        with pytest.raises(ValidationError):
            ledger.debit(7001, -5, "manual", "ref-5")

    def test_missing_profile(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.credit(9999, 5, "manual", "ref-6")


class TestRewardApplier:
    """보상 적용 테스트"""

    def test_visit_reward_increments_counter_and_unlocks(self, ledger, make_profile):
        # Given
        make_profile(7001)

        # When
        with unit_of_work(ledger.db):
            result = ledger.apply_visit_reward(7001, ref_id="registration:evt-1:7001")

        # Then
        assert result.new_balance == 5
        assert result.coins_earned == 5
        assert [a.slug for a in result.newly_unlocked] == ["first_verse"]
        assert ledger.stats_repo.get(7001).games_visited == 1

    def test_purchase_folds_first_purchase_bonus(self, ledger, make_profile):
        """첫 구매 보너스(10)는 가격 차감과 같은 원장 항목에 합산된다"""
        # Given
        make_profile(7001, balance=30)
        item = CatalogItemSchema(id="mic_rental", name="Mic rental", price=30)

        # When
        with unit_of_work(ledger.db):
            result = ledger.apply_purchase(7001, item, ref_id="purchase:1")

        # Then
        assert result.coins_earned == -30
        assert result.bonus_coins == 10
        assert result.new_balance == 10
        assert [a.slug for a in result.newly_unlocked] == ["has_ticket"]
        history = ledger.get_history(7001)
        assert history.total_count == 1
        assert history.entries[0].delta == -20

    def test_purchase_bonus_cannot_cover_shortfall(self, ledger, make_profile):
        make_profile(7001, balance=25)
        item = CatalogItemSchema(id="mic_rental", name="Mic rental", price=30)

        with pytest.raises(InsufficientBalanceError):
            with unit_of_work(ledger.db):
                ledger.apply_purchase(7001, item, ref_id="purchase:2")

        assert ledger.get_balance(7001).balance == 25
        assert ledger.stats_repo.get(7001) is None

    def test_purchase_uses_price_override(self, ledger, make_profile):
        make_profile(7001, balance=100)
        item = CatalogItemSchema(id="extra_card", name="Extra card", price=999)

        with unit_of_work(ledger.db):
            result = ledger.apply_purchase(7001, item, ref_id="purchase:3")

        assert result.coins_earned == -25

    def test_bingo_win(self, ledger, make_profile):
        make_profile(7001)

        with unit_of_work(ledger.db):
            result = ledger.apply_bingo_win(7001, 75, ref_id="code:B7KQ2")

        assert result.new_balance == 75
        assert [a.slug for a in result.newly_unlocked] == ["first_bingo"]

    def test_award_does_not_touch_counters(self, ledger, make_profile):
        make_profile(7001)

        with unit_of_work(ledger.db):
            result = ledger.award(7001, 150, reason="award:manual", ref_id="award:1")

        assert result.new_balance == 150
        assert ledger.stats_repo.get(7001) is None


class TestIntegrity:
    def test_ok_after_mixed_operations(self, ledger, make_profile):
        make_profile(7001)
        with unit_of_work(ledger.db):
            ledger.credit(7001, 50, "manual", "r1")
            ledger.debit(7001, 20, "manual", "r2")

        result = ledger.verify_integrity(7001)

        assert result.status == "OK"
        assert result.recorded_balance == 30
        assert result.entry_count == 2

    def test_mismatch_when_balance_set_outside_ledger(self, ledger, make_profile):
        make_profile(7001, balance=40)

        result = ledger.verify_integrity(7001)

        assert result.status == "MISMATCH"
        assert result.calculated_balance == 0
