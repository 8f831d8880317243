import random
from unittest.mock import Mock

import pytest

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import CodeGenerationExhaustedError, InvalidCodeFormatError
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.services.code_registry import TICKET, CodeRegistry
from loyaltyapi.utils.code_parser import UNAMBIGUOUS_ALPHABET


@pytest.fixture
def registry(db_session, settings):
    return CodeRegistry(db_session, settings, rng=random.Random(7))


class TestGenerate:
    """네임스페이스별 코드 형식 테스트"""

    def test_registration_code_is_five_digits(self, registry):
        value = registry.generate(CodeNamespace.REGISTRATION)
        assert len(value) == 5
        assert value.isdigit()
        assert 10000 <= int(value) <= 99999

    def test_alphanumeric_registration_style(self, db_session, settings):
        settings.REGISTRATION_CODE_STYLE = "alphanumeric"
        registry = CodeRegistry(db_session, settings, rng=random.Random(1))

        value = registry.generate(CodeNamespace.REGISTRATION)

        assert len(value) == 5
        assert all(ch in UNAMBIGUOUS_ALPHABET for ch in value)

    def test_purchase_and_prize_prefixes(self, registry):
        purchase = registry.generate(CodeNamespace.PURCHASE)
        prize = registry.generate(CodeNamespace.PRIZE)

        assert purchase.startswith("C") and len(purchase) == 6
        assert prize.startswith("B") and len(prize) == 5
        for ch in purchase[1:] + prize[1:] + registry.generate(TICKET):
            assert ch in UNAMBIGUOUS_ALPHABET
            assert ch not in "01IO"

    def test_unknown_namespace(self, registry):
        with pytest.raises(ValueError):
            registry.generate("voucher")


class TestUniqueness:
    """전역 중복 검사 테스트"""

    def test_regenerates_on_collision(self, db_session, settings, make_event):
        # Given: 12345 가 이미 발급됨
        make_event("evt-1")
        rng = Mock()
        rng.randint.side_effect = [12345, 12345, 23456]
        registry = CodeRegistry(db_session, settings, rng=rng)
        first = registry.issue_registration_code("evt-1")
        db_session.commit()

        # When
        value = registry.ensure_unique(CodeNamespace.REGISTRATION)

        # Then
        assert first.value == "12345"
        assert value == "23456"

    def test_exhausted_attempts(self, db_session, settings, make_event):
        # Given
        make_event("evt-1")
        settings.CODE_MAX_ATTEMPTS = 3
        rng = Mock()
        rng.randint.return_value = 12345
        registry = CodeRegistry(db_session, settings, rng=rng)
        registry.issue_registration_code("evt-1")

        # When / Then
        with pytest.raises(CodeGenerationExhaustedError) as exc_info:
            registry.ensure_unique(CodeNamespace.REGISTRATION)
        assert exc_info.value.status_code == 500
        assert exc_info.value.details["attempts"] == 3

    def test_reserved_test_codes_are_taken(self, registry):
        assert registry.is_taken("00000")
        assert registry.is_taken("B0000")

    def test_purchase_code_alias_blocks_ticket_value(self, registry, make_item):
        """CXXXXX 가 있으면 XXXXX 는 티켓/등록 코드로 쓸 수 없다"""
        # Given
        make_item("mic_rental")
        code = registry.issue_purchase_code("mic_rental")

        # When / Then
        assert registry.is_taken(code.value)
        assert registry.is_taken(code.value[1:])

    def test_ticket_value_blocks_codes(self, registry, make_profile, make_item):
        make_profile(7001)
        make_item("mic_rental")
        ticket = registry.issue_ticket(7001, "mic_rental")

        assert registry.is_taken(ticket.code)
        assert registry.is_taken("C" + ticket.code)

    def test_candidate_is_tried_first(self, registry):
        assert registry.ensure_unique(CodeNamespace.PRIZE, candidate="B7KQ2") == "B7KQ2"


class TestIssue:
    def test_prize_code_defaults_to_bingo_reward(self, registry, settings):
        code = registry.issue_prize_code(created_by=1)

        assert code.namespace == CodeNamespace.PRIZE
        assert code.coins_amount == settings.BINGO_REWARD
        assert code.used_at is None
        assert code.created_by == 1

    def test_prize_code_records_issuing_event(self, registry, make_event):
        """행사에서 발급한 경품 코드는 발급 행사를 기록한다"""
        # Given
        make_event("evt-1")

        # When
        code = registry.issue_prize_code(coins_amount=75, created_by=1, event_id="evt-1")

        # Then
        assert code.event_id == "evt-1"
        assert code.namespace == CodeNamespace.PRIZE
        assert code.coins_amount == 75

    def test_ticket_keeps_source_code(self, registry, make_profile, make_item):
        make_profile(7001)
        make_item("mic_rental")

        ticket = registry.issue_ticket(7001, "mic_rental", source_code="CAB3DE")

        assert ticket.telegram_id == 7001
        assert ticket.source_code == "CAB3DE"
        assert ticket.used_at is None


class TestClassify:
    """입력 분류 테스트"""

    def test_parse_rejects_garbage(self, registry):
        with pytest.raises(InvalidCodeFormatError):
            registry.parse("not a code")

    def test_test_codes_without_lookup(self, registry):
        assert registry.classify(registry.parse("00000")).kind == "registration"
        assert registry.classify(registry.parse("B0000")).kind == "prize"

    def test_test_codes_disabled(self, db_session, settings):
        settings.TEST_CODES_ENABLED = False
        registry = CodeRegistry(db_session, settings)

        assert registry.classify(registry.parse("00000")) is None

    def test_test_codes_off_by_default(self, monkeypatch):
        """기본 설정에서는 테스트 코드가 꺼져 있다"""
        monkeypatch.delenv("TEST_CODES_ENABLED", raising=False)

        assert Settings(_env_file=None).TEST_CODES_ENABLED is False

    def test_registration_code(self, registry, make_event):
        make_event("evt-1")
        code = registry.issue_registration_code("evt-1")

        classified = registry.classify(registry.parse(code.value))

        assert classified.kind == "registration"
        assert classified.code.event_id == "evt-1"
        assert classified.used is False

    def test_purchase_code_without_prefix(self, registry, make_item):
        """접두사 없이 입력해도 구매 코드로 분류된다"""
        make_item("mic_rental")
        code = registry.issue_purchase_code("mic_rental")

        classified = registry.classify(registry.parse(code.value[1:].lower()))

        assert classified.kind == "purchase"
        assert classified.value == code.value

    def test_ticket(self, registry, make_profile, make_item):
        make_profile(7001)
        make_item("mic_rental")
        ticket = registry.issue_ticket(7001, "mic_rental")

        classified = registry.classify(registry.parse(ticket.code))

        assert classified.kind == TICKET
        assert classified.ticket.id == ticket.id

    def test_unknown_code(self, registry):
        assert registry.classify(registry.parse("ZZZZZ")) is None
