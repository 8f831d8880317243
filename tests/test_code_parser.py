import pytest

from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.utils.code_parser import (
    extract_payload,
    normalize_code,
)


class TestNormalizeCode:
    """입력 문자열 정규화 테스트"""

    def test_plain_five_digit_code(self):
        """5자리 숫자 코드는 그대로 통과"""
        # When
        parsed = normalize_code(" 48291 ")

        # Then
        assert parsed is not None
        assert parsed.value == "48291"
        assert parsed.namespace_hint is None
        assert parsed.lookup_candidates() == ["48291", "C48291"]

    def test_lowercase_is_uppercased(self):
        parsed = normalize_code("k7m2q")
        assert parsed.value == "K7M2Q"

    def test_prefixed_purchase_code(self):
        """C + 5자리는 구매 코드 힌트를 가진다"""
        parsed = normalize_code("cAB3DE")

        assert parsed.value == "CAB3DE"
        assert parsed.namespace_hint == CodeNamespace.PURCHASE
        assert parsed.lookup_candidates() == ["CAB3DE"]

    def test_shop_payload(self):
        """shop-XXXXX 딥링크 페이로드는 C 접두사가 붙는다"""
        parsed = normalize_code("shop-ab3de")

        assert parsed.value == "CAB3DE"
        assert parsed.namespace_hint == CodeNamespace.PURCHASE

    @pytest.mark.parametrize(
        "raw",
        [
            "https://t.me/karaoke_bot?start=48291",
            "https://t.me/karaoke_bot/app?startapp=48291",
            "t.me/karaoke_bot?startapp=48291",
        ],
    )
    def test_bot_url_with_start_param(self, raw):
        """봇 URL 의 start/startapp 파라미터에서 코드를 꺼낸다"""
        parsed = normalize_code(raw)

        assert parsed is not None
        assert parsed.value == "48291"

    def test_bot_url_with_shop_payload(self):
        parsed = normalize_code("https://t.me/karaoke_bot?startapp=shop-XY7Z9")
        assert parsed.value == "CXY7Z9"

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "1234", "123456", "12-34", "ab c1", "https://example.com/page"],
    )
    def test_malformed_input_returns_none(self, raw):
        """모양이 맞지 않으면 None - 잘못된 코드를 만들지 않는다"""
        assert normalize_code(raw) is None


class TestHelpers:
    def test_extract_payload_non_url(self):
        assert extract_payload("  B7KQ2 ") == "B7KQ2"

    def test_extract_payload_url_without_param(self):
        assert extract_payload("https://t.me/karaoke_bot") is None

