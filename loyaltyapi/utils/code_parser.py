"""
단축 코드 파싱/정규화 유틸리티

사용자나 스태프가 입력/스캔한 임의의 문자열에서 코드 하나를 추출한다.

지원 형식:
- 5자리 코드 그대로 (예: "48291", "k7m2q")
- 경품 코드 "B" + 4자리 (예: "B7KQ2")
- 구매 코드 "C" + 5자리, 또는 "C" 없이 5자리
- 딥링크 페이로드 "shop-XXXXX"
- start / startapp 쿼리 파라미터에 위 형식을 담은 봇 URL
"""

import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from loyaltyapi.models.code import CodeNamespace

CODE_LENGTH = 5
UNAMBIGUOUS_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PRIZE_PREFIX = "B"
PURCHASE_PREFIX = "C"
SHOP_PAYLOAD_PREFIX = "shop-"
DEEP_LINK_PARAMS = ("startapp", "start")

_CODE_RE = re.compile(r"^[A-Z0-9]+$")


@dataclass(frozen=True)
class ParsedCode:
    """정규화된 코드와 입력 형식에서 알 수 있는 네임스페이스 힌트"""

    value: str
    namespace_hint: Optional[CodeNamespace] = None

    def lookup_candidates(self) -> List[str]:
        """저장소 조회 시 시도할 값 목록 (접두사 없는 구매 코드 대응)"""
        candidates = [self.value]
        if self.namespace_hint is None and len(self.value) == CODE_LENGTH:
            candidates.append(PURCHASE_PREFIX + self.value)
        return candidates


def _looks_like_url(raw: str) -> bool:
    lowered = raw.lower()
    return "://" in lowered or lowered.startswith("t.me/") or lowered.startswith("www.")


def extract_payload(raw: str) -> Optional[str]:
    """URL 이면 start/startapp 파라미터 값을, 아니면 입력 그대로 반환"""
    raw = raw.strip()
    if not _looks_like_url(raw):
        return raw

    url = raw if "://" in raw else f"https://{raw}"
    query = parse_qs(urlparse(url).query)
    for param in DEEP_LINK_PARAMS:
        values = query.get(param)
        if values and values[0].strip():
            return values[0].strip()
    return None


def normalize_code(raw: Optional[str]) -> Optional[ParsedCode]:
    """
    임의의 입력에서 정규화된 코드를 추출한다.

    형식이 맞지 않으면 None 을 반환한다. 잘못된 코드를 만들어 이후 조회가 조용히
    실패하는 일이 없도록 모양 검사를 여기서 끝낸다.
    """
    if not raw or not isinstance(raw, str):
        return None

    payload = extract_payload(raw)
    if not payload:
        return None

    hint: Optional[CodeNamespace] = None
    if payload.lower().startswith(SHOP_PAYLOAD_PREFIX):
        payload = payload[len(SHOP_PAYLOAD_PREFIX):]
        hint = CodeNamespace.PURCHASE

    value = payload.strip().upper()
    if not _CODE_RE.match(value):
        return None

    if len(value) == CODE_LENGTH + 1 and value.startswith(PURCHASE_PREFIX):
        return ParsedCode(value=value, namespace_hint=CodeNamespace.PURCHASE)

    if len(value) != CODE_LENGTH:
        return None

    if hint == CodeNamespace.PURCHASE:
        return ParsedCode(value=PURCHASE_PREFIX + value, namespace_hint=hint)
    return ParsedCode(value=value)

