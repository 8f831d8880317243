"""
코드 레지스트리

짧은 코드의 생성, 전역 중복 검사, 정규화, 분류를 담당한다.

코드 공간:
- 등록 코드: 숫자 5자리(10000~99999) 또는 혼동 없는 문자 5자리
- 구매 코드: "C" + 혼동 없는 문자 5자리
- 경품 코드: "B" + 혼동 없는 문자 4자리
- 티켓 코드: 혼동 없는 문자 5자리

codes 와 tickets 는 같은 문자 공간을 쓰므로 발급 시 두 테이블을 모두 확인한다.
접두사 없이 입력된 구매 코드("XXXXX" -> "CXXXXX")도 다른 코드와 겹치지 않도록
별칭까지 함께 검사한다.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import (
    CodeGenerationExhaustedError,
    InvalidCodeFormatError,
)
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.repositories.code_repository import CodeRepository
from loyaltyapi.repositories.ticket_repository import TicketRepository
from loyaltyapi.schemas.catalog import TicketSchema
from loyaltyapi.schemas.codes import CodeSchema
from loyaltyapi.utils.code_parser import (
    CODE_LENGTH,
    PRIZE_PREFIX,
    PURCHASE_PREFIX,
    UNAMBIGUOUS_ALPHABET,
    ParsedCode,
    normalize_code,
)

logger = logging.getLogger(__name__)

TICKET = "ticket"


@dataclass(frozen=True)
class ClassifiedCode:
    """분류 결과 - 코드 행 또는 티켓 행 중 하나"""

    value: str
    kind: str  # registration | purchase | prize | ticket
    code: Optional[CodeSchema] = None
    ticket: Optional[TicketSchema] = None

    @property
    def used(self) -> bool:
        record = self.code or self.ticket
        return record is not None and record.used_at is not None


class CodeRegistry:
    """코드 생성/정규화/분류 서비스"""

    def __init__(self, db: Session, settings: Settings, rng: Optional[secrets.SystemRandom] = None):
        self.db = db
        self.settings = settings
        self.code_repo = CodeRepository(db)
        self.ticket_repo = TicketRepository(db)
        self._rng = rng or secrets.SystemRandom()

    # ------------------------------------------------------------------
    # 생성
    # ------------------------------------------------------------------

    def _random_chars(self, alphabet: str, length: int) -> str:
        return "".join(self._rng.choice(alphabet) for _ in range(length))

    def generate(self, namespace: Union[CodeNamespace, str]) -> str:
        """네임스페이스 형식에 맞는 무작위 코드 1개 (중복 검사 없음)"""
        if namespace == CodeNamespace.PRIZE:
            return PRIZE_PREFIX + self._random_chars(UNAMBIGUOUS_ALPHABET, CODE_LENGTH - 1)
        if namespace == CodeNamespace.PURCHASE:
            return PURCHASE_PREFIX + self._random_chars(UNAMBIGUOUS_ALPHABET, CODE_LENGTH)
        if namespace == CodeNamespace.REGISTRATION:
            if self.settings.REGISTRATION_CODE_STYLE == "alphanumeric":
                return self._random_chars(UNAMBIGUOUS_ALPHABET, CODE_LENGTH)
            return str(self._rng.randint(10 ** (CODE_LENGTH - 1), 10 ** CODE_LENGTH - 1))
        if namespace == TICKET:
            return self._random_chars(UNAMBIGUOUS_ALPHABET, CODE_LENGTH)
        raise ValueError(f"Unknown code namespace: {namespace}")

    def _reserved(self) -> List[str]:
        return [self.settings.REGISTRATION_TEST_CODE, self.settings.BINGO_TEST_CODE]

    def _aliases(self, value: str) -> List[str]:
        """조회 시 같은 입력으로 취급되는 값들"""
        if len(value) == CODE_LENGTH + 1 and value.startswith(PURCHASE_PREFIX):
            return [value, value[1:]]
        if len(value) == CODE_LENGTH:
            return [value, PURCHASE_PREFIX + value]
        return [value]

    def is_taken(self, value: str) -> bool:
        """codes, tickets, 테스트 코드 중 어디에든 이미 있으면 True"""
        for alias in self._aliases(value):
            if alias in self._reserved():
                return True
            if self.code_repo.value_exists(alias) or self.ticket_repo.code_exists(alias):
                return True
        return False

    def ensure_unique(
        self, namespace: Union[CodeNamespace, str], candidate: Optional[str] = None
    ) -> str:
        """
        중복되지 않는 코드를 찾을 때까지 재생성

        Args:
            namespace: 코드 네임스페이스 (또는 "ticket")
            candidate: 먼저 시도할 값

        Raises:
            CodeGenerationExhaustedError: CODE_MAX_ATTEMPTS 안에 찾지 못한 경우
        """
        max_attempts = self.settings.CODE_MAX_ATTEMPTS
        for attempt in range(max_attempts):
            value = candidate if attempt == 0 and candidate else self.generate(namespace)
            if not self.is_taken(value):
                return value

        logger.error(f"Unique code generation exhausted for {namespace} after {max_attempts} attempts")
        raise CodeGenerationExhaustedError(
            details={"namespace": str(getattr(namespace, "value", namespace)), "attempts": max_attempts}
        )

    # ------------------------------------------------------------------
    # 발급
    # ------------------------------------------------------------------

    def _issue(self, namespace: CodeNamespace, **fields) -> CodeSchema:
        # 검사와 INSERT 사이에 다른 요청이 같은 값을 넣을 수 있으므로
        # ON CONFLICT DO NOTHING 결과까지 확인한다
        for _ in range(self.settings.CODE_MAX_ATTEMPTS):
            value = self.ensure_unique(namespace)
            if self.code_repo.insert_if_absent(value, namespace, **fields):
                code = self.code_repo.get_by_value(value)
                logger.info(f"Issued {namespace.value} code {value}")
                return code
        raise CodeGenerationExhaustedError(details={"namespace": namespace.value})

    def issue_registration_code(self, event_id: str, created_by: Optional[int] = None) -> CodeSchema:
        return self._issue(CodeNamespace.REGISTRATION, event_id=event_id, created_by=created_by)

    def issue_purchase_code(self, catalog_item_id: str, created_by: Optional[int] = None) -> CodeSchema:
        return self._issue(
            CodeNamespace.PURCHASE, catalog_item_id=catalog_item_id, created_by=created_by
        )

    def issue_prize_code(
        self,
        coins_amount: Optional[int] = None,
        created_by: Optional[int] = None,
        event_id: Optional[str] = None,
    ) -> CodeSchema:
        return self._issue(
            CodeNamespace.PRIZE,
            event_id=event_id,
            coins_amount=coins_amount if coins_amount is not None else self.settings.BINGO_REWARD,
            created_by=created_by,
        )

    def issue_ticket(
        self, telegram_id: int, catalog_item_id: str, source_code: Optional[str] = None
    ) -> TicketSchema:
        """구매 1건에 대한 티켓 발급"""
        for _ in range(self.settings.CODE_MAX_ATTEMPTS):
            value = self.ensure_unique(TICKET)
            if self.ticket_repo.insert_if_absent(value, telegram_id, catalog_item_id, source_code):
                return self.ticket_repo.get_by_code(value)
        raise CodeGenerationExhaustedError(details={"namespace": TICKET})

    # ------------------------------------------------------------------
    # 정규화 / 분류
    # ------------------------------------------------------------------

    def parse(self, raw: Optional[str]) -> ParsedCode:
        """입력에서 코드를 추출. 형식이 맞지 않으면 InvalidCodeFormatError."""
        parsed = normalize_code(raw)
        if parsed is None:
            raise InvalidCodeFormatError(details={"input": (raw or "")[:64]})
        return parsed

    def is_registration_test_code(self, parsed: ParsedCode) -> bool:
        return (
            self.settings.TEST_CODES_ENABLED
            and parsed.namespace_hint is None
            and parsed.value == self.settings.REGISTRATION_TEST_CODE
        )

    def is_bingo_test_code(self, parsed: ParsedCode) -> bool:
        return (
            self.settings.TEST_CODES_ENABLED
            and parsed.namespace_hint is None
            and parsed.value == self.settings.BINGO_TEST_CODE
        )

    def classify(self, parsed: ParsedCode) -> Optional[ClassifiedCode]:
        """
        정규화된 코드를 네임스페이스로 분류

        테스트 코드는 저장소 조회 없이 분류된다. codes 에서 찾지 못하면
        tickets 를 확인하고, 둘 다 없으면 None.
        """
        if self.is_registration_test_code(parsed):
            return ClassifiedCode(value=parsed.value, kind=CodeNamespace.REGISTRATION.value)
        if self.is_bingo_test_code(parsed):
            return ClassifiedCode(value=parsed.value, kind=CodeNamespace.PRIZE.value)

        code = self.code_repo.find_first(parsed.lookup_candidates(), parsed.namespace_hint)
        if code is not None:
            return ClassifiedCode(value=code.value, kind=code.namespace.value, code=code)

        if parsed.namespace_hint is None:
            ticket = self.ticket_repo.get_by_code(parsed.value)
            if ticket is not None:
                return ClassifiedCode(value=ticket.code, kind=TICKET, ticket=ticket)
        return None
