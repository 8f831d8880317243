"""
QR 송금 토큰 서비스

사용자가 금액/종류(add, subtract)를 담은 일회용 토큰을 만들고, 스태프가 QR 을 스캔해
토큰 소유자의 잔액을 바꾼다. 토큰은 transfer_tokens 테이블에 TTL 과 함께 저장되며
만료된 토큰은 발급 시점에 지연 삭제된다.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import (
    SelfTransferError,
    TokenExpiredError,
    TokenNotFoundError,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.repositories.transfer_token_repository import TransferTokenRepository
from loyaltyapi.schemas.transfer import (
    GenerateTokenResponse,
    ProcessTokenResponse,
    TransferQrData,
)
from loyaltyapi.services.ledger_service import LedgerService
from loyaltyapi.utils.timezone_utils import ensure_aware, utc_now

logger = logging.getLogger(__name__)


class TransferService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.token_repo = TransferTokenRepository(db)
        self.ledger = LedgerService(db, settings)

    def generate_token(self, telegram_id: int, amount: int, type: str) -> GenerateTokenResponse:
        now = utc_now()
        expires_at = now + timedelta(minutes=self.settings.TRANSFER_TOKEN_TTL_MINUTES)

        with unit_of_work(self.db):
            purged = self.token_repo.purge_expired(now)
            record = self.token_repo.save(
                token=secrets.token_hex(32),
                telegram_id=telegram_id,
                amount=amount,
                type=type,
                expires_at=expires_at,
            )

        if purged:
            logger.debug(f"Purged {purged} expired transfer tokens")
        logger.info(f"Transfer token issued for {telegram_id}: {type} {amount}")

        return GenerateTokenResponse(
            token=record.token,
            expires_at=expires_at,
            qr_data=TransferQrData(
                type=record.type,
                amount=record.amount,
                token=record.token,
                expires_at=expires_at,
            ),
        )

    def process_token(self, scanner_telegram_id: int, token: str) -> ProcessTokenResponse:
        """
        토큰 처리 (토큰당 1회)

        Raises:
            TokenNotFoundError: 없는 토큰 또는 이미 처리된 토큰
            TokenExpiredError: 만료된 토큰 (삭제 후 응답)
            SelfTransferError: 자기 토큰
            InsufficientBalanceError: subtract 인데 잔액 부족 (토큰은 남는다)
        """
        expired = False

        with unit_of_work(self.db):
            record = self.token_repo.get(token)
            if record is None:
                raise TokenNotFoundError()

            if ensure_aware(record.expires_at) < utc_now():
                # 삭제는 커밋하고 나서 410 을 돌려준다
                self.token_repo.consume(token)
                expired = True
            else:
                if record.telegram_id == scanner_telegram_id:
                    raise SelfTransferError()

                # DELETE 는 동시 요청 중 하나만 1행을 지운다
                if not self.token_repo.consume(token):
                    raise TokenNotFoundError()

                target = record.telegram_id
                old_balance = self.ledger.ledger_repo.get_balance(target) or 0
                ref_id = f"transfer:{token}"
                if record.type == "add":
                    new_balance = self.ledger.credit(target, record.amount, "transfer_add", ref_id)
                else:
                    new_balance = self.ledger.debit(target, record.amount, "transfer_subtract", ref_id)

        if expired:
            raise TokenExpiredError()

        logger.info(
            f"Transfer {record.type} {record.amount} for {target} processed by {scanner_telegram_id}"
        )
        return ProcessTokenResponse(
            message=(
                f"Added {record.amount} coins"
                if record.type == "add"
                else f"Subtracted {record.amount} coins"
            ),
            target_telegram_id=target,
            scanner_telegram_id=scanner_telegram_id,
            amount=record.amount,
            type=record.type,
            old_balance=old_balance,
            new_balance=new_balance,
        )
