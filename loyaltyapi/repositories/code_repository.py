from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from loyaltyapi.models.code import Code, CodeNamespace
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.codes import CodeSchema


class CodeRepository(BaseRepository[Code, CodeSchema]):
    """단축 코드 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(Code, CodeSchema, db)

    def get_by_value(
        self, value: str, namespace: Optional[CodeNamespace] = None
    ) -> Optional[CodeSchema]:
        """코드 값으로 조회 (네임스페이스를 알면 범위 제한)"""
        query = self.db.query(self.model_class).filter(self.model_class.value == value)
        if namespace is not None:
            query = query.filter(self.model_class.namespace == namespace)
        return self._to_schema(query.first())

    def find_first(
        self, values: Iterable[str], namespace: Optional[CodeNamespace] = None
    ) -> Optional[CodeSchema]:
        """후보 값 중 처음으로 존재하는 코드"""
        for value in values:
            code = self.get_by_value(value, namespace)
            if code is not None:
                return code
        return None

    def value_exists(self, value: str) -> bool:
        return (
            self.db.query(self.model_class.id)
            .filter(self.model_class.value == value)
            .first()
            is not None
        )

    def insert_if_absent(self, value: str, namespace: CodeNamespace, **fields) -> bool:
        return self.insert_ignore(
            ["value"], value=value, namespace=namespace, **fields
        )

    def mark_used(self, code_id: int, used_by: int, used_at: datetime) -> bool:
        """
        미사용 코드를 사용 처리 (compare-and-swap)

        WHERE used_at IS NULL 조건이 유일한 동시성 가드다.
        동시에 두 요청이 들어와도 하나만 1행을 갱신한다.
        """
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == code_id,
                self.model_class.used_at.is_(None),
            )
            .update(
                {
                    self.model_class.used_at: used_at,
                    self.model_class.used_by: used_by,
                }
            )
        )
        return updated_count > 0

    def close(self, code_id: int, closed_at: datetime) -> bool:
        """발급자가 코드를 닫음 (used_by 없이 used_at 만 기록)"""
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == code_id,
                self.model_class.used_at.is_(None),
            )
            .update({self.model_class.used_at: closed_at})
        )
        return updated_count > 0

    def get_registration_code(self, event_id: str) -> Optional[CodeSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.event_id == event_id,
                self.model_class.namespace == CodeNamespace.REGISTRATION,
            )
            .order_by(self.model_class.id.desc())
            .first()
        )
        return self._to_schema(model_instance)

    def registration_codes_for_events(self, event_ids: List[str]) -> Dict[str, str]:
        if not event_ids:
            return {}
        rows = (
            self.db.query(self.model_class.event_id, self.model_class.value)
            .filter(
                self.model_class.event_id.in_(event_ids),
                self.model_class.namespace == CodeNamespace.REGISTRATION,
            )
            .all()
        )
        return {event_id: value for event_id, value in rows}
