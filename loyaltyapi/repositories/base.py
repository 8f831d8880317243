from abc import ABC
from typing import TypeVar, Generic, Optional, List, Any, Sequence, Type

from pydantic import BaseModel
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """
    모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장

    리포지토리는 커밋하지 않는다. flush 까지만 수행하고, 트랜잭션 경계는
    서비스 계층의 unit_of_work 가 정한다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None
        # Pydantic v2의 model_validate를 사용하여 from_attributes 활용
        return self.schema_class.model_validate(model_instance)

    def _to_schemas(self, model_instances: Sequence[Any]) -> List[SchemaType]:
        return [
            schema
            for schema in (self._to_schema(instance) for instance in model_instances)
            if schema is not None
        ]

    def get_by_id(self, id: Any) -> Optional[SchemaType]:
        """기본키로 조회 - Pydantic 스키마 반환"""
        return self._to_schema(self.db.get(self.model_class, id))

    def get_by_field(self, field_name: str, value: Any) -> Optional[SchemaType]:
        """특정 필드로 조회 - Pydantic 스키마 반환"""
        model_instance = (
            self.db.query(self.model_class)
            .filter(getattr(self.model_class, field_name) == value)
            .first()
        )
        return self._to_schema(model_instance)

    def create(self, **kwargs) -> Optional[SchemaType]:
        """새 레코드 생성 - flush 후 Pydantic 스키마 반환"""
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        self.db.flush()
        self.db.refresh(instance)
        return self._to_schema(instance)

    def insert_ignore(self, index_elements: List[str], **values) -> bool:
        """
        유니크 충돌 시 아무것도 하지 않는 INSERT

        Returns:
            bool: 실제로 삽입되었으면 True, 이미 존재해 무시되었으면 False
        """
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(self.model_class)
        elif dialect == "sqlite":
            stmt = sqlite_insert(self.model_class)
        else:
            raise NotImplementedError(f"insert_ignore is not supported for {dialect}")

        stmt = stmt.values(**values).on_conflict_do_nothing(
            index_elements=index_elements
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
