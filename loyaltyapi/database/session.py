from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from loyaltyapi.database.connection import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    하나의 비즈니스 연산을 하나의 트랜잭션으로 묶는다.

    블록이 정상 종료되면 커밋하고, 어떤 예외든 발생하면 롤백 후 다시 던진다.
    코드 사용 처리와 잔액 변경이 함께 반영되거나 함께 취소되는 경계가 된다.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
