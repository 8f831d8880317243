import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect

from loyaltyapi.config import settings
from loyaltyapi.database.connection import engine
from loyaltyapi.models import Base


def init_db():
    """데이터베이스 초기화 (없는 테이블만 생성)"""
    try:
        Base.metadata.create_all(bind=engine)
        tables = sorted(inspect(engine).get_table_names())
        print(f"Database initialized: {settings.DATABASE_URL.split('@')[-1]}")
        print(f"Tables: {', '.join(tables)}")

    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
