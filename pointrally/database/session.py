from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from pointrally.database.connection import SessionLocal


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
def get_db_context():
    """컨텍스트 매니저를 사용한 데이터베이스 세션 관리"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transactional(db: Session, commit: bool = True) -> Iterator[Session]:
    """여러 단계의 변경을 하나의 트랜잭션으로 묶는다

    commit=False 이면 상위 호출자가 같은 트랜잭션 안에서 커밋/롤백을 책임진다.
    """
    if not commit:
        yield db
        return

    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
