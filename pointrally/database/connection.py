from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pointrally.config import settings

SQLITE_BUSY_TIMEOUT_SECONDS = 30


def use_immediate_transactions(target: Engine) -> None:
    """SQLite 트랜잭션을 BEGIN IMMEDIATE 로 시작

    SQLite 에는 FOR UPDATE 가 없으므로 트랜잭션 시작 시점에 쓰기 잠금을 잡는다.
    """

    @event.listens_for(target, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


_url = make_url(settings.database_url)

if _url.get_backend_name() == "sqlite" and _url.database in (None, "", ":memory:"):
    # 인메모리 SQLite(테스트): 단일 커넥션을 스레드 간 공유
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=settings.DEBUG,
    )
elif _url.get_backend_name() == "sqlite":
    # 파일 SQLite(로컬 개발)
    engine = create_engine(
        settings.database_url,
        connect_args={
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
        },
        echo=settings.DEBUG,
    )
    use_immediate_transactions(engine)
else:
    engine = create_engine(
        settings.database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        echo=settings.DEBUG,  # 디버그 모드에서 SQL 로깅
    )

# Use expire_on_commit=False to avoid DetachedInstanceError when accessing
# attributes after commit within the same request scope (common FastAPI pattern).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
