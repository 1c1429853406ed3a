import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()

# PostgreSQL에서는 JSONB, 그 외(SQLite 테스트 등)에서는 JSON
JSONType = JSON().with_variant(JSONB(), "postgresql")


def new_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin:
    """생성 시각만 필요한 (불변) 테이블용 믹스인"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True), default=utcnow, server_default=func.now()
        )


class TimestampMixin(CreatedAtMixin):
    """타임스탬프 필드를 위한 믹스인"""

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            default=utcnow,
            server_default=func.now(),
            onupdate=utcnow,
        )


class BaseModel(Base, TimestampMixin):
    """모든 모델의 베이스 클래스"""

    __abstract__ = True

    def dict(self):
        """모델을 딕셔너리로 변환"""
        return {
            column.name: getattr(self, column.name) for column in self.__table__.columns
        }
