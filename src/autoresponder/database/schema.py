from sqlalchemy import Column, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Setting(Base):
    """Key-value blob storage; rule list and enabled flag live here."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # JSON document
    updated_at = Column(String, nullable=True)  # ISO 8601 UTC


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(engine)
