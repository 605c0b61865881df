"""
SQLAlchemy engine, session factory and the ``clients`` table.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from .logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class ClientRecord(Base):
    """
    One row per MAC address holding locally owned client metadata.

    Attributes:
        mac: Lower-case colon-separated MAC address (primary key).
        tags: JSON-encoded ordered list of tags.
        hidden: Whether the client is hidden from the default view.
        blocked: Locally asserted blocked intent.
        last_blocked_at: When the client was last blocked, if ever.
        name: Optional display name override.
    """
    __tablename__ = "clients"

    mac: Mapped[str] = mapped_column(String(32), primary_key=True)
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_blocked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self):
        return f"<ClientRecord(mac={self.mac}, hidden={self.hidden}, blocked={self.blocked})>"


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine for the metadata store and make sure the table exists.

    In-memory SQLite URLs share one connection so every session sees the same data.
    """
    kwargs = {}
    if database_url == "sqlite://" or database_url.startswith("sqlite") and ":memory:" in database_url:
        kwargs = {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    elif database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}

    engine = create_engine(database_url, **kwargs)
    Base.metadata.create_all(engine)
    logger.info(f"Metadata store initialized at {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)
