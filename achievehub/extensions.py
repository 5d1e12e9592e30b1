"""Database handle shared by the models, the request dependency and the seed scripts."""
from __future__ import annotations

from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.orm import backref, declarative_base, relationship, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Engine plus session factories, with the SQLAlchemy names the models use
    exposed as attributes (``db.Column``, ``db.relationship``...).

    Requests get their own ``SessionLocal()``; ``session`` is a thread-scoped
    session for scripts.
    """

    Model = Base
    Column = Column
    Integer = Integer
    String = String
    Text = Text
    Boolean = Boolean
    Date = Date
    DateTime = DateTime
    JSON = JSON
    ForeignKey = ForeignKey
    CheckConstraint = CheckConstraint
    Index = Index
    relationship = staticmethod(relationship)
    backref = staticmethod(backref)
    func = func
    select = staticmethod(select)

    def __init__(self, database_url: str):
        self.url = database_url
        self.engine = create_engine(database_url, future=True, **self.engine_options(database_url))
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False, future=True)
        self.session = scoped_session(self.SessionLocal)

    @staticmethod
    def engine_options(database_url: str) -> dict[str, Any]:
        if not database_url.startswith("sqlite"):
            return {}
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        # An in-memory database lives and dies with its connection, so keep exactly one
        if database_url in MEMORY_URLS:
            options["poolclass"] = StaticPool
        return options

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    def reset(self) -> None:
        """Drop and recreate every table."""
        self.drop_all()
        self.create_all()

    def remove_session(self) -> None:
        self.session.remove()


from achievehub.config import settings

db = Database(settings.SQLALCHEMY_DATABASE_URI)
