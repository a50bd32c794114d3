"""SQLAlchemy engine, session factory and table definitions."""
from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from jobsieve.config import DATA_DIR, database_url
from jobsieve.log import get_logger

log = get_logger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        UniqueConstraint("source", "source_id", name="uq_jobs_source_source_id"),
        Index("idx_jobs_source", "source"),
        Index("idx_jobs_category", "category"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    source = Column(String, nullable=False)
    source_id = Column(String, nullable=False)
    url = Column(Text)
    title = Column(Text, nullable=False)
    company = Column(Text)
    description = Column(Text)
    location = Column(Text)
    location_type = Column(String)
    seniority = Column(String)
    category = Column(String)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    tags = Column(JSON, nullable=False, default=list)
    chains = Column(JSON, nullable=False, default=list)
    posted_at = Column(String)
    scraped_at = Column(DateTime, nullable=False, default=utcnow)
    raw_data = Column(JSON, nullable=False, default=dict)

    score = relationship(
        "JobScore", back_populates="job", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    actions = relationship(
        "JobAction", back_populates="job",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Job {self.source}:{self.source_id} {self.title!r}>"


class JobScore(Base):
    __tablename__ = "job_scores"
    __table_args__ = (Index("idx_job_scores_overall", "overall_score"),)

    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    overall_score = Column(Integer, nullable=False)
    relevance_score = Column(Integer, nullable=False)
    experience_match = Column(Integer, nullable=False)
    domain_match = Column(Integer, nullable=False)
    seniority_fit = Column(Integer, nullable=False)
    reasoning = Column(Text)
    scored_at = Column(DateTime, nullable=False, default=utcnow)
    model_used = Column(String, nullable=False)

    job = relationship("Job", back_populates="score")


class JobAction(Base):
    """User tag on a job (applied, saved, hidden, ...)."""
    __tablename__ = "job_actions"
    __table_args__ = (
        UniqueConstraint("job_id", "action", name="uq_job_actions_job_action"),
        Index("idx_job_actions_job_id", "job_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    action = Column(String, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    job = relationship("Job", back_populates="actions")


class ScrapeRun(Base):
    __tablename__ = "scrape_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String, nullable=False)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime)
    status = Column(String, nullable=False, default="running")  # running, completed, failed
    jobs_found = Column(Integer, default=0)
    jobs_new = Column(Integer, default=0)
    error = Column(Text)


@event.listens_for(Engine, "connect")
def _sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # Cascades on job_scores / job_actions rely on this.
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database.
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args={"check_same_thread": False})


engine: Engine | None = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)


def configure_engine(url: str | None = None) -> Engine:
    """(Re)bind the session factory to a database and create missing tables."""
    global engine
    if engine is not None:
        engine.dispose()
    engine = _make_engine(url or database_url())
    SessionLocal.configure(bind=engine)
    Base.metadata.create_all(engine)
    log.debug("Database ready: %s", engine.url.render_as_string(hide_password=True))
    return engine


def init_db() -> Engine:
    if engine is None:
        return configure_engine()
    return engine


@contextmanager
def session_scope() -> Iterator[Session]:
    """Transactional scope: commit on success, roll back on error."""
    init_db()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
