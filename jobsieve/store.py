"""Persistence operations over the jobs database.

Write side (used by the runner and scorer): idempotent job upsert keyed on
``(source, source_id)``, score replace-on-conflict, scrape run lifecycle.
Read side: filtered/sorted/paginated job listing and summary statistics.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, exists, func, or_, select

from jobsieve.database import Job, JobAction, JobScore, ScrapeRun, session_scope, utcnow
from jobsieve.log import get_logger
from jobsieve.models import JudgeScore, RawJob, UpsertResult

log = get_logger(__name__)

RUN_STATUSES = ("running", "completed", "failed")
_MUTABLE_FIELDS = (
    "url", "title", "company", "description", "location", "location_type",
    "seniority", "category", "salary_min", "salary_max", "tags", "chains",
    "posted_at", "raw_data",
)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

def upsert_job(source: str, raw: RawJob) -> UpsertResult:
    """Insert a new job or overwrite the existing row for the same listing."""
    values = {name: getattr(raw, name) for name in _MUTABLE_FIELDS}
    values["tags"] = list(raw.tags or [])
    values["chains"] = list(raw.chains or [])
    values["raw_data"] = dict(raw.raw_data or {})

    with session_scope() as session:
        existing = session.execute(
            select(Job).where(Job.source == source, Job.source_id == raw.source_id)
        ).scalar_one_or_none()

        if existing is not None:
            for name, value in values.items():
                setattr(existing, name, value)
            existing.scraped_at = utcnow()
            return UpsertResult(id=existing.id, is_new=False)

        job = Job(source=source, source_id=raw.source_id, scraped_at=utcnow(), **values)
        session.add(job)
        session.flush()
        return UpsertResult(id=job.id, is_new=True)


def get_unscored_jobs(limit: int = 50) -> list[Job]:
    with session_scope() as session:
        stmt = (
            select(Job)
            .outerjoin(JobScore, JobScore.job_id == Job.id)
            .where(JobScore.job_id.is_(None))
            .order_by(Job.scraped_at.desc())
            .limit(limit)
        )
        return list(session.execute(stmt).scalars())


def count_jobs(source: str | None = None) -> int:
    with session_scope() as session:
        stmt = select(func.count(Job.id))
        if source:
            stmt = stmt.where(Job.source == source)
        return session.execute(stmt).scalar_one()


def upsert_score(job_id: str, score: JudgeScore) -> None:
    with session_scope() as session:
        session.merge(
            JobScore(
                job_id=job_id,
                overall_score=score.overall_score,
                relevance_score=score.relevance_score,
                experience_match=score.experience_match,
                domain_match=score.domain_match,
                seniority_fit=score.seniority_fit,
                reasoning=score.reasoning,
                model_used=score.model_used,
                scored_at=utcnow(),
            )
        )


# ---------------------------------------------------------------------------
# Scrape runs
# ---------------------------------------------------------------------------

def start_scrape_run(source: str) -> int:
    with session_scope() as session:
        run = ScrapeRun(source=source, started_at=utcnow(), status="running")
        session.add(run)
        session.flush()
        return run.id


def complete_scrape_run(
    run_id: int,
    status: str,
    jobs_found: int,
    jobs_new: int,
    error: str | None = None,
) -> None:
    if status not in RUN_STATUSES[1:]:
        raise ValueError(f"Cannot complete a run with status {status!r}")
    with session_scope() as session:
        run = session.get(ScrapeRun, run_id)
        if run is None:
            raise LookupError(f"No scrape run with id {run_id}")
        run.completed_at = utcnow()
        run.status = status
        run.jobs_found = jobs_found
        run.jobs_new = jobs_new
        run.error = error


def get_scrape_runs(limit: int = 20) -> list[dict[str, Any]]:
    with session_scope() as session:
        runs = session.execute(
            select(ScrapeRun).order_by(ScrapeRun.started_at.desc(), ScrapeRun.id.desc()).limit(limit)
        ).scalars()
        return [
            {
                "id": r.id,
                "source": r.source,
                "started_at": _iso(r.started_at),
                "completed_at": _iso(r.completed_at),
                "status": r.status,
                "jobs_found": r.jobs_found,
                "jobs_new": r.jobs_new,
                "error": r.error,
            }
            for r in runs
        ]


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def add_action(job_id: str, action: str, notes: str | None = None) -> None:
    """Tag a job; re-adding the same action replaces its notes and timestamp."""
    with session_scope() as session:
        existing = session.execute(
            select(JobAction).where(JobAction.job_id == job_id, JobAction.action == action)
        ).scalar_one_or_none()
        if existing is not None:
            existing.notes = notes
            existing.created_at = utcnow()
        else:
            session.add(JobAction(job_id=job_id, action=action, notes=notes, created_at=utcnow()))


def remove_action(job_id: str, action: str | None = None) -> int:
    with session_scope() as session:
        stmt = select(JobAction).where(JobAction.job_id == job_id)
        if action:
            stmt = stmt.where(JobAction.action == action)
        rows = list(session.execute(stmt).scalars())
        for row in rows:
            session.delete(row)
        return len(rows)


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

@dataclass
class JobFilters:
    source: str | None = None
    min_score: int | None = None
    category: str | None = None
    location: str | None = None
    seniority: str | None = None
    search: str | None = None
    action: str | None = None
    exclude_action: str | None = None
    no_action: bool = False
    sort: str | None = None  # score | date | company
    page: int = 1
    limit: int = 50


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _job_dict(job: Job, score: JobScore | None) -> dict[str, Any]:
    return {
        "id": job.id,
        "source": job.source,
        "source_id": job.source_id,
        "url": job.url,
        "title": job.title,
        "company": job.company,
        "description": job.description,
        "location": job.location,
        "location_type": job.location_type,
        "seniority": job.seniority,
        "category": job.category,
        "salary_min": job.salary_min,
        "salary_max": job.salary_max,
        "tags": list(job.tags or []),
        "chains": list(job.chains or []),
        "posted_at": job.posted_at,
        "scraped_at": _iso(job.scraped_at),
        "raw_data": dict(job.raw_data or {}),
        "overall_score": score.overall_score if score else None,
        "relevance_score": score.relevance_score if score else None,
        "experience_match": score.experience_match if score else None,
        "domain_match": score.domain_match if score else None,
        "seniority_fit": score.seniority_fit if score else None,
        "reasoning": score.reasoning if score else None,
    }


def _conditions(filters: JobFilters) -> list:
    conds = []
    if filters.source:
        conds.append(Job.source == filters.source)
    if filters.min_score is not None:
        conds.append(JobScore.overall_score >= filters.min_score)
    if filters.category:
        conds.append(Job.category == filters.category)
    if filters.location:
        conds.append(Job.location == filters.location)
    if filters.seniority:
        conds.append(Job.seniority == filters.seniority)
    if filters.search:
        term = f"%{filters.search}%"
        conds.append(or_(Job.title.ilike(term), Job.company.ilike(term), Job.description.ilike(term)))
    if filters.action:
        conds.append(exists().where(and_(JobAction.job_id == Job.id, JobAction.action == filters.action)))
    if filters.exclude_action:
        conds.append(~exists().where(and_(JobAction.job_id == Job.id, JobAction.action == filters.exclude_action)))
    if filters.no_action:
        conds.append(~exists().where(JobAction.job_id == Job.id))
    return conds


def _order_by(sort: str | None) -> list:
    if sort == "date":
        return [Job.posted_at.desc().nulls_last()]
    if sort == "score":
        return [JobScore.overall_score.desc().nulls_last()]
    if sort == "company":
        return [Job.company.asc().nulls_last()]
    return [JobScore.overall_score.desc().nulls_last(), Job.scraped_at.desc()]


def get_jobs(filters: JobFilters | None = None) -> tuple[list[dict[str, Any]], int]:
    """Return one page of jobs (with scores and action names) and the total match count."""
    filters = filters or JobFilters()
    page = max(filters.page, 1)
    limit = max(filters.limit, 1)
    conds = _conditions(filters)

    with session_scope() as session:
        base = select(Job, JobScore).outerjoin(JobScore, JobScore.job_id == Job.id)
        if conds:
            base = base.where(*conds)

        total = session.execute(select(func.count()).select_from(base.subquery())).scalar_one()
        rows = session.execute(
            base.order_by(*_order_by(filters.sort)).limit(limit).offset((page - 1) * limit)
        ).all()

        job_ids = [job.id for job, _ in rows]
        actions: dict[str, list[str]] = {}
        if job_ids:
            for job_id, action in session.execute(
                select(JobAction.job_id, JobAction.action)
                .where(JobAction.job_id.in_(job_ids))
                .order_by(JobAction.created_at)
            ):
                actions.setdefault(job_id, []).append(action)

        results = []
        for job, score in rows:
            item = _job_dict(job, score)
            item["actions"] = actions.get(job.id, [])
            results.append(item)
        return results, total


def get_job_by_id(job_id: str) -> dict[str, Any] | None:
    with session_scope() as session:
        row = session.execute(
            select(Job, JobScore).outerjoin(JobScore, JobScore.job_id == Job.id).where(Job.id == job_id)
        ).first()
        if row is None:
            return None
        job, score = row
        item = _job_dict(job, score)
        item["actions"] = [
            {"action": a.action, "notes": a.notes, "created_at": _iso(a.created_at)}
            for a in session.execute(
                select(JobAction).where(JobAction.job_id == job_id).order_by(JobAction.created_at)
            ).scalars()
        ]
        return item


def get_filter_options() -> dict[str, list[str]]:
    with session_scope() as session:
        categories = session.execute(
            select(Job.category).where(Job.category.is_not(None)).distinct().order_by(Job.category)
        ).scalars()
        locations = session.execute(
            select(Job.location).where(Job.location.is_not(None)).distinct().order_by(Job.location)
        ).scalars()
        return {"categories": list(categories), "locations": list(locations)}


def get_job_stats() -> dict[str, Any]:
    with session_scope() as session:
        total = session.execute(select(func.count(Job.id))).scalar_one()
        scored = session.execute(select(func.count(JobScore.job_id))).scalar_one()
        avg = session.execute(select(func.avg(JobScore.overall_score))).scalar_one()
        by_source = dict(
            session.execute(select(Job.source, func.count(Job.id)).group_by(Job.source)).all()
        )
        by_category = dict(
            session.execute(
                select(Job.category, func.count(Job.id))
                .where(Job.category.is_not(None))
                .group_by(Job.category)
            ).all()
        )
        last = session.execute(
            select(func.max(ScrapeRun.completed_at))
        ).scalar_one()
        return {
            "total": total,
            "scored": scored,
            "avg_score": int(math.floor((avg or 0) + 0.5)),
            "by_source": by_source,
            "by_category": by_category,
            "last_scrape": _iso(last),
        }
