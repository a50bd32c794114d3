"""Data models passed between adapters, the runner and the scorer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RawJob:
    """One listing as normalized by a source adapter, before persistence."""
    source_id: str
    title: str
    url: str | None = None
    company: str | None = None
    description: str | None = None
    location: str | None = None
    location_type: str | None = None
    seniority: str | None = None
    category: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    tags: list[str] = field(default_factory=list)
    chains: list[str] = field(default_factory=list)
    posted_at: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class SkipCounts:
    title: int = 0
    location: int = 0
    seniority: int = 0

    @property
    def total(self) -> int:
        return self.title + self.location + self.seniority


@dataclass
class ScrapeResult:
    jobs_found: int = 0
    jobs_new: int = 0
    skipped: SkipCounts = field(default_factory=SkipCounts)

    def as_dict(self) -> dict[str, Any]:
        return {
            "jobs_found": self.jobs_found,
            "jobs_new": self.jobs_new,
            "skipped": {
                "title": self.skipped.title,
                "location": self.skipped.location,
                "seniority": self.skipped.seniority,
            },
        }


@dataclass(frozen=True)
class UpsertResult:
    id: str
    is_new: bool


@dataclass
class JudgeScore:
    overall_score: int
    relevance_score: int
    experience_match: int
    domain_match: int
    seniority_fit: int
    reasoning: str
    model_used: str
