"""Score stored jobs against the candidate profile with an LLM judge."""
from __future__ import annotations

import json
import math
import re
from typing import Any

from jobsieve import store
from jobsieve.config import candidate_profile_text, get_env, openai_model
from jobsieve.errors import JudgeResponseError, MissingCredentialError
from jobsieve.log import get_logger
from jobsieve.models import JudgeScore
from jobsieve.retry import retry

log = get_logger(__name__)

MAX_ATTEMPTS = 3
BASE_DELAY_S = 1.0
TEMPERATURE = 0.3
MAX_TOKENS = 300
SCORE_FIELDS = (
    "overall_score",
    "relevance_score",
    "experience_match",
    "domain_match",
    "seniority_fit",
)

SYSTEM_PROMPT = """You are a strict, realistic job-matching expert. You will be given a candidate's profile and a job listing. Score how well the job REALISTICALLY matches the candidate on 4 dimensions (each 0-100):

1. relevance_score (weight: 35%) - How well does this match the candidate's target roles?
2. experience_match (weight: 25%) - Does the candidate's actual work history meet what the job requires? Be honest about gaps.
3. domain_match (weight: 25%) - How much overlap with the candidate's domains of expertise?
4. seniority_fit (weight: 15%) - Is this the right level? Follow the seniority calibration in the profile. Score seniority_fit BELOW 30 for roles the profile marks as not qualified, 60-80 for senior individual contributor roles, 80-100 for mid-level roles.

Calculate overall_score as the weighted average: (relevance * 0.35) + (experience * 0.25) + (domain * 0.25) + (seniority * 0.15)

Be critical. A score of 70+ should mean the candidate could realistically get an interview. A score of 50-69 means a stretch. Below 50 means unlikely to be considered.

Respond ONLY with valid JSON in this exact format:
{
  "overall_score": <number>,
  "relevance_score": <number>,
  "experience_match": <number>,
  "domain_match": <number>,
  "seniority_fit": <number>,
  "reasoning": "<2-3 sentence explanation>"
}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _raw_data(job) -> dict[str, Any]:
    raw = job.raw_data
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    return raw if isinstance(raw, dict) else {}


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def build_job_description(job) -> str:
    """Flatten a stored job into the text block the judge scores."""
    raw = _raw_data(job)
    requirements = _string_list(raw.get("requirements"))
    responsibilities = _string_list(raw.get("responsibilities"))
    full_description = raw.get("description") if isinstance(raw.get("description"), str) else ""

    sections = [
        f"Title: {job.title}",
        f"Company: {job.company}" if job.company else None,
        f"Seniority: {job.seniority}" if job.seniority else None,
        f"Category: {job.category}" if job.category else None,
        f"Summary: {job.description}" if job.description else None,
        f"Full Description: {full_description}" if full_description else None,
        "Requirements:\n" + "\n".join(f"- {r}" for r in requirements) if requirements else None,
        "Responsibilities:\n" + "\n".join(f"- {r}" for r in responsibilities) if responsibilities else None,
        f"Tags: {json.dumps(list(job.tags or []))}",
        f"Chains: {json.dumps(list(job.chains or []))}",
    ]
    return "\n\n".join(s for s in sections if s)


def parse_judge_response(content: str | None) -> dict[str, Any]:
    """Validate the judge's JSON; raises JudgeResponseError so the call is retried."""
    text = _FENCE_RE.sub("", (content or "").strip())
    if not text:
        raise JudgeResponseError("Empty response from LLM")
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise JudgeResponseError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise JudgeResponseError("Response is not a JSON object")
    for name in SCORE_FIELDS:
        value = payload.get(name)
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
        ):
            raise JudgeResponseError(f"Invalid score format: {name}={value!r}")
    return payload


@retry(max_attempts=MAX_ATTEMPTS, base_delay=BASE_DELAY_S, jitter=False, retryable=(Exception,))
async def request_judgement(client, model: str, profile_text: str, job_description: str) -> dict[str, Any]:
    response = await client.chat.completions.create(
        model=model,
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"{profile_text}\n\n---\n\nJob Listing:\n{job_description}"},
        ],
    )
    content = response.choices[0].message.content if response.choices else None
    return parse_judge_response(content)


async def score_job(client, job, *, model: str, profile_text: str) -> JudgeScore:
    payload = await request_judgement(client, model, profile_text, build_job_description(job))
    score = JudgeScore(
        overall_score=_round_half_up(payload["overall_score"]),
        relevance_score=_round_half_up(payload["relevance_score"]),
        experience_match=_round_half_up(payload["experience_match"]),
        domain_match=_round_half_up(payload["domain_match"]),
        seniority_fit=_round_half_up(payload["seniority_fit"]),
        reasoning=str(payload.get("reasoning") or ""),
        model_used=model,
    )
    store.upsert_score(job.id, score)
    return score


def _make_client(api_key: str):
    from openai import AsyncOpenAI

    base_url = get_env("OPENAI_BASE_URL") or None
    return AsyncOpenAI(api_key=api_key, base_url=base_url)


async def score_unscored(limit: int = 50, *, client=None) -> int:
    """Score up to ``limit`` unscored jobs; returns how many were scored."""
    api_key = get_env("OPENAI_API_KEY")
    if not api_key:
        raise MissingCredentialError("OPENAI_API_KEY not set")

    client = client or _make_client(api_key)
    model = openai_model()
    profile_text = candidate_profile_text()
    jobs = store.get_unscored_jobs(limit)

    log.info("[scorer] Scoring %d unscored jobs with %s...", len(jobs), model)

    scored = 0
    for job in jobs:
        try:
            await score_job(client, job, model=model, profile_text=profile_text)
        except Exception as exc:
            log.error("[scorer] Failed to score job %r (%s): %s", job.title, job.id, exc)
            continue
        scored += 1
        if scored % 10 == 0:
            log.info("[scorer] Progress: %d/%d", scored, len(jobs))

    log.info("[scorer] Done. Scored %d/%d jobs.", scored, len(jobs))
    return scored
