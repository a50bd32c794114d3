import pytest

from jobsieve import store
from jobsieve.models import JudgeScore, RawJob


def _raw(source_id="1", **overrides):
    fields = dict(
        source_id=source_id,
        title=f"Senior PM {source_id}",
        url=f"https://example.com/jobs/{source_id}",
        company="Acme Labs",
        location="Remote",
        category="product",
        tags=["defi"],
        raw_data={"id": source_id},
    )
    fields.update(overrides)
    return RawJob(**fields)


def _score(overall, model="gpt-4o-mini"):
    return JudgeScore(
        overall_score=overall,
        relevance_score=overall,
        experience_match=overall,
        domain_match=overall,
        seniority_fit=overall,
        reasoning="fits",
        model_used=model,
    )


def test_upsert_is_idempotent_per_source_and_source_id():
    first = store.upsert_job("jobstash", _raw("abc"))
    second = store.upsert_job("jobstash", _raw("abc", title="Lead PM", salary_min=150000))

    assert first.is_new is True
    assert second.is_new is False
    assert second.id == first.id
    assert store.count_jobs() == 1

    job = store.get_job_by_id(first.id)
    assert job["title"] == "Lead PM"
    assert job["salary_min"] == 150000
    assert job["tags"] == ["defi"]
    assert job["raw_data"] == {"id": "abc"}


def test_same_source_id_in_different_sources_are_distinct_jobs():
    store.upsert_job("jobstash", _raw("1"))
    store.upsert_job("web3career", _raw("1"))
    assert store.count_jobs() == 2
    assert store.count_jobs("web3career") == 1


def test_unscored_jobs_respect_limit_and_exclude_scored():
    ids = [store.upsert_job("safary", _raw(str(i))).id for i in range(5)]
    store.upsert_score(ids[0], _score(80))

    unscored = store.get_unscored_jobs(limit=3)
    assert len(unscored) == 3
    assert ids[0] not in {j.id for j in unscored}
    assert len(store.get_unscored_jobs(limit=50)) == 4


def test_rescoring_replaces_the_previous_score():
    job_id = store.upsert_job("safary", _raw("x")).id
    store.upsert_score(job_id, _score(40))
    store.upsert_score(job_id, _score(75, model="other-model"))

    job = store.get_job_by_id(job_id)
    assert job["overall_score"] == 75
    assert store.get_job_stats()["scored"] == 1


def test_scrape_run_lifecycle():
    run_id = store.start_scrape_run("jobstash")
    [run] = store.get_scrape_runs()
    assert run["id"] == run_id
    assert run["status"] == "running"
    assert run["completed_at"] is None

    store.complete_scrape_run(run_id, "completed", 12, 5)
    [run] = store.get_scrape_runs()
    assert run["status"] == "completed"
    assert (run["jobs_found"], run["jobs_new"]) == (12, 5)
    assert run["completed_at"] is not None


def test_failed_run_keeps_error_message():
    run_id = store.start_scrape_run("safary")
    store.complete_scrape_run(run_id, "failed", 0, 0, error="Timeout 30000ms exceeded")
    [run] = store.get_scrape_runs()
    assert run["status"] == "failed"
    assert run["error"] == "Timeout 30000ms exceeded"


def test_complete_scrape_run_rejects_bad_input():
    run_id = store.start_scrape_run("safary")
    with pytest.raises(ValueError):
        store.complete_scrape_run(run_id, "running", 0, 0)
    with pytest.raises(LookupError):
        store.complete_scrape_run(run_id + 100, "completed", 0, 0)


def test_get_jobs_filters_and_default_ordering():
    low = store.upsert_job("jobstash", _raw("low", company="Low Co")).id
    high = store.upsert_job("jobstash", _raw("high", company="High Co")).id
    unscored = store.upsert_job("web3career", _raw("none", category="growth")).id
    store.upsert_score(low, _score(30))
    store.upsert_score(high, _score(90))

    jobs, total = store.get_jobs()
    assert total == 3
    assert [j["id"] for j in jobs] == [high, low, unscored]

    jobs, total = store.get_jobs(store.JobFilters(min_score=50))
    assert total == 1 and jobs[0]["id"] == high

    jobs, total = store.get_jobs(store.JobFilters(source="web3career"))
    assert [j["id"] for j in jobs] == [unscored]

    jobs, total = store.get_jobs(store.JobFilters(search="high co"))
    assert [j["id"] for j in jobs] == [high]

    jobs, total = store.get_jobs(store.JobFilters(limit=2, page=2))
    assert total == 3
    assert [j["id"] for j in jobs] == [unscored]


def test_action_filters():
    applied = store.upsert_job("jobstash", _raw("a")).id
    hidden = store.upsert_job("jobstash", _raw("b")).id
    untouched = store.upsert_job("jobstash", _raw("c")).id
    store.add_action(applied, "applied", notes="sent CV")
    store.add_action(hidden, "hidden")

    jobs, _ = store.get_jobs(store.JobFilters(action="applied"))
    assert [j["id"] for j in jobs] == [applied]
    assert jobs[0]["actions"] == ["applied"]

    jobs, _ = store.get_jobs(store.JobFilters(exclude_action="hidden"))
    assert {j["id"] for j in jobs} == {applied, untouched}

    jobs, _ = store.get_jobs(store.JobFilters(no_action=True))
    assert [j["id"] for j in jobs] == [untouched]

    assert store.remove_action(hidden) == 1
    jobs, _ = store.get_jobs(store.JobFilters(no_action=True))
    assert {j["id"] for j in jobs} == {hidden, untouched}


def test_re_adding_an_action_replaces_its_notes():
    job_id = store.upsert_job("jobstash", _raw("a")).id
    store.add_action(job_id, "saved", notes="first")
    store.add_action(job_id, "saved", notes="second")

    job = store.get_job_by_id(job_id)
    assert [(a["action"], a["notes"]) for a in job["actions"]] == [("saved", "second")]


def test_job_stats_and_filter_options():
    a = store.upsert_job("jobstash", _raw("a", category="product", location="Remote")).id
    b = store.upsert_job("jobstash", _raw("b", category="bizdev", location="New York")).id
    store.upsert_job("safary", _raw("c", category=None, location=None))
    store.upsert_score(a, _score(60))
    store.upsert_score(b, _score(81))
    run_id = store.start_scrape_run("jobstash")
    store.complete_scrape_run(run_id, "completed", 2, 2)

    stats = store.get_job_stats()
    assert stats["total"] == 3
    assert stats["scored"] == 2
    assert stats["avg_score"] == 71
    assert stats["by_source"] == {"jobstash": 2, "safary": 1}
    assert stats["by_category"] == {"product": 1, "bizdev": 1}
    assert stats["last_scrape"] is not None

    options = store.get_filter_options()
    assert options == {"categories": ["bizdev", "product"], "locations": ["New York", "Remote"]}


def test_get_job_by_id_unknown():
    assert store.get_job_by_id("missing") is None
