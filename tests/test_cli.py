from jobsieve import cli, runner, store
from jobsieve.models import ScrapeResult


def test_stats_and_runs_succeed_on_empty_database():
    assert cli.main(["stats"]) == 0
    assert cli.main(["runs"]) == 0


def test_unknown_source_exits_with_error():
    assert cli.main(["scrape", "nope"]) == 1
    assert store.get_scrape_runs() == []


def test_scrape_all_is_the_default(monkeypatch):
    calls = []

    async def fake_run_all():
        calls.append("all")
        return {"jobstash": ScrapeResult(jobs_found=2, jobs_new=1)}

    monkeypatch.setattr(runner, "run_all", fake_run_all)
    assert cli.main(["scrape"]) == 0
    assert calls == ["all"]


def test_score_without_api_key_exits_with_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert cli.main(["score", "5"]) == 1


def test_unexpected_failure_exits_with_error(monkeypatch):
    async def broken(source):
        raise RuntimeError("disk full")

    monkeypatch.setattr(runner, "run_one", broken)
    assert cli.main(["scrape", "jobstash"]) == 1
