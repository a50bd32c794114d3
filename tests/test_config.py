from jobsieve import config


def test_load_profile_missing_file(tmp_path):
    assert config.load_profile(tmp_path / "nope.yaml") == {}


def test_load_profile_ignores_non_mapping(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert config.load_profile(path) == {}


def test_render_profile_sections(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text(
        "name: Sam Rivera\n"
        "target_roles:\n  - Senior PM\n  - BD Lead\n"
        "preferred_work_style: Remote-first\n"
        "notes: ''\n",
        encoding="utf-8",
    )

    text = config.render_profile(config.load_profile(path))

    assert text == (
        "# Candidate Profile: Sam Rivera\n"
        "\n## Target Roles\n- Senior PM\n- BD Lead\n"
        "\n## Preferred Work Style\nRemote-first"
    )


def test_render_profile_uses_text_verbatim():
    assert config.render_profile({"name": "x", "text": "  # Mine\nBody\n"}) == "# Mine\nBody"


def test_candidate_profile_falls_back_to_default(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "PROFILE_PATH", tmp_path / "missing.yaml")
    assert config.candidate_profile_text() == config.DEFAULT_CANDIDATE_PROFILE.strip()


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "  custom-model ")
    monkeypatch.setenv("RUN_HEADLESS", "false")
    monkeypatch.delenv("DATABASE_URL", raising=False)

    assert config.openai_model() == "custom-model"
    assert config.run_headless() is False
    assert config.database_url() == config.DEFAULT_DATABASE_URL
