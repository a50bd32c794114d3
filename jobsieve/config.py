"""Load environment and candidate profile configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobsieve.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
DATA_DIR: Path = ROOT_DIR / "data"

DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'jobs.db'}"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"

# Shared by the HTTP and browser adapters.
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

DEFAULT_CANDIDATE_PROFILE = """\
# Candidate Profile

## Target Roles
- Product Management at mid-senior level (Senior PM, PM, Technical PM)
- Business Development at mid-senior level (BD Lead, Partnerships Manager)

## Experience
- 8+ years in blockchain / Web3 companies
- Technical Product Manager and Lead PM (individual contributor lead)
- Has not held Head-of, VP, Director or people-manager titles

## Seniority Calibration
- Appropriate: Senior PM, Senior BD, TPM, Partnerships Manager
- Stretch: Staff PM, Director at a small startup
- Not qualified: Head of, VP, C-suite, General Manager

## Domain Expertise
- AI x Web3, DeFi, NFTs
- SDKs, developer tools and developer relations

## Preferred Work Style
- Remote-friendly, startup or growth-stage companies
"""


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def database_url() -> str:
    return get_env("DATABASE_URL") or DEFAULT_DATABASE_URL


def openai_model() -> str:
    return get_env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL


def run_headless() -> bool:
    return get_env("RUN_HEADLESS", "true").lower() in ("1", "true", "yes")


def ensure_dirs() -> None:
    for d in (CONFIG_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)


def load_profile(path: Path | None = None) -> dict[str, Any]:
    """Read the candidate profile YAML; empty dict when the file is absent."""
    path = path or PROFILE_PATH
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def render_profile(profile: dict[str, Any]) -> str:
    """Turn a profile mapping into the markdown text the judge reads.

    A top-level ``text`` key is used verbatim. Otherwise ``name`` becomes the
    heading and every other key becomes a section: lists render as bullets,
    scalars as a single line.
    """
    if profile.get("text"):
        return str(profile["text"]).strip()

    name = profile.get("name", "")
    lines = [f"# Candidate Profile: {name}" if name else "# Candidate Profile"]
    for key, value in profile.items():
        if key == "name" or value in (None, "", []):
            continue
        lines.append("")
        lines.append(f"## {str(key).replace('_', ' ').title()}")
        if isinstance(value, (list, tuple)):
            lines.extend(f"- {item}" for item in value)
        else:
            lines.append(str(value).strip())
    return "\n".join(lines)


def candidate_profile_text() -> str:
    profile = load_profile()
    if not profile:
        return DEFAULT_CANDIDATE_PROFILE.strip()
    return render_profile(profile)
