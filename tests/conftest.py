"""
Shared fixtures for the resume builder tests.

Per-user directories are redirected to a temp folder before the application
package is imported, and canned suggestions run without simulated latency.
"""

import os
import tempfile

_TMP_HOME = tempfile.mkdtemp(prefix="resume-builder-tests-")
os.environ.setdefault("RESUME_BUILDER_DATA_DIR", os.path.join(_TMP_HOME, "data"))
os.environ.setdefault("RESUME_BUILDER_CONFIG_DIR", os.path.join(_TMP_HOME, "config"))
os.environ["RESUME_BUILDER_SUGGESTION_DELAY"] = "0"
os.environ["RESUME_BUILDER_SUGGESTIONS"] = "pool"
os.environ.pop("RESUME_BUILDER_OPENAI_API_KEY", None)

import random
from io import BytesIO
from typing import List

import pytest
from PIL import Image

from resume_builder.models.schema import (
    Certificate,
    Education,
    Experience,
    PersonalInfo,
    Project,
    Resume,
    Skill,
    SkillSuggestion,
)
from resume_builder.services.editor import ResumeEditor
from resume_builder.services.suggestions import PooledSuggestionProvider


class FailingProvider:
    """Suggestion provider whose every call blows up."""

    def __init__(self, error: Exception = None):
        self.error = error or ConnectionError("suggestion service unreachable")
        self.calls = 0

    async def _fail(self, *args, **kwargs):
        self.calls += 1
        raise self.error

    suggest_summary = _fail
    suggest_job_description = _fail
    suggest_education_description = _fail
    suggest_skills = _fail
    improve_text = _fail


@pytest.fixture
def pooled_provider():
    return PooledSuggestionProvider(rng=random.Random(7), delay=0)


@pytest.fixture
def editor(pooled_provider):
    return ResumeEditor(suggestions=pooled_provider)


@pytest.fixture
def counting_ids():
    """Deterministic id factory: <prefix>-1, <prefix>-2, ..."""
    counter = {"n": 0}

    def factory(prefix, taken):
        counter["n"] += 1
        return f"{prefix}-{counter['n']}"

    return factory


@pytest.fixture
def complete_resume() -> Resume:
    return Resume(
        personal_info=PersonalInfo(
            full_name="Ada Lovelace",
            email="ada@example.com",
            phone="+44 20 7946 0000",
            location="London, UK",
            github="github.com/ada",
        ),
        summary="Mathematician who wrote the first published algorithm.",
        experience=[
            Experience(
                id="exp-1",
                job_title="Analyst",
                company="Analytical Engine Co.",
                location="London",
                start_date="1842-01",
                end_date="1843-09",
                description="Translated and annotated Menabrea's paper on the engine.",
            ),
        ],
        education=[
            Education(
                id="edu-1",
                degree="Private tutoring in Mathematics",
                institution="University of London",
                location="London",
                start_date="1829",
                is_current_study=True,
            ),
        ],
        skills=[
            Skill(id="skill-1", name="Algorithms", level="Expert", category="Mathematics"),
            Skill(id="skill-2", name="Technical Writing", level="Advanced", category="Communication"),
        ],
        projects=[
            Project(id="proj-1", name="Note G", description="Bernoulli number program", technologies="Analytical Engine"),
        ],
        certificates=[
            Certificate(id="cert-1", name="Fellow", issuer="Royal Society", issue_date="1840"),
        ],
    )


@pytest.fixture
def png_bytes():
    def make(width=400, height=600, mode="RGB", color="navy") -> bytes:
        img = Image.new(mode, (width, height), color)
        buf = BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    return make


@pytest.fixture
def skill_suggestions() -> List[SkillSuggestion]:
    return [
        SkillSuggestion(name="Python", level="Expert", category="Programming Languages"),
        SkillSuggestion(name="SQL", level="Advanced", category="Databases"),
    ]
