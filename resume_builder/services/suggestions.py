from __future__ import annotations
from typing import Dict, List, Optional, Protocol
import asyncio
import json
import logging
import random
import re

import resume_builder.config as cfg
from resume_builder.models.schema import PersonalInfo, SkillSuggestion
from resume_builder.services.llm import get_openai_client

logger = logging.getLogger(__name__)

TEXT_CONTEXTS = ("summary", "experience", "education")


class SuggestionProvider(Protocol):
    async def suggest_summary(self, personal_info: PersonalInfo) -> str: ...

    async def suggest_job_description(self, job_title: str, company: str) -> str: ...

    async def suggest_education_description(self, degree: str, institution: str) -> str: ...

    async def suggest_skills(self, job_title: str) -> List[SkillSuggestion]: ...

    async def improve_text(self, text: str, context: str) -> str: ...


def _skill_pool(rows) -> List[SkillSuggestion]:
    return [SkillSuggestion(name=n, level=lvl, category=c) for n, lvl, c in rows]


SKILL_POOLS: Dict[str, List[SkillSuggestion]] = {
    "software": _skill_pool([
        ("JavaScript", "Advanced", "Programming Languages"),
        ("React", "Advanced", "Frontend Frameworks"),
        ("Node.js", "Intermediate", "Backend Technologies"),
        ("TypeScript", "Advanced", "Programming Languages"),
        ("Git", "Advanced", "Version Control"),
    ]),
    "data": _skill_pool([
        ("Python", "Expert", "Programming Languages"),
        ("Machine Learning", "Advanced", "Data Science"),
        ("SQL", "Advanced", "Databases"),
        ("TensorFlow", "Intermediate", "ML Frameworks"),
        ("Data Visualization", "Advanced", "Data Science"),
    ]),
    "management": _skill_pool([
        ("Agile Methodology", "Expert", "Project Management"),
        ("Scrum", "Advanced", "Project Management"),
        ("Risk Management", "Advanced", "Project Management"),
        ("Stakeholder Management", "Expert", "Leadership"),
        ("Budget Planning", "Intermediate", "Finance"),
    ]),
    "default": _skill_pool([
        ("Communication", "Advanced", "Soft Skills"),
        ("Problem Solving", "Advanced", "Soft Skills"),
        ("Team Collaboration", "Advanced", "Soft Skills"),
        ("Time Management", "Advanced", "Soft Skills"),
        ("Leadership", "Intermediate", "Soft Skills"),
    ]),
}

# Checked in order; first keyword hit wins
_SKILL_KEYWORDS = (
    (("engineer", "developer"), "software"),
    (("data", "scientist"), "data"),
    (("manager", "project"), "management"),
)

JOB_DESCRIPTIONS = (
    "Led cross-functional teams to deliver innovative solutions that improved operational efficiency by 25%. "
    "Collaborated with stakeholders to define project requirements and ensure successful implementation of key initiatives.",
    "Developed and implemented strategic processes that enhanced team productivity and reduced project delivery time by 30%. "
    "Mentored junior team members and fostered a culture of continuous improvement.",
    "Managed complex projects from conception to completion, ensuring adherence to quality standards and timeline requirements. "
    "Successfully delivered multiple high-impact initiatives that drove business growth.",
    "Spearheaded the development of innovative solutions that streamlined operations and improved customer satisfaction. "
    "Worked closely with leadership to align project goals with organizational objectives.",
    "Drove the implementation of best practices and process improvements that resulted in significant cost savings "
    "and enhanced operational performance. Built strong relationships with key stakeholders.",
)

ACTION_VERBS = ("Spearheaded", "Implemented", "Developed", "Led", "Optimized", "Enhanced", "Delivered")
_LEADING_VERB_RE = re.compile(r"^(Spearheaded|Implemented|Developed|Led|Optimized|Enhanced|Delivered|Managed|Created|Built)")
_METRIC_RE = re.compile(r"\d+(%|x|\+)")
METRICS = ("25%", "30%", "2x", "40%", "50%")


def skill_pool_for(job_title: str) -> List[SkillSuggestion]:
    title = (job_title or "").lower()
    for keywords, pool in _SKILL_KEYWORDS:
        if any(k in title for k in keywords):
            return SKILL_POOLS[pool]
    return SKILL_POOLS["default"]


def _summaries(personal_info: PersonalInfo) -> List[str]:
    named = bool(personal_info.full_name)
    return [
        f"Experienced professional with expertise in {'developing innovative solutions' if named else 'technology and business'}. "
        "Proven track record of delivering high-quality results and driving organizational success through strategic thinking and collaborative leadership.",
        f"Results-driven professional with a passion for {'excellence and innovation' if named else 'continuous learning'}. "
        "Strong background in project management, team collaboration, and strategic problem-solving with a focus on delivering measurable outcomes.",
        f"Dynamic and motivated professional with extensive experience in {'leading cross-functional teams' if named else 'modern technologies'}. "
        "Committed to driving business growth through innovative solutions and exceptional stakeholder relationships.",
        f"Accomplished professional with a strong foundation in {'strategic planning and execution' if named else 'industry best practices'}. "
        "Demonstrated ability to adapt to evolving business needs while maintaining high standards of quality and performance.",
    ]


def _education_descriptions(degree: str) -> List[str]:
    d = (degree or "").lower()
    return [
        "Relevant coursework included advanced topics in "
        f"{'algorithms, data structures, and software engineering' if 'computer' in d else 'core subject areas'}. "
        "Maintained strong academic performance while actively participating in student organizations.",
        "Completed comprehensive curriculum covering "
        f"{'strategic management, finance, and operations' if 'business' in d else 'theoretical and practical applications'}. "
        "Engaged in research projects and collaborative learning experiences.",
        "Achieved academic excellence while developing strong analytical and critical thinking skills. "
        f"Participated in {'engineering design projects' if 'engineering' in d else 'academic research initiatives'} and leadership activities.",
        f"Focused on {'scientific research methodologies and data analysis' if 'science' in d else 'core competencies and practical applications'}. "
        "Built a solid foundation for professional growth and continuous learning.",
    ]


class PooledSuggestionProvider:
    """Canned suggestions picked from fixed pools.

    `rng` decides every pick, so tests can pass a seeded random.Random.
    `delay` simulates service latency (seconds).
    """

    def __init__(self, rng: Optional[random.Random] = None, delay: Optional[float] = None):
        self.rng = rng or random.Random()
        self.delay = cfg.SUGGESTION_DELAY_SECONDS if delay is None else delay

    async def _wait(self, factor: float = 1.0) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay * factor)

    async def suggest_summary(self, personal_info: PersonalInfo) -> str:
        await self._wait(1.5)
        return self.rng.choice(_summaries(personal_info))

    async def suggest_job_description(self, job_title: str, company: str) -> str:
        await self._wait(1.2)
        return self.rng.choice(JOB_DESCRIPTIONS)

    async def suggest_education_description(self, degree: str, institution: str) -> str:
        await self._wait(0.8)
        return self.rng.choice(_education_descriptions(degree))

    async def suggest_skills(self, job_title: str) -> List[SkillSuggestion]:
        await self._wait()
        return [s.model_copy() for s in skill_pool_for(job_title)]

    async def improve_text(self, text: str, context: str) -> str:
        await self._wait()
        if not (text or "").strip():
            return text
        improved = text
        if context == "experience":
            if not _LEADING_VERB_RE.match(improved):
                improved = f"{self.rng.choice(ACTION_VERBS)} {improved[0].lower()}{improved[1:]}"
            if not _METRIC_RE.search(improved):
                improved += f", resulting in {self.rng.choice(METRICS)} improvement in efficiency"
        return improved


SUMMARY_INSTRUCTIONS = (
    "You are a resume writer. Write a concise professional summary (2-3 sentences) for the candidate.\n"
    "Rules:\n"
    "1) Use only the details provided; do not invent employers, degrees, or metrics.\n"
    "2) No name, no pronouns at the start, no markdown or quotes.\n"
    "3) Return plain text only."
)

JOB_DESCRIPTION_INSTRUCTIONS = (
    "You are a resume writer. Write a 2-sentence description of responsibilities and impact for the given role.\n"
    "Start with an action verb. No markdown, no bullets, no quotes. Return plain text only."
)

EDUCATION_INSTRUCTIONS = (
    "You are a resume writer. Write a 2-sentence description of an education entry (coursework, focus, activities).\n"
    "Do not invent grades or awards. No markdown, no quotes. Return plain text only."
)

SKILLS_INSTRUCTIONS = (
    "You are a career advisor. Suggest five skills for the given job title.\n"
    "Return ONLY a JSON object: {\"skills\": [{\"name\": str, \"level\": \"Beginner\"|\"Intermediate\"|\"Advanced\"|\"Expert\", \"category\": str}]}."
)

IMPROVE_INSTRUCTIONS = (
    "You are a precise copy editor. Improve the given resume text for clarity and impact.\n"
    "Rules:\n"
    "1) Keep every fact; do not invent numbers or technologies.\n"
    "2) For experience text, lead with a strong action verb.\n"
    "3) Return only the improved text as plain text."
)


class OpenAISuggestionProvider:
    """Suggestions from the chat completions API.

    Calls run in a worker thread; errors propagate so the editor can report them.
    """

    def __init__(self, model: Optional[str] = None, client=None):
        self.model = model or cfg.SUGGESTION_MODEL
        self._client = client

    def _get_client(self):
        return self._client or get_openai_client()

    def _complete(self, system: str, user: str, json_mode: bool = False) -> str:
        kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}
        resp = self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=0.7,
            **kwargs,
        )
        content = (resp.choices[0].message.content or "").strip()
        if not content:
            raise RuntimeError("empty response from model")
        return content

    async def _ask(self, system: str, user: str, json_mode: bool = False) -> str:
        return await asyncio.to_thread(self._complete, system, user, json_mode)

    async def suggest_summary(self, personal_info: PersonalInfo) -> str:
        details = {
            "location": personal_info.location,
            "website": personal_info.website or "",
            "linkedin": personal_info.linkedin or "",
            "github": personal_info.github or "",
        }
        return await self._ask(SUMMARY_INSTRUCTIONS, "Candidate details as JSON:\n" + json.dumps(details, ensure_ascii=False))

    async def suggest_job_description(self, job_title: str, company: str) -> str:
        return await self._ask(JOB_DESCRIPTION_INSTRUCTIONS, f"Job title: {job_title}\nCompany: {company}")

    async def suggest_education_description(self, degree: str, institution: str) -> str:
        return await self._ask(EDUCATION_INSTRUCTIONS, f"Degree: {degree}\nInstitution: {institution}")

    async def suggest_skills(self, job_title: str) -> List[SkillSuggestion]:
        content = await self._ask(SKILLS_INSTRUCTIONS, f"Job title: {job_title or 'unspecified'}", json_mode=True)
        obj = json.loads(content)
        rows = obj.get("skills") if isinstance(obj, dict) else obj
        if not isinstance(rows, list):
            raise ValueError("unexpected skills payload from model")
        out: List[SkillSuggestion] = []
        for row in rows:
            if isinstance(row, dict) and str(row.get("name", "")).strip():
                out.append(SkillSuggestion.model_validate(row))
        if not out:
            raise ValueError("model returned no usable skills")
        return out

    async def improve_text(self, text: str, context: str) -> str:
        if not (text or "").strip():
            return text
        return await self._ask(IMPROVE_INSTRUCTIONS, f"Context: {context}\nText:\n{text}")


def get_suggestion_provider() -> SuggestionProvider:
    if cfg.SUGGESTIONS_BACKEND == "openai":
        if cfg.OPENAI_API_KEY:
            return OpenAISuggestionProvider()
        logger.warning("suggestions: openai backend requested but no key set; using canned pools")
    elif cfg.SUGGESTIONS_BACKEND != "pool":
        logger.warning("suggestions: unknown backend %r; using canned pools", cfg.SUGGESTIONS_BACKEND)
    return PooledSuggestionProvider()
