from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from jinja2 import Environment, FileSystemLoader, select_autoescape
from resume_builder.config import VIEWS_DIR
from resume_builder.models.schema import Resume, Skill

PREVIEW_TEMPLATE = "resume.html.j2"
# DOM id of the node the exporter rasterizes
CONTENT_ELEMENT_ID = "resume-content"


def date_range(start: Optional[str], end: Optional[str], current: bool = False) -> str:
	"""'<start> - <end>', with 'Present' when current; the stored end date is ignored then."""
	tail = "Present" if current else (end or "")
	if not start and not tail:
		return ""
	return f"{start or ''} - {tail}".strip()


def group_skills(skills: List[Skill]) -> List[Tuple[str, List[Skill]]]:
	"""Group skills by category in first-seen order; blank categories go under 'Other'."""
	groups: Dict[str, List[Skill]] = {}
	for skill in skills:
		groups.setdefault(skill.category or "Other", []).append(skill)
	return list(groups.items())


def _env() -> Environment:
	env = Environment(
		loader=FileSystemLoader(str(VIEWS_DIR)),
		autoescape=select_autoescape(["html", "xml", "j2"]),
		trim_blocks=True,
		lstrip_blocks=True,
	)
	env.globals["date_range"] = date_range
	env.globals["group_skills"] = group_skills
	env.globals["content_id"] = CONTENT_ELEMENT_ID
	return env


def render_preview_html(document: Resume, standalone: bool = False) -> str:
	"""Render the resume preview.

	standalone=True wraps the fragment in a full HTML page with inline styles,
	which is what the PDF exporter loads into the browser.
	"""
	tpl = _env().get_template(PREVIEW_TEMPLATE)
	return tpl.render(r=document, standalone=standalone)
