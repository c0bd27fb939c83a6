from __future__ import annotations
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Literal, Optional, Set, Tuple, Type
import logging

from pydantic import BaseModel, TypeAdapter, ValidationError
from rapidfuzz import fuzz, process, utils

from resume_builder.models.schema import (
	Certificate,
	Education,
	Experience,
	PersonalInfo,
	Project,
	Resume,
	Skill,
	SkillSuggestion,
	default_certificate,
	default_education,
	default_experience,
	default_project,
	default_resume,
	default_skill,
)
from resume_builder.services.ids import make_id
from resume_builder.services.suggestions import SuggestionProvider, get_suggestion_provider

logger = logging.getLogger(__name__)

IdFactory = Callable[[str, Iterable[str]], str]

# section name -> (entity model, default factory, id prefix)
SECTIONS: Dict[str, Tuple[Type[BaseModel], Callable[[], BaseModel], str]] = {
	"experience": (Experience, default_experience, "exp"),
	"education": (Education, default_education, "edu"),
	"skills": (Skill, default_skill, "skill"),
	"projects": (Project, default_project, "proj"),
	"certificates": (Certificate, default_certificate, "cert"),
}

# Minimum rapidfuzz ratio for two skill names to count as the same skill
SKILL_MATCH_SCORE = 90


def _field_names(model: Type[BaseModel]) -> Dict[str, str]:
	"""Accepted field keys (python name and alias) -> python name. `id` is not editable."""
	names: Dict[str, str] = {}
	for name, info in model.model_fields.items():
		if name == "id":
			continue
		names[name] = name
		if info.alias:
			names[info.alias] = name
	return names


@lru_cache(maxsize=None)
def _adapter(model: Type[BaseModel], name: str) -> TypeAdapter:
	return TypeAdapter(model.model_fields[name].annotation)


def _coerce(model: Type[BaseModel], field: str, value: Any) -> Tuple[bool, Optional[str], Any]:
	"""Resolve `field` to a python attribute name and coerce `value` to its type.

	Returns (ok, name, value); ok is False for unknown fields or incompatible values.
	"""
	name = _field_names(model).get(field)
	if name is None:
		logger.warning("editor: %s has no editable field %r; ignored", model.__name__, field)
		return False, None, None
	try:
		return True, name, _adapter(model, name).validate_python(value)
	except ValidationError:
		logger.warning("editor: value %r does not fit %s.%s; ignored", value, model.__name__, name)
		return False, name, None


class SuggestionOutcome(BaseModel):
	target: str
	status: Literal["ok", "busy", "failed", "missing"]
	applied: bool = False
	value: Any = None
	error: Optional[str] = None


class ResumeEditor:
	"""Owns one in-memory Resume and mediates every change to it.

	Each mutation swaps in a new snapshot (copy-on-write), so a document
	obtained from `document` never changes underneath its reader. All edit
	operations are total: unknown ids, unknown fields and ill-typed values
	leave the document as it was.
	"""

	def __init__(
		self,
		document: Optional[Resume] = None,
		id_factory: Optional[IdFactory] = None,
		suggestions: Optional[SuggestionProvider] = None,
	):
		self._doc = document if document is not None else default_resume()
		self._id_factory = id_factory or make_id
		self._suggestions = suggestions
		# Chosen from config on first use when no provider was passed in
		self._configured: Optional[SuggestionProvider] = None
		self._pending: Set[str] = set()

	@property
	def document(self) -> Resume:
		return self._doc

	@property
	def pending_targets(self) -> Set[str]:
		return set(self._pending)

	@property
	def suggestions(self) -> SuggestionProvider:
		if self._suggestions is not None:
			return self._suggestions
		if self._configured is None:
			self._configured = get_suggestion_provider()
		return self._configured

	def reset_suggestions(self) -> None:
		"""Forget the config-chosen provider so the next suggestion re-reads config."""
		self._configured = None

	def reset(self) -> Resume:
		self._doc = default_resume()
		return self._doc

	# Scalars

	def set_personal_info_field(self, field: str, value: Any) -> None:
		ok, name, coerced = _coerce(PersonalInfo, field, value)
		if not ok:
			return
		info = self._doc.personal_info.model_copy(update={name: coerced})
		self._doc = self._doc.model_copy(update={"personal_info": info})

	def set_summary(self, value: str) -> None:
		self._doc = self._doc.model_copy(update={"summary": value})

	# Collections, addressed by section name

	def _items(self, section: str) -> List[BaseModel]:
		return getattr(self._doc, section)

	def _replace(self, section: str, items: List[BaseModel]) -> None:
		self._doc = self._doc.model_copy(update={section: items})

	def _known(self, section: str) -> bool:
		if section in SECTIONS:
			return True
		logger.warning("editor: unknown section %r; ignored", section)
		return False

	def add(self, section: str) -> Optional[BaseModel]:
		"""Append a default entity to `section` and return it; None for an unknown section."""
		if not self._known(section):
			return None
		model, factory, prefix = SECTIONS[section]
		items = self._items(section)
		entity = factory().model_copy(update={"id": self._id_factory(prefix, [e.id for e in items])})
		self._replace(section, [*items, entity])
		logger.debug("editor: added %s id=%s", section, entity.id)
		return entity

	def find(self, section: str, entity_id: str) -> Optional[BaseModel]:
		if section not in SECTIONS:
			return None
		for entity in self._items(section):
			if entity.id == entity_id:
				return entity
		return None

	def update(self, section: str, entity_id: str, field: str, value: Any) -> None:
		if not self._known(section):
			return
		model = SECTIONS[section][0]
		items = self._items(section)
		for i, entity in enumerate(items):
			if entity.id == entity_id:
				break
		else:
			logger.debug("editor: update %s id=%s not found; no-op", section, entity_id)
			return
		ok, name, coerced = _coerce(model, field, value)
		if not ok:
			return
		updated = list(items)
		updated[i] = entity.model_copy(update={name: coerced})
		self._replace(section, updated)

	def remove(self, section: str, entity_id: str) -> None:
		if not self._known(section):
			return
		items = self._items(section)
		for i, entity in enumerate(items):
			if entity.id == entity_id:
				self._replace(section, items[:i] + items[i + 1:])
				return
		logger.debug("editor: remove %s id=%s not found; no-op", section, entity_id)

	def add_experience(self) -> Experience:
		return self.add("experience")

	def update_experience(self, entity_id: str, field: str, value: Any) -> None:
		self.update("experience", entity_id, field, value)

	def remove_experience(self, entity_id: str) -> None:
		self.remove("experience", entity_id)

	def add_education(self) -> Education:
		return self.add("education")

	def update_education(self, entity_id: str, field: str, value: Any) -> None:
		self.update("education", entity_id, field, value)

	def remove_education(self, entity_id: str) -> None:
		self.remove("education", entity_id)

	def add_skill(self) -> Skill:
		return self.add("skills")

	def update_skill(self, entity_id: str, field: str, value: Any) -> None:
		self.update("skills", entity_id, field, value)

	def remove_skill(self, entity_id: str) -> None:
		self.remove("skills", entity_id)

	def add_project(self) -> Project:
		return self.add("projects")

	def update_project(self, entity_id: str, field: str, value: Any) -> None:
		self.update("projects", entity_id, field, value)

	def remove_project(self, entity_id: str) -> None:
		self.remove("projects", entity_id)

	def add_certificate(self) -> Certificate:
		return self.add("certificates")

	def update_certificate(self, entity_id: str, field: str, value: Any) -> None:
		self.update("certificates", entity_id, field, value)

	def remove_certificate(self, entity_id: str) -> None:
		self.remove("certificates", entity_id)

	def apply_skill_suggestions(self, suggestions: Iterable[SkillSuggestion]) -> List[Skill]:
		"""Append suggested skills whose names are not already on the resume."""
		names = [s.name for s in self._doc.skills if s.name]
		added: List[Skill] = []
		skills = list(self._doc.skills)
		for suggestion in suggestions:
			name = suggestion.name.strip()
			if not name:
				continue
			if process.extractOne(name, names, scorer=fuzz.ratio, processor=utils.default_process, score_cutoff=SKILL_MATCH_SCORE):
				logger.debug("editor: skill %r already present; skipped", name)
				continue
			skill = default_skill().model_copy(update={
				"id": self._id_factory("skill", [s.id for s in skills]),
				"name": name,
				"level": suggestion.level,
				"category": suggestion.category,
			})
			skills.append(skill)
			names.append(name)
			added.append(skill)
		if added:
			self._replace("skills", skills)
		return added

	# Suggestions. At most one pending call per target; different targets may overlap.

	async def _suggest(
		self,
		target: str,
		fetch: Callable[[], Awaitable[Any]],
		apply: Optional[Callable[[Any], None]] = None,
	) -> SuggestionOutcome:
		if target in self._pending:
			logger.info("suggest: %s already pending; ignored", target)
			return SuggestionOutcome(target=target, status="busy")
		self._pending.add(target)
		try:
			value = await fetch()
		except Exception as exc:
			logger.exception("suggest: %s failed; document left unchanged", target)
			return SuggestionOutcome(target=target, status="failed", error=str(exc) or exc.__class__.__name__)
		finally:
			self._pending.discard(target)
		applied = False
		if apply is not None:
			before = self._doc
			apply(value)
			# Writes that hit a removed entity leave the snapshot as it was
			applied = self._doc is not before
		return SuggestionOutcome(target=target, status="ok", applied=applied, value=value)

	async def suggest_summary(self) -> SuggestionOutcome:
		info = self._doc.personal_info
		return await self._suggest("summary", lambda: self.suggestions.suggest_summary(info), self.set_summary)

	async def suggest_job_description(self, experience_id: str) -> SuggestionOutcome:
		target = f"experience:{experience_id}"
		exp = self.find("experience", experience_id)
		if exp is None:
			return SuggestionOutcome(target=target, status="missing")
		return await self._suggest(
			target,
			lambda: self.suggestions.suggest_job_description(exp.job_title, exp.company),
			lambda text: self.update_experience(experience_id, "description", text),
		)

	async def suggest_education_description(self, education_id: str) -> SuggestionOutcome:
		target = f"education:{education_id}"
		edu = self.find("education", education_id)
		if edu is None:
			return SuggestionOutcome(target=target, status="missing")
		return await self._suggest(
			target,
			lambda: self.suggestions.suggest_education_description(edu.degree, edu.institution),
			lambda text: self.update_education(education_id, "description", text),
		)

	async def suggest_skills(self, job_title: Optional[str] = None) -> SuggestionOutcome:
		"""Fetch skill suggestions without applying them; see apply_skill_suggestions."""
		if job_title is None:
			job_title = next((e.job_title for e in self._doc.experience if e.job_title), "")
		return await self._suggest("skills", lambda: self.suggestions.suggest_skills(job_title))

	async def improve_text(self, target: str) -> SuggestionOutcome:
		"""Rewrite the summary ("summary") or an entry description ("experience:<id>", "education:<id>")."""
		if target == "summary":
			text = self._doc.summary
			return await self._suggest(target, lambda: self.suggestions.improve_text(text, "summary"), self.set_summary)
		section, _, entity_id = target.partition(":")
		entity = self.find(section, entity_id) if section in ("experience", "education") else None
		if entity is None:
			return SuggestionOutcome(target=target, status="missing")
		text = entity.description or ""
		return await self._suggest(
			target,
			lambda: self.suggestions.improve_text(text, section),
			lambda value: self.update(section, entity_id, "description", value),
		)
