from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SKILL_LEVELS = ("Beginner", "Intermediate", "Advanced", "Expert")
DEFAULT_SKILL_LEVEL = "Intermediate"


class DocumentModel(BaseModel):
	# camelCase on the wire, snake_case in Python; either is accepted on input
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	def to_wire(self) -> dict:
		return self.model_dump(by_alias=True)


class PersonalInfo(DocumentModel):
	full_name: str = ""
	email: str = ""
	phone: str = ""
	location: str = ""
	website: Optional[str] = None
	linkedin: Optional[str] = None
	github: Optional[str] = None


class Experience(DocumentModel):
	id: str = ""
	job_title: str = ""
	company: str = ""
	location: str = ""
	start_date: str = ""
	# Kept as entered even when is_current_job is set; renderers show "Present"
	end_date: Optional[str] = ""
	is_current_job: bool = False
	description: str = ""


class Education(DocumentModel):
	id: str = ""
	degree: str = ""
	institution: str = ""
	location: str = ""
	start_date: str = ""
	end_date: Optional[str] = ""
	is_current_study: bool = False
	gpa: Optional[str] = ""
	description: Optional[str] = ""


class Skill(DocumentModel):
	id: str = ""
	name: str = ""
	# Not restricted here so the editor can hold any input; validation checks SKILL_LEVELS
	level: str = DEFAULT_SKILL_LEVEL
	category: str = ""


class SkillSuggestion(DocumentModel):
	"""A skill record as returned by a suggestion provider, before it gets an id."""
	name: str
	level: str = DEFAULT_SKILL_LEVEL
	category: str = ""


class Project(DocumentModel):
	id: str = ""
	name: str = ""
	description: str = ""
	technologies: str = ""
	url: Optional[str] = None
	github: Optional[str] = None
	start_date: Optional[str] = None
	end_date: Optional[str] = None


class Certificate(DocumentModel):
	id: str = ""
	name: str = ""
	issuer: str = ""
	issue_date: str = ""
	expiration_date: Optional[str] = None
	credential_id: Optional[str] = None
	url: Optional[str] = None


class Resume(DocumentModel):
	personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
	summary: str = ""
	experience: List[Experience] = Field(default_factory=list)
	education: List[Education] = Field(default_factory=list)
	skills: List[Skill] = Field(default_factory=list)
	projects: List[Project] = Field(default_factory=list)
	certificates: List[Certificate] = Field(default_factory=list)


# Default-value factories. Each call returns a fresh instance.

def default_personal_info() -> PersonalInfo:
	return PersonalInfo()


def default_experience() -> Experience:
	return Experience()


def default_education() -> Education:
	return Education()


def default_skill() -> Skill:
	return Skill()


def default_project() -> Project:
	return Project()


def default_certificate() -> Certificate:
	return Certificate()


def default_resume() -> Resume:
	return Resume(personal_info=default_personal_info())
