from typing import Annotated, Any, Dict, List, Optional, Union
import re
import logging
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, computed_field
from pydantic_core import PydanticCustomError

from resume_builder.models.schema import (
    SKILL_LEVELS,
    Certificate,
    Education,
    Experience,
    PersonalInfo,
    Project,
    Resume,
    Skill,
)

logger = logging.getLogger(__name__)

# Structural check only: local@domain.tld, not full RFC 5322
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}")


def is_valid_email(value: str) -> bool:
    return bool(value) and EMAIL_RE.fullmatch(value) is not None


def _required(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not value:
            raise PydanticCustomError("required", message)
        return value
    return AfterValidator(check)


def _check_email(value: str) -> str:
    if not is_valid_email(value):
        raise PydanticCustomError("email", "Invalid email address")
    return value


def _check_level(value: str) -> str:
    if value not in SKILL_LEVELS:
        raise PydanticCustomError("skill_level", "Invalid skill level")
    return value


def _req(message: str):
    return Annotated[str, _required(message)]


# Checked mirrors of the document models. Defaults are validated too, so a
# missing key reports the same message as an empty one.
_CHECKED = ConfigDict(validate_default=True)


class _PersonalInfoCheck(PersonalInfo):
    model_config = _CHECKED

    full_name: _req("Full name is required") = ""
    email: Annotated[str, AfterValidator(_check_email)] = ""
    phone: _req("Phone number is required") = ""
    location: _req("Location is required") = ""


class _ExperienceCheck(Experience):
    model_config = _CHECKED

    job_title: _req("Job title is required") = ""
    company: _req("Company name is required") = ""
    location: _req("Location is required") = ""
    start_date: _req("Start date is required") = ""
    description: _req("Job description is required") = ""


class _EducationCheck(Education):
    model_config = _CHECKED

    degree: _req("Degree is required") = ""
    institution: _req("Institution is required") = ""
    location: _req("Location is required") = ""
    start_date: _req("Start date is required") = ""


class _SkillCheck(Skill):
    model_config = _CHECKED

    name: _req("Skill name is required") = ""
    level: Annotated[str, AfterValidator(_check_level)] = "Intermediate"
    category: _req("Category is required") = ""


class _ProjectCheck(Project):
    model_config = _CHECKED

    name: _req("Project name is required") = ""
    description: _req("Project description is required") = ""
    technologies: _req("Technologies used is required") = ""


class _CertificateCheck(Certificate):
    model_config = _CHECKED

    name: _req("Certificate name is required") = ""
    issuer: _req("Issuer is required") = ""
    issue_date: _req("Issue date is required") = ""


class _ResumeCheck(Resume):
    model_config = _CHECKED

    # dict default so a missing personalInfo is validated field by field
    personal_info: _PersonalInfoCheck = Field(default_factory=dict)
    summary: _req("Professional summary is required") = ""
    experience: List[_ExperienceCheck] = Field(default_factory=list)
    education: List[_EducationCheck] = Field(default_factory=list)
    skills: List[_SkillCheck] = Field(default_factory=list)
    projects: List[_ProjectCheck] = Field(default_factory=list)
    certificates: List[_CertificateCheck] = Field(default_factory=list)


class Violation(BaseModel):
    path: str
    message: str


class ValidationResult(BaseModel):
    violations: List[Violation] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return not self.violations

    def messages(self) -> Dict[str, str]:
        """Map each violated path to its message (first message wins)."""
        out: Dict[str, str] = {}
        for v in self.violations:
            out.setdefault(v.path, v.message)
        return out

    def for_path(self, prefix: str) -> List[Violation]:
        """Violations at `prefix` or anywhere beneath it."""
        return [v for v in self.violations if v.path == prefix or v.path.startswith(prefix + ".")]


# python field name -> interchange name, for every document model
_WIRE_NAMES: Dict[str, str] = {
    name: info.alias or name
    for model in (PersonalInfo, Experience, Education, Skill, Project, Certificate, Resume)
    for name, info in model.model_fields.items()
}


def _violation_from_error(err: Dict[str, Any]) -> Violation:
    # Fields validated from their defaults are reported under the python name
    parts = [_WIRE_NAMES.get(part, part) if isinstance(part, str) else str(part) for part in err.get("loc", ())]
    return Violation(path=".".join(parts), message=str(err.get("msg", "Invalid value")))


def validate(document: Union[Resume, Dict[str, Any], Any]) -> ValidationResult:
    """Check every field constraint of a resume and collect all violations.

    Accepts a Resume or its wire-form mapping. Never raises: malformed input
    is reported as violations like any other problem.
    """
    payload: Optional[Any] = document.to_wire() if isinstance(document, Resume) else document
    try:
        _ResumeCheck.model_validate(payload)
    except ValidationError as exc:
        violations = [_violation_from_error(e) for e in exc.errors(include_url=False)]
        logger.debug("validate: %d violation(s)", len(violations))
        return ValidationResult(violations=violations)
    return ValidationResult()
