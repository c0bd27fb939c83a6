"""
Tests for ResumeEditor: scalar setters and the add/update/remove protocol
over every collection.
"""

import pytest

from resume_builder.models.schema import Skill
from resume_builder.services.editor import SECTIONS, ResumeEditor
from resume_builder.services.ids import make_id

SECTION_NAMES = list(SECTIONS)


def test_starts_with_default_document(editor):
    doc = editor.document
    assert doc.summary == ""
    assert doc.experience == []


def test_set_personal_info_field_by_either_spelling(editor):
    editor.set_personal_info_field("fullName", "Grace Hopper")
    editor.set_personal_info_field("email", "grace@navy.mil")
    editor.set_personal_info_field("linkedin", "linkedin.com/in/grace")
    info = editor.document.personal_info
    assert info.full_name == "Grace Hopper"
    assert info.email == "grace@navy.mil"
    assert info.linkedin == "linkedin.com/in/grace"


def test_setters_do_not_validate(editor):
    editor.set_personal_info_field("email", "not-an-email")
    editor.set_summary("")
    assert editor.document.personal_info.email == "not-an-email"


def test_unknown_personal_info_field_is_ignored(editor):
    before = editor.document
    editor.set_personal_info_field("shoeSize", "42")
    assert editor.document == before


def test_set_summary(editor):
    editor.set_summary("Builds compilers.")
    assert editor.document.summary == "Builds compilers."


@pytest.mark.parametrize("section", SECTION_NAMES)
def test_add_appends_default_entity_with_unique_id(editor, section):
    ids = [editor.add(section).id for _ in range(5)]
    items = getattr(editor.document, section)
    assert [e.id for e in items] == ids
    assert len(set(ids)) == 5
    assert all(i for i in ids)


def test_add_ids_are_unique_when_clock_does_not_move():
    editor = ResumeEditor(id_factory=lambda prefix, taken: make_id(prefix, taken, clock=lambda: 1000))
    ids = [editor.add_skill().id for _ in range(3)]
    assert ids == ["skill-1000", "skill-1000-1", "skill-1000-2"]


def test_add_uses_section_prefix(editor):
    assert editor.add_experience().id.startswith("exp-")
    assert editor.add_education().id.startswith("edu-")
    assert editor.add_skill().id.startswith("skill-")
    assert editor.add_project().id.startswith("proj-")
    assert editor.add_certificate().id.startswith("cert-")


def test_added_skill_has_default_level(editor):
    skill = editor.add_skill()
    assert skill.level == "Intermediate"
    assert skill.name == "" and skill.category == ""


def test_update_changes_only_the_named_field(counting_ids):
    editor = ResumeEditor(id_factory=counting_ids)
    first, second, third = (editor.add_experience() for _ in range(3))
    editor.update_experience(second.id, "company", "Acme")
    before = editor.document

    editor.update_experience(second.id, "jobTitle", "Engineer")

    after = editor.document
    assert [e.id for e in after.experience] == [first.id, second.id, third.id]
    assert after.experience[0] == before.experience[0]
    assert after.experience[2] == before.experience[2]
    changed = after.experience[1]
    assert changed.job_title == "Engineer"
    assert changed.model_dump(exclude={"job_title"}) == before.experience[1].model_dump(exclude={"job_title"})
    assert after.personal_info == before.personal_info
    assert after.summary == before.summary


def test_earlier_snapshots_are_not_mutated(editor):
    exp = editor.add_experience()
    snapshot = editor.document
    editor.update_experience(exp.id, "company", "Initech")
    editor.set_summary("changed")
    assert snapshot.experience[0].company == ""
    assert snapshot.summary == ""


@pytest.mark.parametrize("section", SECTION_NAMES)
def test_update_unknown_id_is_noop(editor, section):
    editor.add(section)
    before = editor.document.model_copy(deep=True)
    editor.update(section, "missing-id", "name", "x")
    assert editor.document == before


@pytest.mark.parametrize("section", SECTION_NAMES)
def test_remove_unknown_id_is_noop(editor, section):
    editor.add(section)
    before = editor.document.model_copy(deep=True)
    editor.remove(section, "missing-id")
    assert editor.document == before


def test_update_unknown_field_is_noop(editor):
    exp = editor.add_experience()
    before = editor.document
    editor.update_experience(exp.id, "salary", "1M")
    editor.update_experience(exp.id, "id", "hijacked")
    assert editor.document == before


def test_update_with_incompatible_value_is_noop(editor):
    exp = editor.add_experience()
    before = editor.document
    editor.update_experience(exp.id, "isCurrentJob", "maybe")
    assert editor.document == before


def test_update_coerces_compatible_values(editor):
    exp = editor.add_experience()
    editor.update_experience(exp.id, "is_current_job", "true")
    assert editor.document.experience[0].is_current_job is True


def test_current_job_keeps_end_date():
    editor = ResumeEditor()
    exp = editor.add_experience()
    editor.update_experience(exp.id, "isCurrentJob", True)
    stored = editor.document.experience[0]
    assert stored.is_current_job is True
    assert stored.end_date == ""


def test_current_job_keeps_previously_entered_end_date(editor):
    exp = editor.add_experience()
    editor.update_experience(exp.id, "endDate", "2020-05")
    editor.update_experience(exp.id, "isCurrentJob", True)
    editor.update_experience(exp.id, "isCurrentJob", False)
    assert editor.document.experience[0].end_date == "2020-05"


def test_current_study_keeps_end_date_and_gpa(editor):
    edu = editor.add_education()
    editor.update_education(edu.id, "endDate", "2019")
    editor.update_education(edu.id, "gpa", "3.9")
    editor.update_education(edu.id, "isCurrentStudy", True)
    stored = editor.document.education[0]
    assert (stored.is_current_study, stored.end_date, stored.gpa) == (True, "2019", "3.9")


def test_skill_level_is_not_checked_at_write_time(editor):
    skill = editor.add_skill()
    editor.update_skill(skill.id, "level", "Guru")
    assert editor.document.skills[0].level == "Guru"


def test_remove_first_of_two_skills(counting_ids):
    editor = ResumeEditor(id_factory=counting_ids)
    first = editor.add_skill()
    second = editor.add_skill()
    editor.remove_skill(first.id)
    assert len(editor.document.skills) == 1
    assert editor.document.skills[0].id == second.id


@pytest.mark.parametrize("section", SECTION_NAMES)
def test_remove_preserves_relative_order(editor, section):
    ids = [editor.add(section).id for _ in range(4)]
    editor.remove(section, ids[1])
    remaining = [e.id for e in getattr(editor.document, section)]
    assert remaining == [ids[0], ids[2], ids[3]]


def test_remove_only_first_match_for_duplicate_ids():
    from resume_builder.models.schema import Resume
    doc = Resume(skills=[Skill(id="dup", name="a"), Skill(id="dup", name="b")])
    editor = ResumeEditor(document=doc)
    editor.remove_skill("dup")
    assert [s.name for s in editor.document.skills] == ["b"]


def test_named_operations_cover_every_collection(editor):
    proj = editor.add_project()
    editor.update_project(proj.id, "technologies", "Python, FastAPI")
    cert = editor.add_certificate()
    editor.update_certificate(cert.id, "issueDate", "2024-01")
    edu = editor.add_education()
    editor.remove_education(edu.id)
    editor.remove_certificate(cert.id)
    doc = editor.document
    assert doc.projects[0].technologies == "Python, FastAPI"
    assert doc.certificates == []
    assert doc.education == []
    editor.remove_project(proj.id)
    editor.remove_experience("never-existed")
    assert editor.document.projects == []


def test_find(editor):
    exp = editor.add_experience()
    assert editor.find("experience", exp.id) == exp
    assert editor.find("experience", "nope") is None


def test_reset(editor):
    editor.add_skill()
    editor.set_summary("x")
    doc = editor.reset()
    assert doc.skills == [] and doc.summary == ""
    assert editor.document is doc


def test_apply_skill_suggestions_skips_existing_names(editor, skill_suggestions):
    existing = editor.add_skill()
    editor.update_skill(existing.id, "name", "python")
    added = editor.apply_skill_suggestions(skill_suggestions)
    assert [s.name for s in added] == ["SQL"]
    assert [s.name for s in editor.document.skills] == ["python", "SQL"]
    assert editor.document.skills[1].level == "Advanced"
    assert editor.document.skills[1].category == "Databases"


def test_apply_skill_suggestions_fuzzy_matches_and_dedupes_batch(editor, skill_suggestions):
    existing = editor.add_skill()
    editor.update_skill(existing.id, "name", "Node.js")
    from resume_builder.models.schema import SkillSuggestion
    batch = [SkillSuggestion(name="NodeJS"), SkillSuggestion(name="Docker"), SkillSuggestion(name="docker"), SkillSuggestion(name="  ")]
    added = editor.apply_skill_suggestions(batch)
    assert [s.name for s in added] == ["Docker"]
    ids = [s.id for s in editor.document.skills]
    assert len(ids) == len(set(ids)) == 2


def test_apply_skill_suggestions_with_nothing_new_leaves_document(editor, skill_suggestions):
    editor.apply_skill_suggestions(skill_suggestions)
    before = editor.document
    assert editor.apply_skill_suggestions(skill_suggestions) == []
    assert editor.document is before


def test_unknown_section_is_ignored(editor):
    editor.add_skill()
    before = editor.document
    assert editor.add("hobbies") is None
    editor.update("hobbies", "x", "name", "chess")
    editor.remove("hobbies", "x")
    assert editor.find("hobbies", "x") is None
    assert editor.document is before
