"""
Tests for the read-only preview renderer.
"""

from resume_builder.models.schema import Resume, Skill
from resume_builder.services.render import CONTENT_ELEMENT_ID, date_range, group_skills, render_preview_html


def test_date_range_shows_present_for_current_entries():
    assert date_range("2020-01", "2021-06") == "2020-01 - 2021-06"
    assert date_range("2020-01", "2021-06", current=True) == "2020-01 - Present"
    assert date_range("2020-01", None) == "2020-01 -"
    assert date_range("", "") == ""


def test_group_skills_keeps_first_seen_order_and_uses_other():
    skills = [
        Skill(id="1", name="Python", category="Languages"),
        Skill(id="2", name="Teamwork", category=""),
        Skill(id="3", name="Go", category="Languages"),
    ]
    groups = group_skills(skills)
    assert [(c, [s.name for s in items]) for c, items in groups] == [
        ("Languages", ["Python", "Go"]),
        ("Other", ["Teamwork"]),
    ]


def test_preview_renders_sections(complete_resume):
    html = render_preview_html(complete_resume)
    assert f'id="{CONTENT_ELEMENT_ID}"' in html
    assert "Ada Lovelace" in html
    assert "Professional Experience" in html
    assert "1829 - Present" in html
    assert "Royal Society" in html
    assert "<html" not in html


def test_preview_of_empty_resume_uses_placeholder_name():
    html = render_preview_html(Resume())
    assert "Your Name" in html
    assert "Professional Summary" not in html
    assert "Skills" not in html


def test_preview_escapes_user_input():
    doc = Resume(summary="<script>alert(1)</script>")
    html = render_preview_html(doc)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_standalone_page_wraps_fragment(complete_resume):
    html = render_preview_html(complete_resume, standalone=True)
    assert html.lstrip().startswith("<!DOCTYPE html>")
    assert "<title>Ada Lovelace</title>" in html
