"""Shared fixtures for the resume document tests."""

import pytest

from resume_parser import ExperienceEntry, OtherSection, ParsedResume


SAMPLE_RESUME_TEXT = """Jane Doe
Senior Software Engineer
jane@example.com | (555) 012-3456
linkedin.com/in/janedoe

SUMMARY
Backend engineer with ten years of experience.
Focused on reliability.

SKILLS
Languages: Python, Go, SQL
- Kubernetes
Terraform, AWS

EXPERIENCE
Staff Engineer | Acme Corp | 2020 - Present
- Led migration to services
- Cut latency by 40%
Software Engineer | Globex | Jan 2016 – Mar 2020
- Built billing pipeline

EDUCATION
B.S. Computer Science, State University

PROJECTS
- resume-doc: PDF and DOCX rendering
"""

SAMPLE_COVER_LETTER = """Dear Hiring Manager,

I am excited to apply for the Staff Engineer role.
My background is in backend systems.

Thank you for your time.

Sincerely,
Jane Doe
"""


@pytest.fixture
def resume_text():
    return SAMPLE_RESUME_TEXT


@pytest.fixture
def cover_letter_text():
    return SAMPLE_COVER_LETTER


@pytest.fixture
def long_resume():
    """Fifteen jobs with five long achievements each; always more than one page."""
    achievement = (
        "Delivered a cross-team initiative that reduced operating costs while improving "
        "throughput and uptime"
    )
    experience = tuple(
        ExperienceEntry(
            title=f"Engineer {i}",
            company=f"Company {i}",
            period="2010 - 2012",
            achievements=tuple(f"{achievement} #{n}" for n in range(5)),
        )
        for i in range(15)
    )
    return ParsedResume(
        name="Jane Doe",
        title="Engineer",
        contact=("jane@example.com",),
        summary="Engineer with a long history.",
        skills=("Python", "Go"),
        education=("B.S. Computer Science",),
        experience=experience,
        other=(OtherSection("Projects", ("resume-doc",)),),
    )


@pytest.fixture
def many_skills_resume():
    return ParsedResume(
        name="Jane Doe",
        title="Engineer",
        contact=tuple(f"contact-{i}@example.com" for i in range(6)),
        skills=tuple(f"skill-{i:02d}" for i in range(1, 21)),
        education=tuple(f"degree-{i}" for i in range(6)),
        experience=(
            ExperienceEntry(
                title="Engineer",
                company="Acme",
                period="2020 - Present",
                achievements=tuple(f"achievement {i}" for i in range(1, 9)),
            ),
        ),
    )


@pytest.fixture(autouse=True)
def clean_resume_env(monkeypatch):
    """Keep developer RESUME_* settings from leaking into tests."""
    for name in (
        "RESUME_TEMPLATE",
        "RESUME_COLOR",
        "RESUME_OUTPUT_DIR",
        "RESUME_LOG_LEVEL",
        "RESUME_REJECT_PHONE_TITLE",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)
