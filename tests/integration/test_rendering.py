"""
Integration tests for rendering - real ReportLab and python-docx output,
read back with PyPDF2 and python-docx.
"""

from io import BytesIO

import pytest
from docx import Document
from docx.oxml.ns import qn
from PyPDF2 import PdfReader

import docx_generator
import pdf_generator
from docx_generator import (
    generate_cover_letter_docx,
    generate_resume_docx,
    generate_resume_docx_from_structure,
)
from exceptions import RenderError, UnknownColorPresetError, UnknownTemplateError
from pdf_generator import (
    generate_cover_letter_pdf,
    generate_resume_pdf,
    generate_resume_pdf_from_structure,
)
from resume_parser import extract_text_from_file, parse_resume
from resume_templates import COLOR_PRESETS, MEDIA_TYPES, TEMPLATES


def pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def docx_text(content: bytes) -> str:
    doc = Document(BytesIO(content))
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for cell in table._cells:
            parts.extend(p.text for p in cell.paragraphs)
    return "\n".join(parts)


@pytest.mark.integration
@pytest.mark.parametrize("color", list(COLOR_PRESETS))
@pytest.mark.parametrize("template", TEMPLATES)
def test_every_resume_combination_renders(resume_text, template, color):
    """Test each template/color pair in both formats gives a readable file."""
    pdf = generate_resume_pdf(resume_text, "jane", template=template, color_key=color)
    assert pdf.filename == "jane.pdf"
    assert pdf.media_type == MEDIA_TYPES["pdf"]
    assert pdf.content.startswith(b"%PDF")
    assert "jane doe" in pdf_text(pdf.content).lower()

    word = generate_resume_docx(resume_text, "jane", template=template, color_key=color)
    assert word.filename == "jane.docx"
    assert word.media_type == MEDIA_TYPES["docx"]
    assert "jane doe" in docx_text(word.content).lower()


@pytest.mark.integration
@pytest.mark.parametrize("template", TEMPLATES)
def test_every_cover_letter_template_renders(cover_letter_text, template):
    pdf = generate_cover_letter_pdf(cover_letter_text, "letter", template=template)
    assert "Dear Hiring Manager," in pdf_text(pdf.content)

    word = generate_cover_letter_docx(cover_letter_text, "letter", template=template)
    assert "Thank you for your time." in docx_text(word.content)


@pytest.mark.integration
@pytest.mark.parametrize("template", TEMPLATES)
def test_docx_color_choice_does_not_change_text(resume_text, template):
    """Test the DOCX paragraphs read the same whichever color preset is used."""
    texts = {
        color: docx_text(generate_resume_docx(resume_text, "jane", template=template, color_key=color).content)
        for color in COLOR_PRESETS
    }
    assert len(set(texts.values())) == 1


@pytest.mark.integration
def test_control_characters_render_in_docx():
    """Test text pasted from PDFs with form feeds and NULs still gives a DOCX."""
    resume = generate_resume_docx("Jane Doe\nSUMMARY\nBackend\x0cengineer\x00 at scale", "jane", template="ats")
    text = docx_text(resume.content)
    assert "Backend engineer" in text
    assert "\x0c" not in text

    letter = generate_cover_letter_docx("Dear team,\n\nPage one\x0cpage two\x01", "letter")
    assert "Page one page two" in docx_text(letter.content)


@pytest.mark.integration
def test_long_resume_pdf_has_several_pages(long_resume):
    artifact = generate_resume_pdf_from_structure(long_resume, "long", template="modern")
    reader = PdfReader(BytesIO(artifact.content))
    assert len(reader.pages) > 1
    assert reader.metadata.title == "Jane Doe"


@pytest.mark.integration
def test_docx_modern_sidebar(many_skills_resume):
    """Test the left cell is shaded with the tint and keeps only twelve skills."""
    artifact = generate_resume_docx_from_structure(many_skills_resume, "jane", color_key="orange")
    doc = Document(BytesIO(artifact.content))
    left, right = doc.tables[0].rows[0].cells

    shading = left._tc.xpath("./w:tcPr/w:shd")
    assert len(shading) == 1
    assert shading[0].get(qn("w:fill")) == COLOR_PRESETS["orange"].light_tint_hex_code

    left_texts = [p.text for p in left.paragraphs]
    assert left_texts[0] == "Jane Doe"
    assert len([t for t in left_texts if t.startswith("skill-")]) == 12
    assert len([t for t in left_texts if t.startswith("contact-")]) == 4

    right_texts = [p.text for p in right.paragraphs]
    assert len([t for t in right_texts if t.startswith("achievement")]) == 5


@pytest.mark.integration
def test_docx_modern_heading_rules(resume_text):
    artifact = generate_resume_docx(resume_text, "jane", template="modern", color_key="teal")
    doc = Document(BytesIO(artifact.content))
    right = doc.tables[0].rows[0].cells[1]
    heading = next(p for p in right.paragraphs if p.text == "WORK EXPERIENCE")
    border = heading._p.xpath("./w:pPr/w:pBdr/w:bottom")
    assert len(border) == 1
    assert border[0].get(qn("w:color")) == "0D9488"


@pytest.mark.integration
def test_docx_traditional_and_ats_styles(resume_text):
    traditional = Document(BytesIO(generate_resume_docx(resume_text, "t", template="traditional").content))
    rules = [p for p in traditional.paragraphs if p._p.xpath("./w:pPr/w:pBdr/w:bottom[@w:color='2563EB']")]
    assert len(rules) == 1
    heading = next(p for p in traditional.paragraphs if p.text == "SKILLS")
    assert heading._p.xpath("./w:pPr/w:pBdr/w:bottom")[0].get(qn("w:color")) == "D1D5DB"
    assert heading.runs[0].font.name == "Times New Roman"

    ats = Document(BytesIO(generate_resume_docx(resume_text, "a", template="ats").content))
    texts = [p.text for p in ats.paragraphs]
    assert texts[0] == "JANE DOE"
    assert "- Led migration to services" in texts
    assert "Python, Go, SQL, Kubernetes, Terraform, AWS" in texts
    assert not any(p._p.xpath("./w:pPr/w:pBdr") for p in ats.paragraphs)
    assert not ats.tables


@pytest.mark.integration
def test_docx_cover_letter_rule(cover_letter_text):
    artifact = generate_cover_letter_docx(cover_letter_text, "letter", color_key="red", template="ats")
    doc = Document(BytesIO(artifact.content))
    top = doc.paragraphs[0]._p.xpath("./w:pPr/w:pBdr/w:top")
    assert top[0].get(qn("w:color")) == "DC2626"
    assert [p.text for p in doc.paragraphs[1:]] == [
        "Dear Hiring Manager,",
        "I am excited to apply for the Staff Engineer role.\nMy background is in backend systems.",
        "Thank you for your time.",
        "Sincerely,\nJane Doe",
    ]


@pytest.mark.integration
def test_generated_docx_parses_back(tmp_path, resume_text):
    """Test the DOCX output feeds back through the text extractor and parser."""
    artifact = generate_resume_docx(resume_text, "jane", template="ats")
    path = artifact.save(tmp_path)
    reparsed = parse_resume(extract_text_from_file(path))
    assert reparsed.name == "JANE DOE"
    assert reparsed.skills == ("Python", "Go", "SQL", "Kubernetes", "Terraform", "AWS")


@pytest.mark.integration
def test_unknown_template_and_color_fail_fast(resume_text):
    with pytest.raises(UnknownTemplateError):
        generate_resume_pdf(resume_text, "x", template="fancy")
    with pytest.raises(UnknownColorPresetError):
        generate_resume_docx(resume_text, "x", color_key="pink")
    with pytest.raises(UnknownTemplateError):
        generate_cover_letter_docx("Hi", "x", template="fancy")


@pytest.mark.integration
def test_pdf_failures_are_wrapped(monkeypatch, resume_text):
    def broken(layout):
        raise OSError("disk full")

    monkeypatch.setattr(pdf_generator, "serialize_layout", broken)
    with pytest.raises(RenderError) as excinfo:
        generate_resume_pdf(resume_text, "x", template="traditional")
    assert excinfo.value.output_format == "pdf"
    assert excinfo.value.template == "traditional"
    assert isinstance(excinfo.value.__cause__, OSError)

    with pytest.raises(RenderError):
        generate_cover_letter_pdf("Hi", "x")


@pytest.mark.integration
def test_docx_failures_are_wrapped(monkeypatch, resume_text):
    def broken(doc):
        raise ValueError("bad xml")

    monkeypatch.setattr(docx_generator, "_save", broken)
    with pytest.raises(RenderError) as excinfo:
        generate_resume_docx(resume_text, "x")
    assert excinfo.value.output_format == "docx"
    assert isinstance(excinfo.value.__cause__, ValueError)

    with pytest.raises(RenderError):
        generate_cover_letter_docx("Hi", "x")
