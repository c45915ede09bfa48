"""
Word Document (DOCX) Generator for Resumes and Cover Letters
Builds a paragraph/table tree and leaves wrapping and pagination to Word.
"""
from dataclasses import dataclass
from io import BytesIO

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Mm, Pt, RGBColor
from loguru import logger

from exceptions import RenderError
from resume_parser import ParsedResume, parse_resume, split_paragraphs
from resume_templates import (
    DEFAULT_COLOR,
    DEFAULT_TEMPLATE,
    DocumentArtifact,
    RenderOptions,
    build_artifact,
    resolve_options,
    take,
)


TEXT_DARK = RGBColor(33, 37, 41)
TEXT_GRAY = RGBColor(107, 114, 128)
RULE_LIGHT_GRAY = "D1D5DB"

LEFT_CELL_WIDTH = Inches(2.5)
RIGHT_CELL_WIDTH = Inches(4.77)

# Elements that must follow w:pBdr inside w:pPr
_PBDR_SUCCESSORS = (
    "w:shd", "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN",
    "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap",
    "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)
# Elements that must follow w:shd inside w:tcPr
_SHD_SUCCESSORS = ("w:noWrap", "w:tcMar", "w:textDirection", "w:tcFitText", "w:vAlign", "w:hideMark")


def _rgb(color: tuple) -> RGBColor:
    return RGBColor(*color)


def set_paragraph_border(para, edge: str, color_hex: str, size: int = 6) -> None:
    """Draw a single rule on one edge (top/bottom) of a paragraph."""
    p_pr = para._p.get_or_add_pPr()
    p_bdr = OxmlElement("w:pBdr")
    border = OxmlElement(f"w:{edge}")
    border.set(qn("w:val"), "single")
    border.set(qn("w:sz"), str(size))
    border.set(qn("w:space"), "1")
    border.set(qn("w:color"), color_hex)
    p_bdr.append(border)
    p_pr.insert_element_before(p_bdr, *_PBDR_SUCCESSORS)


def set_cell_shading(cell, fill_hex: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill_hex)
    tc_pr.insert_element_before(shd, *_SHD_SUCCESSORS)


class FlowWriter:
    """Adds formatted paragraphs to a document or a table cell."""

    def __init__(self, container, font_name: str | None = None):
        self.container = container
        self.font_name = font_name
        # A new table cell already holds one empty paragraph; reuse it first.
        self._spare = container.paragraphs[0] if getattr(container, "_tc", None) is not None else None

    def paragraph(self, style: str | None = None):
        if self._spare is not None:
            para, self._spare = self._spare, None
            if style:
                para.style = style
            return para
        return self.container.add_paragraph(style=style)

    def text(self, text, size=10, bold=False, italic=False, color=TEXT_DARK,
             space_after=4, align=None, style=None):
        para = self.paragraph(style)
        run = para.add_run(text)
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.italic = italic
        run.font.color.rgb = color
        if self.font_name:
            run.font.name = self.font_name
        para.paragraph_format.space_after = Pt(space_after)
        if align is not None:
            para.alignment = align
        return para

    def heading(self, text, color: RGBColor, border_hex: str | None = None, size=12):
        para = self.text(text, size=size, bold=True, color=color, space_after=6)
        para.paragraph_format.space_before = Pt(10)
        if border_hex:
            set_paragraph_border(para, "bottom", border_hex)
        return para

    def bullet(self, text, size=10, prefix: str | None = None):
        """Bulleted item; with a prefix the marker is literal text instead of a list style."""
        if prefix is not None:
            para = self.text(prefix + text, size=size, space_after=2)
        else:
            para = self.text(text, size=size, space_after=2, style="List Bullet")
        para.paragraph_format.left_indent = Inches(0.25)
        return para


def _new_document():
    doc = Document()
    for section in doc.sections:
        section.page_width = Mm(210)
        section.page_height = Mm(297)
        section.top_margin = Inches(0.5)
        section.bottom_margin = Inches(0.5)
        section.left_margin = Inches(0.5)
        section.right_margin = Inches(0.5)
    return doc


def _save(doc) -> bytes:
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@dataclass(frozen=True)
class FlowStyle:
    font_name: str | None
    centered_header: bool
    upper_name: bool
    contact_separator: str
    bullet_prefix: str | None
    skill_separator: str
    heading_rule: bool


FLOW_STYLES = {
    "traditional": FlowStyle(
        font_name="Times New Roman",
        centered_header=True,
        upper_name=False,
        contact_separator=" • ",
        bullet_prefix=None,
        skill_separator=" • ",
        heading_rule=True,
    ),
    "ats": FlowStyle(
        font_name="Courier New",
        centered_header=False,
        upper_name=True,
        contact_separator=" | ",
        bullet_prefix="- ",
        skill_separator=", ",
        heading_rule=False,
    ),
}


class WordDocumentGenerator:
    """Generate Word documents for resumes and cover letters"""

    def build_resume(self, resume: ParsedResume, options: RenderOptions):
        if options.template == "modern":
            return self._build_modern(resume, options)
        return self._build_single_column(resume, options)

    def render(self, resume: ParsedResume, options: RenderOptions) -> bytes:
        """Build and serialize a resume; raises RenderError if python-docx fails."""
        try:
            return _save(self.build_resume(resume, options))
        except Exception as e:
            logger.error(f"[docx] Error generating resume DOCX: {e}")
            raise RenderError(str(e), output_format="docx", template=options.template) from e

    def _build_modern(self, resume: ParsedResume, options: RenderOptions):
        doc = _new_document()
        limits = options.limits
        primary = _rgb(options.color.rgb)

        table = doc.add_table(rows=1, cols=2)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        table.autofit = False
        left_cell, right_cell = table.rows[0].cells
        left_cell.width = LEFT_CELL_WIDTH
        right_cell.width = RIGHT_CELL_WIDTH
        set_cell_shading(left_cell, options.color.light_tint_hex_code)

        left = FlowWriter(left_cell)
        if resume.name:
            left.text(resume.name, size=18, bold=True, space_after=2)
        if resume.title:
            left.text(resume.title, size=10.5, color=primary, space_after=8)
        for contact in take(resume.contact, limits.contact):
            left.text(contact, size=8.5, color=TEXT_GRAY, space_after=2)
        skills = take(resume.skills, limits.skills)
        if skills:
            left.heading("SKILLS", primary, size=10.5)
            for skill in skills:
                left.bullet(skill, size=9)
        education = take(resume.education, limits.education)
        if education:
            left.heading("EDUCATION", primary, size=10.5)
            for item in education:
                left.text(item, size=9, space_after=3)

        right = FlowWriter(right_cell)
        if resume.summary:
            right.heading("PROFESSIONAL SUMMARY", primary, border_hex=options.color.hex_code)
            right.text(resume.summary, size=10, space_after=8)
        if resume.experience:
            right.heading("WORK EXPERIENCE", primary, border_hex=options.color.hex_code)
            for entry in resume.experience:
                right.text(entry.title, size=11, bold=True, space_after=1)
                meta = " | ".join(part for part in (entry.company, entry.period) if part)
                if meta:
                    right.text(meta, size=9.5, italic=True, color=TEXT_GRAY, space_after=3)
                for achievement in take(entry.achievements, limits.achievements):
                    right.bullet(achievement, size=9.5)
        for section in resume.other:
            right.heading(section.section.upper(), primary, border_hex=options.color.hex_code)
            for item in section.items:
                right.bullet(item, size=9.5)
        return doc

    def _build_single_column(self, resume: ParsedResume, options: RenderOptions):
        doc = _new_document()
        style = FLOW_STYLES[options.template]
        limits = options.limits
        primary = _rgb(options.color.rgb)
        border = RULE_LIGHT_GRAY if style.heading_rule else None
        align = WD_ALIGN_PARAGRAPH.CENTER if style.centered_header else WD_ALIGN_PARAGRAPH.LEFT
        w = FlowWriter(doc, font_name=style.font_name)

        if resume.name:
            name = resume.name.upper() if style.upper_name else resume.name
            w.text(name, size=20 if style.centered_header else 16, bold=True, space_after=2, align=align)
        if resume.title:
            w.text(resume.title, size=11.5, italic=style.centered_header, color=primary, space_after=4, align=align)
        if style.centered_header:
            rule = w.text("", size=4, space_after=6)
            set_paragraph_border(rule, "bottom", options.color.hex_code, size=8)
        contacts = take(resume.contact, limits.contact)
        if contacts:
            w.text(style.contact_separator.join(contacts), size=9.5, color=TEXT_GRAY, space_after=8, align=align)

        if resume.summary:
            w.heading("PROFESSIONAL SUMMARY", primary, border_hex=border)
            w.text(resume.summary, size=10, space_after=6)
        if resume.experience:
            w.heading("WORK EXPERIENCE", primary, border_hex=border)
            for entry in resume.experience:
                w.text(entry.title, size=11, bold=True, space_after=1)
                meta = " | ".join(part for part in (entry.company, entry.period) if part)
                if meta:
                    w.text(meta, size=9.5, italic=True, color=TEXT_GRAY, space_after=3)
                for achievement in take(entry.achievements, limits.achievements):
                    w.bullet(achievement, prefix=style.bullet_prefix)
        education = take(resume.education, limits.education)
        if education:
            w.heading("EDUCATION", primary, border_hex=border)
            for item in education:
                w.bullet(item, prefix=style.bullet_prefix)
        skills = take(resume.skills, limits.skills)
        if skills:
            w.heading("SKILLS", primary, border_hex=border)
            w.text(style.skill_separator.join(skills), size=10, space_after=6)
        for section in resume.other:
            w.heading(section.section.upper(), primary, border_hex=border)
            for item in section.items:
                w.bullet(item, prefix=style.bullet_prefix)
        return doc

    def build_cover_letter(self, content: str, options: RenderOptions):
        """
        Generate a simple cover letter: one decorative rule, then the paragraphs.
        This is intentionally much simpler than the resume generator.
        """
        doc = _new_document()
        for section in doc.sections:
            section.top_margin = Inches(0.8)
            section.left_margin = Inches(0.8)
            section.right_margin = Inches(0.8)
        font_name = {"traditional": "Times New Roman", "ats": "Courier New"}.get(options.template)
        w = FlowWriter(doc, font_name=font_name)
        rule = w.paragraph()
        rule.paragraph_format.space_after = Pt(12)
        set_paragraph_border(rule, "top", options.color.hex_code, size=24)
        for paragraph in split_paragraphs(content):
            w.text(paragraph, size=11, space_after=10)
        return doc

    def render_cover_letter(self, content: str, options: RenderOptions) -> bytes:
        try:
            return _save(self.build_cover_letter(content, options))
        except Exception as e:
            logger.error(f"[docx] Error generating cover letter DOCX: {e}")
            raise RenderError(str(e), output_format="docx", template=options.template) from e


# Convenience functions
def generate_resume_docx_from_structure(
    resume: ParsedResume,
    filename: str,
    template: str = DEFAULT_TEMPLATE,
    color_key: str = DEFAULT_COLOR,
) -> DocumentArtifact:
    """Render an already-structured resume to DOCX."""
    options = resolve_options(template, color_key)
    artifact = build_artifact(filename, WordDocumentGenerator().render(resume, options), "docx")
    logger.info(f"[docx] Resume DOCX generated: {artifact.filename} ({len(artifact)} bytes)")
    return artifact


def generate_resume_docx(
    content: str,
    filename: str,
    template: str = DEFAULT_TEMPLATE,
    color_key: str = DEFAULT_COLOR,
    reject_phone_title: bool = False,
) -> DocumentArtifact:
    """Parse resume text and render it to DOCX"""
    resolve_options(template, color_key)
    resume = parse_resume(content, reject_phone_title=reject_phone_title)
    return generate_resume_docx_from_structure(resume, filename, template, color_key)


def generate_cover_letter_docx(
    content: str,
    filename: str,
    color_key: str = DEFAULT_COLOR,
    template: str = DEFAULT_TEMPLATE,
) -> DocumentArtifact:
    """Generate a cover letter DOCX"""
    options = resolve_options(template, color_key)
    artifact = build_artifact(filename, WordDocumentGenerator().render_cover_letter(content, options), "docx")
    logger.info(f"[docx] Cover letter DOCX generated: {artifact.filename} ({len(artifact)} bytes)")
    return artifact
