"""
PDF Generator for Resumes and Cover Letters
Lays out A4 pages with absolute positioning and serializes them with ReportLab.

Layout happens first into a PageLayout (a display list of draw operations per
page), measured against the real font metrics; the PageLayout is then replayed
onto a ReportLab canvas. Text y coordinates in the display list run top-down.
"""
from dataclasses import dataclass, field
from io import BytesIO

from loguru import logger
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

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


PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 28
TOP = 46
BOTTOM_SAFE = 42
BOTTOM_LIMIT = PAGE_HEIGHT - BOTTOM_SAFE

LEFT_COLUMN_WIDTH = 185
LEFT_PADDING = 18
LEFT_X = LEFT_PADDING
LEFT_TEXT_WIDTH = LEFT_COLUMN_WIDTH - 2 * LEFT_PADDING
RIGHT_X = LEFT_COLUMN_WIDTH + 22
RIGHT_WIDTH = PAGE_WIDTH - RIGHT_X - MARGIN

SINGLE_MARGIN = 50
SINGLE_WIDTH = PAGE_WIDTH - 2 * SINGLE_MARGIN

TEXT_DARK = (33, 37, 41)
TEXT_GRAY = (107, 114, 128)
RULE_LIGHT_GRAY = (209, 213, 219)


@dataclass(frozen=True)
class DrawOp:
    """One drawing instruction. kind is text, rect, circle or line."""
    kind: str
    x: float
    y: float
    text: str = ""
    font: str = ""
    size: float = 0.0
    color: tuple = (0, 0, 0)
    width: float = 0.0
    height: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    align: str = "left"


@dataclass
class LayoutPage:
    ops: list = field(default_factory=list)

    def texts(self) -> list[str]:
        return [op.text for op in self.ops if op.kind == "text"]

    def rects(self) -> list[DrawOp]:
        return [op for op in self.ops if op.kind == "rect"]


@dataclass
class PageLayout:
    template: str
    pages: list = field(default_factory=list)
    title: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def texts(self) -> list[str]:
        return [text for page in self.pages for text in page.texts()]


def wrap_text(text: str, font: str, size: float, width: float) -> list[str]:
    """Wrap text to a width using the font's metrics, breaking words that cannot fit."""
    if not (text or "").strip():
        return []
    lines = []
    for line in simpleSplit(text, font, size, width):
        if stringWidth(line, font, size) <= width:
            lines.append(line)
            continue
        chunk = ""
        for char in line:
            if chunk and stringWidth(chunk + char, font, size) > width:
                lines.append(chunk)
                chunk = char
            else:
                chunk += char
        if chunk:
            lines.append(chunk)
    return lines


class PageBuilder:
    """Collects draw operations into pages; the cursor lives in the layouts."""

    def __init__(self, template: str, title: str = ""):
        self.layout = PageLayout(template=template, title=title)
        self.new_page()

    @property
    def page(self) -> LayoutPage:
        return self.layout.pages[-1]

    def new_page(self) -> LayoutPage:
        self.layout.pages.append(LayoutPage())
        return self.page

    def text(self, x, y, text, font, size, color=TEXT_DARK, align="left"):
        self.page.ops.append(DrawOp("text", x, y, text=text, font=font, size=size, color=color, align=align))

    def rect(self, x, y, width, height, color):
        self.page.ops.append(DrawOp("rect", x, y, color=color, width=width, height=height))

    def circle(self, x, y, radius, color):
        self.page.ops.append(DrawOp("circle", x, y, color=color, width=radius))

    def line(self, x, y, x2, y2, color, thickness=0.75):
        self.page.ops.append(DrawOp("line", x, y, color=color, width=thickness, x2=x2, y2=y2))


def _fill(c: canvas.Canvas, color: tuple) -> None:
    c.setFillColorRGB(*(channel / 255 for channel in color))


def serialize_layout(layout: PageLayout) -> bytes:
    """Replay a PageLayout onto a ReportLab canvas and return the PDF bytes."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    if layout.title:
        c.setTitle(layout.title)
    for page in layout.pages:
        for op in page.ops:
            if op.kind == "text":
                _fill(c, op.color)
                c.setFont(op.font, op.size)
                if op.align == "center":
                    c.drawCentredString(op.x, PAGE_HEIGHT - op.y, op.text)
                else:
                    c.drawString(op.x, PAGE_HEIGHT - op.y, op.text)
            elif op.kind == "rect":
                _fill(c, op.color)
                c.rect(op.x, PAGE_HEIGHT - op.y - op.height, op.width, op.height, stroke=0, fill=1)
            elif op.kind == "circle":
                _fill(c, op.color)
                c.circle(op.x, PAGE_HEIGHT - op.y, op.width, stroke=0, fill=1)
            elif op.kind == "line":
                c.setStrokeColorRGB(*(channel / 255 for channel in op.color))
                c.setLineWidth(op.width)
                c.line(op.x, PAGE_HEIGHT - op.y, op.x2, PAGE_HEIGHT - op.y2)
        c.showPage()
    c.save()
    return buffer.getvalue()


class ModernLayout:
    """Two columns: a tinted left sidebar and a right column that may run onto more pages."""

    def __init__(self, resume: ParsedResume, options: RenderOptions):
        self.resume = resume
        self.options = options
        self.primary = options.color.rgb
        self.tint = options.color.light_tint_rgb
        self.builder = PageBuilder("modern", title=resume.name)
        self._draw_tint()
        self.y = TOP

    def _draw_tint(self):
        self.builder.rect(0, 0, LEFT_COLUMN_WIDTH, PAGE_HEIGHT, self.tint)

    def _new_page(self):
        # Later pages only repeat the sidebar tint, not its content.
        self.builder.new_page()
        self._draw_tint()
        self.y = TOP

    def build(self) -> PageLayout:
        self._left_column()
        self._right_column()
        return self.builder.layout

    # Left column

    def _left_lines(self, text, font, size, leading, color) -> bool:
        """Draw wrapped text in the sidebar; False once the bottom margin is reached."""
        for line in wrap_text(text, font, size, LEFT_TEXT_WIDTH):
            if self.y > BOTTOM_LIMIT:
                return False
            self.builder.text(LEFT_X, self.y, line, font, size, color)
            self.y += leading
        return True

    def _left_heading(self, text) -> bool:
        if self.y > BOTTOM_LIMIT:
            return False
        self.builder.text(LEFT_X, self.y, text, "Helvetica-Bold", 10.5, self.primary)
        self.y += 15
        return True

    def _left_column(self):
        resume, limits = self.resume, self.options.limits
        self.y = TOP
        if resume.name:
            self._left_lines(resume.name, "Helvetica-Bold", 18, 21, TEXT_DARK)
            self.y += 2
        if resume.title:
            self._left_lines(resume.title, "Helvetica", 10.5, 13, self.primary)
        self.y += 8
        for contact in take(resume.contact, limits.contact):
            if not self._left_lines(contact, "Helvetica", 8.5, 11, TEXT_GRAY):
                break
        self.y += 14

        skills = take(resume.skills, limits.skills)
        if skills and self._left_heading("SKILLS"):
            for skill in skills:
                if self.y > BOTTOM_LIMIT:
                    break
                self.builder.circle(LEFT_X + 2, self.y - 3, 1.6, self.primary)
                for line in wrap_text(skill, "Helvetica", 9, LEFT_TEXT_WIDTH - 9):
                    if self.y > BOTTOM_LIMIT:
                        break
                    self.builder.text(LEFT_X + 9, self.y, line, "Helvetica", 9, TEXT_DARK)
                    self.y += 12
            self.y += 12

        education = take(resume.education, limits.education)
        if education and self._left_heading("EDUCATION"):
            for item in education:
                if not self._left_lines(item, "Helvetica", 9, 12, TEXT_DARK):
                    break
                self.y += 3

    # Right column

    def _ensure_room(self, needed: float):
        if self.y + needed > BOTTOM_LIMIT:
            self._new_page()

    def _right_heading(self, text):
        self._ensure_room(40)
        self.builder.text(RIGHT_X, self.y, text, "Helvetica-Bold", 12, self.primary)
        self.builder.line(RIGHT_X, self.y + 5, RIGHT_X + RIGHT_WIDTH, self.y + 5, self.primary, 0.8)
        self.y += 20

    def _right_bullets(self, items, x):
        for item in items:
            lines = wrap_text(item, "Helvetica", 9.5, RIGHT_X + RIGHT_WIDTH - x - 9)
            for index, line in enumerate(lines):
                self._ensure_room(0)
                if index == 0:
                    self.builder.circle(x + 2, self.y - 3, 1.5, TEXT_GRAY)
                self.builder.text(x + 9, self.y, line, "Helvetica", 9.5, TEXT_DARK)
                self.y += 12.5

    def _right_column(self):
        resume, limits = self.resume, self.options.limits
        self.y = TOP

        if resume.summary:
            self._right_heading("PROFESSIONAL SUMMARY")
            for line in wrap_text(resume.summary, "Helvetica", 10, RIGHT_WIDTH):
                self._ensure_room(0)
                self.builder.text(RIGHT_X, self.y, line, "Helvetica", 10, TEXT_DARK)
                self.y += 13.5
            self.y += 12

        if resume.experience:
            self._right_heading("WORK EXPERIENCE")
            entry_x = RIGHT_X + 12
            for entry in resume.experience:
                self._ensure_room(45)
                self.builder.circle(RIGHT_X + 3, self.y - 4, 3, self.primary)
                for line in wrap_text(entry.title, "Helvetica-Bold", 11, RIGHT_WIDTH - 12):
                    self._ensure_room(0)
                    self.builder.text(entry_x, self.y, line, "Helvetica-Bold", 11, TEXT_DARK)
                    self.y += 14
                meta = " | ".join(part for part in (entry.company, entry.period) if part)
                for line in wrap_text(meta, "Helvetica-Oblique", 9.5, RIGHT_WIDTH - 12):
                    self._ensure_room(0)
                    self.builder.text(entry_x, self.y, line, "Helvetica-Oblique", 9.5, TEXT_GRAY)
                    self.y += 13
                self._right_bullets(take(entry.achievements, limits.achievements), entry_x)
                self.y += 9

        for section in resume.other:
            self._right_heading(section.section.upper())
            self._right_bullets(section.items, RIGHT_X)
            self.y += 9


@dataclass(frozen=True)
class SingleColumnStyle:
    regular: str
    bold: str
    italic: str
    centered_header: bool
    upper_name: bool
    contact_separator: str
    bullet: str
    skill_separator: str
    heading_rule: bool


SINGLE_COLUMN_STYLES = {
    "traditional": SingleColumnStyle(
        regular="Times-Roman",
        bold="Times-Bold",
        italic="Times-Italic",
        centered_header=True,
        upper_name=False,
        contact_separator=" • ",
        bullet="• ",
        skill_separator=" • ",
        heading_rule=True,
    ),
    "ats": SingleColumnStyle(
        regular="Courier",
        bold="Courier-Bold",
        italic="Courier",
        centered_header=False,
        upper_name=True,
        contact_separator=" | ",
        bullet="- ",
        skill_separator=", ",
        heading_rule=False,
    ),
}


class SingleColumnLayout:
    """Full-width single column used by the traditional and ATS templates."""

    def __init__(self, resume: ParsedResume, options: RenderOptions):
        self.resume = resume
        self.options = options
        self.style = SINGLE_COLUMN_STYLES[options.template]
        self.primary = options.color.rgb
        self.builder = PageBuilder(options.template, title=resume.name)
        self.y = TOP

    def _ensure_room(self, needed: float):
        if self.y + needed > BOTTOM_LIMIT:
            self.builder.new_page()
            self.y = TOP

    def _lines(self, text, font, size, leading, color=TEXT_DARK, indent=0.0, center=False):
        for line in wrap_text(text, font, size, SINGLE_WIDTH - indent):
            self._ensure_room(0)
            if center:
                self.builder.text(PAGE_WIDTH / 2, self.y, line, font, size, color, align="center")
            else:
                self.builder.text(SINGLE_MARGIN + indent, self.y, line, font, size, color)
            self.y += leading

    def _bullet(self, text, size=10, leading=13):
        """Bulleted item with continuation lines hanging under the text."""
        style = self.style
        indent = stringWidth(style.bullet, style.regular, size)
        lines = wrap_text(text, style.regular, size, SINGLE_WIDTH - indent)
        for index, line in enumerate(lines):
            self._ensure_room(0)
            if index == 0:
                self.builder.text(SINGLE_MARGIN, self.y, style.bullet + line, style.regular, size, TEXT_DARK)
            else:
                self.builder.text(SINGLE_MARGIN + indent, self.y, line, style.regular, size, TEXT_DARK)
            self.y += leading

    def _heading(self, text):
        self._ensure_room(40)
        self.y += 6
        self.builder.text(SINGLE_MARGIN, self.y, text.upper(), self.style.bold, 12, self.primary)
        if self.style.heading_rule:
            self.builder.line(SINGLE_MARGIN, self.y + 5, PAGE_WIDTH - SINGLE_MARGIN, self.y + 5, RULE_LIGHT_GRAY, 0.75)
            self.y += 19
        else:
            self.y += 16

    def _header(self):
        resume, style = self.resume, self.style
        center = style.centered_header
        if resume.name:
            name = resume.name.upper() if style.upper_name else resume.name
            self._lines(name, style.bold, 20 if center else 16, 24 if center else 20, TEXT_DARK, center=center)
        if resume.title:
            self._lines(resume.title, style.italic, 11.5, 15, self.primary, center=center)
        if center:
            self.y += 2
            self.builder.line(SINGLE_MARGIN, self.y, PAGE_WIDTH - SINGLE_MARGIN, self.y, self.primary, 1.2)
            self.y += 15
        contacts = take(self.resume.contact, self.options.limits.contact)
        if contacts:
            self._lines(style.contact_separator.join(contacts), style.regular, 9.5, 12, TEXT_GRAY, center=center)
        self.y += 8

    def build(self) -> PageLayout:
        resume, style, limits = self.resume, self.style, self.options.limits
        self._header()

        if resume.summary:
            self._heading("Professional Summary")
            self._lines(resume.summary, style.regular, 10, 13.5)

        if resume.experience:
            self._heading("Work Experience")
            for entry in resume.experience:
                self._ensure_room(45)
                self._lines(entry.title, style.bold, 11, 14)
                meta = " | ".join(part for part in (entry.company, entry.period) if part)
                if meta:
                    self._lines(meta, style.italic, 9.5, 13, TEXT_GRAY)
                for achievement in take(entry.achievements, limits.achievements):
                    self._bullet(achievement)
                self.y += 7

        education = take(resume.education, limits.education)
        if education:
            self._heading("Education")
            for item in education:
                self._bullet(item)

        skills = take(resume.skills, limits.skills)
        if skills:
            self._heading("Skills")
            self._lines(style.skill_separator.join(skills), style.regular, 10, 13.5)

        for section in resume.other:
            self._heading(section.section)
            for item in section.items:
                self._bullet(item)

        return self.builder.layout


COVER_LETTER_FONTS = {"modern": "Helvetica", "traditional": "Times-Roman", "ats": "Courier"}
COVER_MARGIN = 56


class PDFGenerator:
    """Generate PDF documents for resumes and cover letters"""

    LAYOUTS = {
        "modern": ModernLayout,
        "traditional": SingleColumnLayout,
        "ats": SingleColumnLayout,
    }

    def layout_resume(self, resume: ParsedResume, options: RenderOptions) -> PageLayout:
        return self.LAYOUTS[options.template](resume, options).build()

    def render(self, resume: ParsedResume, options: RenderOptions) -> bytes:
        """Lay out and serialize a resume; raises RenderError if ReportLab fails."""
        try:
            layout = self.layout_resume(resume, options)
            data = serialize_layout(layout)
        except Exception as e:
            logger.error(f"[pdf] Error generating resume PDF: {e}")
            raise RenderError(str(e), output_format="pdf", template=options.template) from e
        logger.debug(f"[pdf] {options.template} template laid out on {layout.page_count} page(s)")
        return data

    def layout_cover_letter(self, content: str, options: RenderOptions) -> PageLayout:
        font = COVER_LETTER_FONTS[options.template]
        size, leading = 11, 15
        width = PAGE_WIDTH - 2 * COVER_MARGIN
        builder = PageBuilder(options.template, title="Cover Letter")
        builder.rect(0, 0, PAGE_WIDTH, 4, options.color.rgb)
        y = COVER_MARGIN
        for paragraph in split_paragraphs(content):
            for raw_line in paragraph.split("\n"):
                for line in wrap_text(raw_line.strip(), font, size, width):
                    if y > PAGE_HEIGHT - COVER_MARGIN:
                        builder.new_page()
                        y = COVER_MARGIN
                    builder.text(COVER_MARGIN, y, line, font, size, TEXT_DARK)
                    y += leading
            y += 10
        return builder.layout

    def render_cover_letter(self, content: str, options: RenderOptions) -> bytes:
        try:
            return serialize_layout(self.layout_cover_letter(content, options))
        except Exception as e:
            logger.error(f"[pdf] Error generating cover letter PDF: {e}")
            raise RenderError(str(e), output_format="pdf", template=options.template) from e


# Convenience functions
def generate_resume_pdf_from_structure(
    resume: ParsedResume,
    filename: str,
    template: str = DEFAULT_TEMPLATE,
    color_key: str = DEFAULT_COLOR,
) -> DocumentArtifact:
    """Render an already-structured resume to PDF."""
    options = resolve_options(template, color_key)
    artifact = build_artifact(filename, PDFGenerator().render(resume, options), "pdf")
    logger.info(f"[pdf] Resume PDF generated: {artifact.filename} ({len(artifact)} bytes)")
    return artifact


def generate_resume_pdf(
    content: str,
    filename: str,
    template: str = DEFAULT_TEMPLATE,
    color_key: str = DEFAULT_COLOR,
    reject_phone_title: bool = False,
) -> DocumentArtifact:
    """Parse resume text and render it to PDF"""
    resolve_options(template, color_key)
    resume = parse_resume(content, reject_phone_title=reject_phone_title)
    return generate_resume_pdf_from_structure(resume, filename, template, color_key)


def generate_cover_letter_pdf(
    content: str,
    filename: str,
    color_key: str = DEFAULT_COLOR,
    template: str = DEFAULT_TEMPLATE,
) -> DocumentArtifact:
    """Generate a cover letter PDF"""
    options = resolve_options(template, color_key)
    artifact = build_artifact(filename, PDFGenerator().render_cover_letter(content, options), "pdf")
    logger.info(f"[pdf] Cover letter PDF generated: {artifact.filename} ({len(artifact)} bytes)")
    return artifact
