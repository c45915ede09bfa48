"""
Resume Parsing Utilities

Turn loosely formatted resume text (the plain-text output of an LLM or of a
PDF/DOCX text extractor) into a ParsedResume:
- name, title and contact lines from the top of the document
- summary, skills and education from their sections
- ordered experience entries with achievement bullets
- any other section (Projects, Awards, ...) kept under its own heading

The parser is a line classifier: every non-empty line is run through an
ordered list of rules and the first rule whose predicate matches handles it.
It never raises; text it cannot place lands somewhere plausible instead.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from docx import Document as DocxDocument
from loguru import logger
from PyPDF2 import PdfReader


BULLET_MARKERS = ("-", "•", "*", "–")
HEADER_MARKER = "#"
MAX_HEADER_LENGTH = 50

MONTH = r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
YEAR_RANGE_RE = re.compile(
    rf"(?:\b{MONTH}\s+)?\b\d{{4}}\s*[-–]\s*(?:(?:\b{MONTH}\s+)?\d{{4}}\b|Present\b|Current\b)",
    re.IGNORECASE,
)
PHONE_DIGITS_RE = re.compile(r"\d{10,}")
SEPARATOR_LINE_RE = re.compile(r"^[-=_*~]{3,}$")
# Control characters XML (and so DOCX) cannot hold; PDF extraction emits form feeds and NULs.
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
PERIOD_TRIM = " ,;|-–()"


class SectionKind(str, Enum):
    NONE = "none"
    SUMMARY = "summary"
    SKILLS = "skills"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    CONTACT = "contact"
    OTHER = "other"


# Checked in order; the first keyword found in the header text wins.
SECTION_KEYWORDS = (
    (SectionKind.SUMMARY, ("summary", "objective", "profile")),
    (SectionKind.SKILLS, ("skill", "competenc", "technical")),
    (SectionKind.EDUCATION, ("education", "certification", "qualification")),
    (SectionKind.EXPERIENCE, ("experience", "employment", "work history")),
    (SectionKind.CONTACT, ("contact",)),
)


class ParserState(Enum):
    IDLE = "idle"
    IN_SECTION = "in_section"
    IN_EXPERIENCE_ENTRY = "in_experience_entry"
    IN_OTHER_SECTION = "in_other_section"


@dataclass(frozen=True)
class ExperienceEntry:
    title: str
    company: str = ""
    period: str = ""
    achievements: tuple[str, ...] = ()


@dataclass(frozen=True)
class OtherSection:
    section: str
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedResume:
    name: str = ""
    title: str = ""
    contact: tuple[str, ...] = ()
    summary: str = ""
    skills: tuple[str, ...] = ()
    education: tuple[str, ...] = ()
    experience: tuple[ExperienceEntry, ...] = ()
    other: tuple[OtherSection, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedResume":
        """
        Build a resume from already-structured data (builder flow, no parsing).

        Raises ValueError when the data is not shaped like to_dict() output.
        """
        data = _as_mapping(data, "resume")
        experience = []
        for job in _as_list(data.get("experience"), "experience"):
            job = _as_mapping(job, "experience")
            title = _as_text(job.get("title"))
            if title:
                experience.append(ExperienceEntry(
                    title=title,
                    company=_as_text(job.get("company")),
                    period=_as_text(job.get("period")),
                    achievements=_as_texts(job.get("achievements"), "achievements"),
                ))
        other = []
        for sec in _as_list(data.get("other"), "other"):
            sec = _as_mapping(sec, "other")
            items = _as_texts(sec.get("items"), "items")
            if items:
                other.append(OtherSection(section=_as_text(sec.get("section")), items=items))
        return cls(
            name=_as_text(data.get("name")),
            title=_as_text(data.get("title")),
            contact=_as_texts(data.get("contact"), "contact"),
            summary=_as_text(data.get("summary")),
            skills=_as_texts(data.get("skills"), "skills"),
            education=_as_texts(data.get("education"), "education"),
            experience=tuple(experience),
            other=tuple(other),
        )


def _as_mapping(value, field_name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object, got {type(value).__name__}")
    return value


def _as_list(value, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} must be a list, got {type(value).__name__}")
    return list(value)


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        raise ValueError(f"expected text, got {type(value).__name__}")
    return clean_text(str(value)).strip()


def _as_texts(value, field_name: str) -> tuple[str, ...]:
    return tuple(text for text in (_as_text(v) for v in _as_list(value, field_name)) if text)


@dataclass
class Line:
    """One cleaned, non-empty input line and its position among such lines."""
    text: str
    index: int

    @property
    def is_bullet(self) -> bool:
        return self.text.startswith(BULLET_MARKERS)

    @property
    def content(self) -> str:
        """Line text with any leading bullet marker removed."""
        if self.is_bullet:
            return self.text[1:].strip()
        return self.text


@dataclass
class _EntryDraft:
    title: str = ""
    company: str = ""
    period: str = ""
    achievements: List[str] = field(default_factory=list)
    # plain (non-bullet) lines at the end of achievements, counted since the last bullet
    trailing_plain: int = 0

    def add(self, text: str, plain: bool) -> None:
        self.achievements.append(text)
        self.trailing_plain = self.trailing_plain + 1 if plain else 0

    def take_trailing(self, limit: int = 2) -> List[str]:
        """Remove and return up to `limit` trailing plain lines, oldest first."""
        count = min(self.trailing_plain, limit)
        if not count:
            return []
        taken = self.achievements[-count:]
        del self.achievements[-count:]
        self.trailing_plain -= count
        return taken

    @property
    def is_complete(self) -> bool:
        """A period is known, or plain lines follow earlier achievements."""
        return bool(self.period) or 0 < self.trailing_plain < len(self.achievements)


@dataclass
class _OtherDraft:
    section: str
    items: List[str] = field(default_factory=list)


def clean_text(text: str) -> str:
    return CONTROL_CHARS_RE.sub(" ", text)


def normalize_content(content: str) -> List[str]:
    """Split raw text into cleaned, non-empty lines."""
    text = (content or "").replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
    text = clean_text(text)
    lines = []
    for raw in text.split("\n"):
        line = raw.replace("**", "").strip()
        if not line or SEPARATOR_LINE_RE.match(line):
            continue
        lines.append(line)
    return lines


def strip_header_markup(text: str) -> str:
    return text.lstrip(HEADER_MARKER).strip()


def clean_header_text(text: str) -> str:
    return strip_header_markup(text).rstrip(":").strip()


def is_contact_line(text: str) -> bool:
    lower = text.lower()
    if "@" in text or "linkedin" in lower:
        return True
    return bool(PHONE_DIGITS_RE.search(re.sub(r"\s+", "", text)))


def is_section_header(line: Line) -> bool:
    if line.is_bullet or len(line.text) >= MAX_HEADER_LENGTH:
        return False
    return line.text.startswith(HEADER_MARKER) or line.text.isupper()


def classify_header(header_text: str) -> SectionKind:
    lower = header_text.lower()
    for kind, keywords in SECTION_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return kind
    return SectionKind.OTHER


def extract_period(text: str) -> str:
    match = YEAR_RANGE_RE.search(text)
    return re.sub(r"\s+", " ", match.group(0)).strip() if match else ""


def strip_period(text: str) -> str:
    return YEAR_RANGE_RE.sub("", text).strip(PERIOD_TRIM)


def split_skills(line: Line) -> List[str]:
    if line.is_bullet:
        return [line.content] if line.content else []
    text = line.text
    if ":" in text:
        label, rest = text.split(":", 1)
        parts = [p.strip() for p in rest.split(",") if p.strip()]
        return parts or [label.strip()]
    if "," in text:
        return [p.strip() for p in text.split(",") if p.strip()]
    return [text]


class ResumeParseMachine:
    """
    Accumulates parsed lines section by section.

    In-progress experience entries and other-sections are only moved into
    the result by flush(), which drops entries without a title and sections
    without items. An entry opened by a bare date line that never got a
    title is titled with its period so its lines are kept.
    """

    def __init__(self, reject_phone_title: bool = False):
        self.reject_phone_title = reject_phone_title
        self.name = ""
        self.title = ""
        self.contact: List[str] = []
        self.summary: List[str] = []
        self.skills: List[str] = []
        self.education: List[str] = []
        self.experience: List[ExperienceEntry] = []
        self.other: List[OtherSection] = []
        self.section = SectionKind.NONE
        self.entry: Optional[_EntryDraft] = None
        self.other_draft: Optional[_OtherDraft] = None

    @property
    def state(self) -> ParserState:
        if self.entry is not None:
            return ParserState.IN_EXPERIENCE_ENTRY
        if self.other_draft is not None:
            return ParserState.IN_OTHER_SECTION
        if self.section is SectionKind.NONE:
            return ParserState.IDLE
        return ParserState.IN_SECTION

    def flush(self) -> None:
        if self.entry is not None:
            title = self.entry.title or self.entry.period
            if title:
                self.experience.append(ExperienceEntry(
                    title=title,
                    company=self.entry.company,
                    period=self.entry.period,
                    achievements=tuple(self.entry.achievements),
                ))
            self.entry = None
        if self.other_draft is not None:
            if self.other_draft.items:
                self.other.append(OtherSection(self.other_draft.section, tuple(self.other_draft.items)))
            self.other_draft = None

    def enter_section(self, header_text: str) -> None:
        self.flush()
        self.section = classify_header(header_text)
        if self.section is SectionKind.OTHER:
            self.other_draft = _OtherDraft(section=header_text)

    def start_entry(self, title: str, company: str = "", period: str = "") -> None:
        self.flush()
        self.entry = _EntryDraft(title=title, company=company, period=period)

    def feed(self, line: Line) -> str:
        """Apply the first matching rule to a line; returns the rule's name."""
        for rule in PARSE_RULES:
            if rule.predicate(self, line):
                rule.action(self, line)
                return rule.name
        return "unmatched"

    def result(self) -> ParsedResume:
        self.flush()
        return ParsedResume(
            name=self.name,
            title=self.title,
            contact=tuple(self.contact),
            summary=" ".join(self.summary),
            skills=tuple(self.skills),
            education=tuple(self.education),
            experience=tuple(self.experience),
            other=tuple(self.other),
        )


@dataclass(frozen=True)
class ParseRule:
    name: str
    predicate: Callable[[ResumeParseMachine, Line], bool]
    action: Callable[[ResumeParseMachine, Line], None]


def _set_name(m: ResumeParseMachine, line: Line) -> None:
    m.name = strip_header_markup(line.text)


def _looks_like_title(m: ResumeParseMachine, line: Line) -> bool:
    if line.index != 1 or "@" in line.text or "|" in line.text:
        return False
    if m.reject_phone_title and is_contact_line(line.text):
        return False
    return True


def _set_title(m: ResumeParseMachine, line: Line) -> None:
    m.title = strip_header_markup(line.text)


def _add_contact(m: ResumeParseMachine, line: Line) -> None:
    m.contact.append(line.text)


def _enter_header(m: ResumeParseMachine, line: Line) -> None:
    m.enter_section(clean_header_text(line.text))


def _add_summary(m: ResumeParseMachine, line: Line) -> None:
    if line.content:
        m.summary.append(line.content)


def _add_skills(m: ResumeParseMachine, line: Line) -> None:
    m.skills.extend(split_skills(line))


def _add_education(m: ResumeParseMachine, line: Line) -> None:
    if line.content:
        m.education.append(line.content)


def _add_other_item(m: ResumeParseMachine, line: Line) -> None:
    if m.other_draft is None:
        m.other_draft = _OtherDraft(section="Other")
    if line.content:
        m.other_draft.items.append(line.content)


def _in_section(*kinds: SectionKind) -> Callable[[ResumeParseMachine, Line], bool]:
    return lambda m, line: m.section in kinds


# Experience section rules

def _is_entry_trigger(line: Line) -> bool:
    return "|" in line.text or bool(YEAR_RANGE_RE.search(line.text))


def _is_period_only(line: Line) -> bool:
    return (
        "|" not in line.text
        and bool(YEAR_RANGE_RE.search(line.text))
        and not strip_period(line.content)
    )


def _opens_next_entry(m: ResumeParseMachine, line: Line) -> bool:
    return _is_period_only(line) and (m.entry is None or m.entry.is_complete)


def _start_entry_from_period(m: ResumeParseMachine, line: Line) -> None:
    # "Title / Company / Dates": the plain lines just before the dates name the next job
    header = m.entry.take_trailing(2) if m.entry is not None else []
    m.start_entry(
        title=header[0] if header else "",
        company=header[1] if len(header) > 1 else "",
        period=extract_period(line.text),
    )


def _is_period_for_current(m: ResumeParseMachine, line: Line) -> bool:
    return m.entry is not None and not m.entry.period and _is_period_only(line)


def _set_period(m: ResumeParseMachine, line: Line) -> None:
    m.entry.period = extract_period(line.text)


def _start_entry_from_trigger(m: ResumeParseMachine, line: Line) -> None:
    parts = [p.strip() for p in line.content.split("|")]
    title = strip_period(parts[0])
    rest = [text for text in (strip_period(p) for p in parts[1:]) if text]
    if not title and rest:
        title = rest.pop(0)
    m.start_entry(title=title, company=" | ".join(rest), period=extract_period(line.text))


def _add_achievement(m: ResumeParseMachine, line: Line) -> None:
    if line.content:
        m.entry.add(line.content, plain=not line.is_bullet)


def _set_entry_title(m: ResumeParseMachine, line: Line) -> None:
    m.entry.title = line.text


def _set_company(m: ResumeParseMachine, line: Line) -> None:
    m.entry.company = line.text


def _start_entry_from_title(m: ResumeParseMachine, line: Line) -> None:
    m.start_entry(title=line.content)


def _discard(m: ResumeParseMachine, line: Line) -> None:
    logger.debug(f"[parser] Dropping short line outside any experience entry: {line.text!r}")


EXPERIENCE_RULES = (
    ParseRule("achievement", lambda m, line: line.is_bullet and m.entry is not None, _add_achievement),
    ParseRule("period-entry", _opens_next_entry, _start_entry_from_period),
    ParseRule("entry-period", _is_period_for_current, _set_period),
    ParseRule("entry-start", lambda m, line: _is_entry_trigger(line), _start_entry_from_trigger),
    ParseRule("entry-title", lambda m, line: m.entry is not None and not m.entry.title, _set_entry_title),
    ParseRule("company", lambda m, line: m.entry is not None and not m.entry.company, _set_company),
    ParseRule("continuation", lambda m, line: m.entry is not None, _add_achievement),
    ParseRule("entry-from-title", lambda m, line: len(line.content) > 3, _start_entry_from_title),
    ParseRule("noise", lambda m, line: True, _discard),
)


def _apply_experience_rules(m: ResumeParseMachine, line: Line) -> None:
    for rule in EXPERIENCE_RULES:
        if rule.predicate(m, line):
            rule.action(m, line)
            return


PARSE_RULES = (
    ParseRule("name", lambda m, line: line.index == 0, _set_name),
    ParseRule("title", _looks_like_title, _set_title),
    ParseRule("contact", lambda m, line: is_contact_line(line.text), _add_contact),
    ParseRule("header", lambda m, line: is_section_header(line), _enter_header),
    ParseRule("summary", _in_section(SectionKind.NONE, SectionKind.SUMMARY), _add_summary),
    ParseRule("skills", _in_section(SectionKind.SKILLS), _add_skills),
    ParseRule("education", _in_section(SectionKind.EDUCATION), _add_education),
    ParseRule("experience", _in_section(SectionKind.EXPERIENCE), _apply_experience_rules),
    ParseRule("contact-section", _in_section(SectionKind.CONTACT), _add_contact),
    ParseRule("other", _in_section(SectionKind.OTHER), _add_other_item),
)


def parse_resume(content: str, reject_phone_title: bool = False) -> ParsedResume:
    """
    Core parser: takes raw resume text and returns a ParsedResume.

    reject_phone_title: when set, a second line carrying a phone number is
    treated as contact info instead of the title.
    """
    machine = ResumeParseMachine(reject_phone_title=reject_phone_title)
    for index, text in enumerate(normalize_content(content)):
        machine.feed(Line(text=text, index=index))
    resume = machine.result()
    logger.debug(
        f"[parser] Parsed resume: name={resume.name!r}, {len(resume.contact)} contact, "
        f"{len(resume.skills)} skills, {len(resume.education)} education, "
        f"{len(resume.experience)} experience, {len(resume.other)} other sections"
    )
    return resume


def extract_text_from_file(path: Path) -> str:
    """Extract plain text from a resume file (PDF, DOCX, TXT or MD)."""
    suffix = path.suffix.lower()

    if suffix == ".pdf":
        try:
            reader = PdfReader(str(path))
            texts: List[str] = []
            for page in reader.pages:
                texts.append(page.extract_text() or "")
            return "\n".join(texts).strip()
        except Exception as e:
            logger.warning(f"[parser] Failed to extract text from PDF {path}: {e}")
            return ""

    if suffix == ".docx":
        try:
            doc = DocxDocument(str(path))
            return "\n".join(p.text for p in doc.paragraphs).strip()
        except Exception as e:
            logger.warning(f"[parser] Failed to extract text from DOCX {path}: {e}")
            return ""

    if suffix in {".txt", ".md"}:
        return path.read_text(encoding="utf-8", errors="ignore")

    logger.warning(f"[parser] Unsupported file type for parsing: {suffix}")
    return ""


def parse_resume_file(path: Path, reject_phone_title: bool = False) -> ParsedResume:
    """Convenience: extract text from a file and parse it."""
    return parse_resume(extract_text_from_file(path), reject_phone_title=reject_phone_title)


def split_paragraphs(content: str) -> List[str]:
    """Split cover letter prose on blank lines."""
    text = clean_text((content or "").replace("\r\n", "\n").replace("\r", "\n"))
    return [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
