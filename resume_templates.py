"""
Template and color configuration shared by the PDF and DOCX generators.

Both backends read the same tables so a resume rendered as PDF and as DOCX
shows the same content in the same order.
"""
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from exceptions import UnknownColorPresetError, UnknownTemplateError


TEMPLATES = ("modern", "traditional", "ats")
OUTPUT_FORMATS = ("pdf", "docx")

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass(frozen=True)
class ColorPreset:
    name: str
    hex: str
    rgb: tuple[int, int, int]
    light_tint_rgb: tuple[int, int, int]

    @property
    def hex_code(self) -> str:
        """Hex without the leading '#', as Word XML expects it."""
        return self.hex.lstrip("#").upper()

    @property
    def light_tint_hex_code(self) -> str:
        return "{:02X}{:02X}{:02X}".format(*self.light_tint_rgb)


COLOR_PRESETS = MappingProxyType({
    "blue": ColorPreset("Blue", "#2563eb", (37, 99, 235), (239, 246, 255)),
    "green": ColorPreset("Green", "#16a34a", (22, 163, 74), (240, 253, 244)),
    "purple": ColorPreset("Purple", "#9333ea", (147, 51, 234), (250, 245, 255)),
    "red": ColorPreset("Red", "#dc2626", (220, 38, 38), (254, 242, 242)),
    "teal": ColorPreset("Teal", "#0d9488", (13, 148, 136), (240, 253, 250)),
    "orange": ColorPreset("Orange", "#ea580c", (234, 88, 12), (255, 247, 237)),
})

DEFAULT_COLOR = "blue"
DEFAULT_TEMPLATE = "modern"


@dataclass(frozen=True)
class TemplateLimits:
    """How many items of each list a template shows. None means all of them."""
    contact: int | None
    skills: int | None
    education: int | None
    achievements: int


TEMPLATE_LIMITS = MappingProxyType({
    "modern": TemplateLimits(contact=4, skills=12, education=4, achievements=5),
    "traditional": TemplateLimits(contact=None, skills=None, education=None, achievements=6),
    "ats": TemplateLimits(contact=None, skills=None, education=None, achievements=6),
})


def take(items, limit: int | None) -> list:
    """First `limit` items, or all of them when limit is None."""
    items = list(items)
    return items if limit is None else items[:limit]


@dataclass(frozen=True)
class RenderOptions:
    template: str
    color: ColorPreset

    @property
    def limits(self) -> TemplateLimits:
        return TEMPLATE_LIMITS[self.template]


def get_color_preset(color_key: str) -> ColorPreset:
    try:
        return COLOR_PRESETS[color_key]
    except KeyError:
        raise UnknownColorPresetError(
            f"Unknown color preset {color_key!r}; expected one of {', '.join(COLOR_PRESETS)}"
        ) from None


def resolve_options(template: str, color_key: str) -> RenderOptions:
    """Validate a template name and color key and bundle them for a renderer."""
    if template not in TEMPLATES:
        raise UnknownTemplateError(
            f"Unknown template {template!r}; expected one of {', '.join(TEMPLATES)}"
        )
    return RenderOptions(template=template, color=get_color_preset(color_key))


@dataclass(frozen=True)
class DocumentArtifact:
    """A finished document, ready to be handed to whatever saves or serves it."""
    filename: str
    content: bytes
    media_type: str

    def __len__(self) -> int:
        return len(self.content)

    def save(self, directory: str | Path = ".") -> Path:
        path = Path(directory) / self.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
        return path


def build_artifact(filename: str, content: bytes, output_format: str) -> DocumentArtifact:
    suffix = f".{output_format}"
    name = (filename or "document").strip()
    if not name.lower().endswith(suffix):
        name += suffix
    return DocumentArtifact(filename=name, content=content, media_type=MEDIA_TYPES[output_format])
