"""Exceptions raised while generating resume and cover letter documents."""

from typing import Optional


class DocumentGenerationError(Exception):
    """Base class for everything the document generators raise."""


class UnknownTemplateError(DocumentGenerationError, ValueError):
    """Requested template name is not one of the supported layouts."""


class UnknownColorPresetError(DocumentGenerationError, ValueError):
    """Requested color key is not in the preset table."""


class RenderError(DocumentGenerationError):
    """
    The PDF or DOCX library failed while building a document.

    Attributes:
        message: Error description
        output_format: "pdf" or "docx"
        template: Template being rendered when the failure happened
    """

    def __init__(
        self,
        message: str,
        output_format: Optional[str] = None,
        template: Optional[str] = None,
    ):
        self.message = message
        self.output_format = output_format
        self.template = template

        parts = [message]
        if output_format:
            parts.append(f"format={output_format}")
        if template:
            parts.append(f"template={template}")
        super().__init__(" | ".join(parts))
