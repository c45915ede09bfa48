#!/usr/bin/env python3
"""
Command-line entry point: render resume or cover letter text to PDF or DOCX.
"""
import argparse
import sys
from pathlib import Path

from loguru import logger

from config import configure_logging, load_config
from docx_generator import generate_cover_letter_docx, generate_resume_docx
from exceptions import DocumentGenerationError
from pdf_generator import generate_cover_letter_pdf, generate_resume_pdf
from resume_parser import extract_text_from_file
from resume_templates import COLOR_PRESETS, OUTPUT_FORMATS, TEMPLATES


RESUME_GENERATORS = {"pdf": generate_resume_pdf, "docx": generate_resume_docx}
COVER_LETTER_GENERATORS = {"pdf": generate_cover_letter_pdf, "docx": generate_cover_letter_docx}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render resume and cover letter text into PDF or DOCX documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python resume_cli.py resume resume.txt
  python resume_cli.py resume resume.md --format docx --template ats --color teal
  python resume_cli.py cover-letter letter.txt --output jane_cover_letter
        """
    )
    parser.add_argument(
        "kind",
        choices=["resume", "cover-letter"],
        help="What the input text is"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Input file (.txt, .md, .docx or .pdf)"
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="pdf",
        help="Output format (default: pdf)"
    )
    parser.add_argument(
        "--template",
        choices=TEMPLATES,
        help="Layout template (default from config)"
    )
    parser.add_argument(
        "--color",
        choices=list(COLOR_PRESETS),
        help="Color preset (default from config)"
    )
    parser.add_argument(
        "--output",
        help="Output file name (default: input name with the format's extension)"
    )
    parser.add_argument(
        "--output-dir",
        help="Directory to write into (default from config)"
    )
    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to configuration file (default: config.json)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_config(Path(args.config))
    configure_logging(settings["log_level"])

    if not args.input.exists():
        logger.error(f"Input not found: {args.input}")
        return 2
    content = extract_text_from_file(args.input)
    if not content.strip():
        logger.error(f"No text could be read from {args.input}")
        return 2

    template = args.template or settings["template"]
    color = args.color or settings["color"]
    filename = args.output or args.input.stem

    try:
        if args.kind == "resume":
            artifact = RESUME_GENERATORS[args.format](
                content,
                filename,
                template=template,
                color_key=color,
                reject_phone_title=settings["reject_phone_title"],
            )
        else:
            artifact = COVER_LETTER_GENERATORS[args.format](
                content, filename, color_key=color, template=template
            )
    except DocumentGenerationError as e:
        logger.error(f"Document generation failed: {e}")
        return 1

    path = artifact.save(args.output_dir or settings["output_dir"])
    print(f"Generated: {path.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
