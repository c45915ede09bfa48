#!/usr/bin/env python3
"""
Web API for Resume Document Generation
Turns resume / cover letter text into downloadable PDF or DOCX files
"""

from io import BytesIO

from flask import Flask, jsonify, request, send_file
from loguru import logger

from config import configure_logging, load_config
from docx_generator import (
    generate_cover_letter_docx,
    generate_resume_docx,
    generate_resume_docx_from_structure,
)
from exceptions import RenderError
from pdf_generator import (
    generate_cover_letter_pdf,
    generate_resume_pdf,
    generate_resume_pdf_from_structure,
)
from resume_parser import ParsedResume, parse_resume
from resume_templates import COLOR_PRESETS, TEMPLATES


RESUME_GENERATORS = {"pdf": generate_resume_pdf, "docx": generate_resume_docx}
STRUCTURE_GENERATORS = {"pdf": generate_resume_pdf_from_structure, "docx": generate_resume_docx_from_structure}
COVER_LETTER_GENERATORS = {"pdf": generate_cover_letter_pdf, "docx": generate_cover_letter_docx}


def create_app(settings: dict | None = None) -> Flask:
    app = Flask(__name__)
    settings = settings or load_config()
    app.config['MAX_CONTENT_LENGTH'] = 2 * 1024 * 1024  # 2MB max request size
    app.config['RESUME_SETTINGS'] = settings

    def _download(artifact):
        return send_file(
            BytesIO(artifact.content),
            mimetype=artifact.media_type,
            as_attachment=True,
            download_name=artifact.filename
        )

    def _text_field(data, key, default):
        value = data.get(key)
        if value is None or value == "":
            return default
        if not isinstance(value, str):
            raise ValueError(f"{key} must be a string")
        return value

    def _payload():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        structure = data.get("structure")
        if structure is not None and not isinstance(structure, dict):
            raise ValueError("structure must be an object")
        return {
            "content": _text_field(data, "content", ""),
            "structure": structure,
            "filename": _text_field(data, "filename", "resume"),
            "template": _text_field(data, "template", settings["template"]),
            "color": _text_field(data, "color", settings["color"]),
        }

    @app.errorhandler(ValueError)
    def handle_bad_request(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(RenderError)
    def handle_render_error(e):
        logger.error(f"[web] Render failed: {e}")
        return jsonify({'error': 'Document generation failed, please try again'}), 500

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    @app.route('/api/color-presets', methods=['GET'])
    def color_presets():
        return jsonify({
            'templates': list(TEMPLATES),
            'colors': {
                key: {'name': preset.name, 'hex': preset.hex, 'rgb': preset.rgb, 'light': preset.light_tint_rgb}
                for key, preset in COLOR_PRESETS.items()
            },
        })

    @app.route('/api/parse', methods=['POST'])
    def parse():
        payload = _payload()
        if not payload["content"].strip():
            return jsonify({'error': 'content is required'}), 400
        resume = parse_resume(payload["content"], reject_phone_title=settings["reject_phone_title"])
        return jsonify(resume.to_dict())

    @app.route('/api/resume/<fmt>', methods=['POST'])
    def resume_document(fmt):
        if fmt not in RESUME_GENERATORS:
            return jsonify({'error': f'Unsupported format: {fmt}'}), 404
        payload = _payload()
        if payload["structure"] is not None:
            artifact = STRUCTURE_GENERATORS[fmt](
                ParsedResume.from_dict(payload["structure"]),
                payload["filename"],
                template=payload["template"],
                color_key=payload["color"],
            )
            return _download(artifact)
        if not payload["content"].strip():
            return jsonify({'error': 'content is required'}), 400
        artifact = RESUME_GENERATORS[fmt](
            payload["content"],
            payload["filename"],
            template=payload["template"],
            color_key=payload["color"],
            reject_phone_title=settings["reject_phone_title"],
        )
        return _download(artifact)

    @app.route('/api/cover-letter/<fmt>', methods=['POST'])
    def cover_letter_document(fmt):
        if fmt not in COVER_LETTER_GENERATORS:
            return jsonify({'error': f'Unsupported format: {fmt}'}), 404
        payload = _payload()
        if not payload["content"].strip():
            return jsonify({'error': 'content is required'}), 400
        artifact = COVER_LETTER_GENERATORS[fmt](
            payload["content"],
            payload["filename"],
            color_key=payload["color"],
            template=payload["template"],
        )
        return _download(artifact)

    return app


if __name__ == '__main__':
    settings = load_config()
    configure_logging(settings["log_level"])
    app = create_app(settings)
    print("\n" + "=" * 60)
    print("Resume Document Generator - Web Interface")
    print("=" * 60)
    print(f"\nStarting server on http://{settings['host']}:{settings['port']}\n")
    app.run(debug=False, host=settings['host'], port=settings['port'])
