"""Example Flask API integration with contact_xml_parser.

This example exposes the two endpoints the contact front ends call:

- ``POST /api/parse`` with JSON ``{"filePath": ..., "xmlContent": ...}``
- ``POST /api/parse/upload`` with a multipart ``file`` field

Both answer with ``{success, contacts, count}`` or ``{success, error}``.
Install the ``web`` extra to run it: ``pip install contact-xml-parser[web]``.
"""

import uuid

from flask import Flask, Response, jsonify, request

from contact_xml_parser.api import ContactXMLParser, UploadSource
from contact_xml_parser.shared import ParserConfig

app = Flask(__name__)
parser = ContactXMLParser(ParserConfig())
upload_parser = ContactXMLParser(ParserConfig.hardened())


def _respond(result):
    status = 200 if result.success else 400
    # jsonify recurses, which deep contact trees outgrow.
    return Response(result.to_json(), status=status, mimetype='application/json')


@app.route('/api/parse', methods=['POST'])
def parse_contacts():
    """Parse contacts from a server-side path or inline XML content."""
    payload = request.get_json(silent=True) or {}
    result = parser.parse_request(
        file_path=payload.get('filePath'),
        xml_content=payload.get('xmlContent'),
        correlation_id=request.headers.get('X-Request-ID', str(uuid.uuid4())),
    )
    return _respond(result)


@app.route('/api/parse/upload', methods=['POST'])
def parse_upload():
    """Parse contacts from an uploaded XML file."""
    upload = request.files.get('file')
    if upload is None:
        return jsonify({'success': False, 'error': 'File is empty'}), 400

    result = upload_parser.parse_source(
        UploadSource(upload.stream, file_name=upload.filename),
        correlation_id=request.headers.get('X-Request-ID', str(uuid.uuid4())),
    )
    return _respond(result)


@app.route('/api/health', methods=['GET'])
def health():
    """Report parser usage statistics."""
    return jsonify({
        'status': 'ok',
        'parse': parser.statistics,
        'upload': upload_parser.statistics,
    })


if __name__ == '__main__':
    app.run(debug=True)
