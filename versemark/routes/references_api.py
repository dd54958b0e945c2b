# versemark/routes/references_api.py
"""
API endpoints for reference headers in open documents.

Provides access to:
- Header parsing and normalization
- Document open/update/close
- Diagnostics, hover, completion, definition, code actions and symbols
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from versemark.core.config import DiagnosticsMode, build_source, get_engine_config
from versemark.services.reference_service import ReferenceService, UnknownDocumentError
from versemark.services.references import ReferenceParseError, normalize_header, scan_header
from versemark.utils.errors import (
    invalid_field,
    missing_field,
    not_found,
    parse_failed,
    server_error,
)

logger = logging.getLogger(__name__)

references_bp = Blueprint("references_api", __name__, url_prefix="/api/references")


def get_service() -> ReferenceService:
    """Get or create the app's ReferenceService."""
    service = current_app.config.get("REFERENCE_SERVICE")
    if service is None:
        service = ReferenceService(build_source(), get_engine_config())
        current_app.config["REFERENCE_SERVICE"] = service
    return service


def _position_args():
    """(uri, line, character) from query params, or an error response."""
    uri = request.args.get("uri")
    if not uri:
        return None, missing_field("uri")
    try:
        line = int(request.args.get("line", ""))
        character = int(request.args.get("character", ""))
    except ValueError:
        return None, invalid_field("position", "line and character must be integers")
    if line < 0 or character < 0:
        return None, invalid_field("position", "line and character must be >= 0")
    return (uri, line, character), None


# =============================================================================
# Header Endpoints
# =============================================================================

@references_bp.post("/parse")
def parse():
    """
    Parse a header line.

    Body:
        {"text": "### Ephesians 1:1-4,5-7"}

    Returns:
        {"reference": {...}} or 400 with {"error": "parse_failed", "errors": [...]}
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if not text:
        return missing_field("text")

    reference, errors = scan_header(text)
    if errors:
        return parse_failed(errors)
    return jsonify({"reference": reference.to_dict()})


@references_bp.post("/format")
def format_text():
    """
    Normalize a header line.

    Body:
        {"text": "###  Ephesians 1:1-4 ,5-7"}

    Returns:
        {"text": "### Ephesians 1:1-4, 5-7"}
    """
    data = request.get_json(silent=True) or {}
    text = data.get("text")
    if not text:
        return missing_field("text")

    try:
        return jsonify({"text": normalize_header(text)})
    except ReferenceParseError as e:
        return parse_failed([e])


# =============================================================================
# Document Endpoints
# =============================================================================

@references_bp.put("/documents")
def put_document():
    """
    Open or update a document.

    Body:
        {"uri": "notes.md", "version": 3, "text": "..."}

    Returns:
        {"uri": "notes.md", "version": 3, "headers": 2}
    """
    data = request.get_json(silent=True) or {}
    for key in ("uri", "version", "text"):
        if key not in data:
            return missing_field(key)
    if not isinstance(data["version"], int):
        return invalid_field("version", "version must be an integer")

    state = get_service().update_document(data["uri"], data["version"], data["text"])
    return jsonify({
        "uri": state.uri,
        "version": state.version,
        "headers": len(state.headers),
    })


@references_bp.delete("/documents")
def delete_document():
    uri = request.args.get("uri")
    if not uri:
        return missing_field("uri")
    if not get_service().close_document(uri):
        return not_found("document")
    return jsonify({"closed": uri})


# =============================================================================
# Feature Endpoints
# =============================================================================

@references_bp.get("/diagnostics")
def diagnostics():
    """
    Query params:
        uri: Document (required)
        mode: referenceOnly | firstVerse | allVerses (optional)
    """
    uri = request.args.get("uri")
    if not uri:
        return missing_field("uri")

    service = get_service()
    config = service.config
    mode = request.args.get("mode")
    if mode:
        try:
            config = config.with_mode(mode)
        except ValueError:
            allowed = ", ".join(m.value for m in DiagnosticsMode)
            return invalid_field("mode", f"mode must be one of: {allowed}")

    try:
        result = service.diagnostics(uri, config)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Diagnostics failed for {uri}")
        return server_error("diagnostics_failed", str(e))

    return jsonify({"uri": uri, "diagnostics": [d.to_dict() for d in result]})


@references_bp.get("/resolved")
def resolved():
    """
    Resolved verse content for every header in a document.

    Returns:
        {"uri": "...", "headers": [{"line": 1, "errors": [...], "resolved": {...}}]}
    """
    uri = request.args.get("uri")
    if not uri:
        return missing_field("uri")
    try:
        pairs = get_service().resolved_headers(uri)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Resolution failed for {uri}")
        return server_error("resolution_failed", str(e))

    return jsonify({
        "uri": uri,
        "headers": [
            {
                "line": header.line,
                "errors": [err.to_dict() for err in header.errors],
                "resolved": result.to_dict() if result else None,
            }
            for header, result in pairs
        ],
    })


@references_bp.get("/symbols")
def symbols():
    """
    Every well-formed reference header in a document.

    Returns:
        {"uri": "...", "symbols": [{"name": "Ephesians 1:1-4, 5", "kind": "key", "line": 1, "span": [8, 29]}]}
    """
    uri = request.args.get("uri")
    if not uri:
        return missing_field("uri")
    try:
        result = get_service().symbols(uri)
    except UnknownDocumentError:
        return not_found("document")

    return jsonify({"uri": uri, "symbols": [s.to_dict() for s in result]})


@references_bp.get("/hover")
def hover():
    args, error = _position_args()
    if error:
        return error
    try:
        result = get_service().hover_at_position(*args)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Hover failed for {args[0]}")
        return server_error("hover_failed", str(e))

    return jsonify({"hover": result.to_dict() if result else None})


@references_bp.get("/completion")
def completion():
    args, error = _position_args()
    if error:
        return error
    try:
        items = get_service().completion_at_position(*args)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Completion failed for {args[0]}")
        return server_error("completion_failed", str(e))

    return jsonify({"items": [item.to_dict() for item in items]})


@references_bp.get("/definition")
def definition():
    args, error = _position_args()
    if error:
        return error
    try:
        target = get_service().definition_at_position(*args)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Definition failed for {args[0]}")
        return server_error("definition_failed", str(e))

    return jsonify({"definition": target.to_dict() if target else None})


@references_bp.get("/code-actions")
def code_actions():
    args, error = _position_args()
    if error:
        return error
    try:
        actions = get_service().code_actions_at_position(*args)
    except UnknownDocumentError:
        return not_found("document")
    except Exception as e:
        logger.exception(f"Code actions failed for {args[0]}")
        return server_error("code_actions_failed", str(e))

    return jsonify({"actions": [a.to_dict() for a in actions]})


@references_bp.get("/stats")
def stats():
    return jsonify(get_service().stats())
