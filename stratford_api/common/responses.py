"""
JSON envelope helpers shared by every service.

All responses have the shape:
    { "success": bool, "data"?: ..., "message"?: str, "error"?: str, "details"?: [...] }
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Response, jsonify, request

logger = logging.getLogger(__name__)


def success(
    data: Any = None, status: int = 200, message: Optional[str] = None
) -> Tuple[Response, int]:
    """
    Build a success envelope.

    Args:
        data: JSON-serializable payload placed under "data".
        status (int): HTTP status code.
        message (str, optional): Human-readable note (used by deletes).

    Returns:
        tuple: (Response, status)
    """
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def failure(
    error: str, status: int, details: Optional[List[Dict[str, Any]]] = None
) -> Tuple[Response, int]:
    """
    Build an error envelope.

    Args:
        error (str): Message shown to the client.
        status (int): HTTP status code.
        details (list, optional): Per-field validation problems.

    Returns:
        tuple: (Response, status)
    """
    body: Dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def attach_request_logging(bp: Blueprint, tag: str) -> None:
    """
    Log every request and response status handled by a blueprint.
    The Authorization header is never logged.
    """

    @bp.before_request
    def _log_request() -> None:
        logger.info(f"[{tag}] Incoming {request.method} {request.path}")

    @bp.after_request
    def _log_response(response: Response) -> Response:
        logger.info(f"[{tag}] Response {response.status}")
        return response
