"""Helpers for consistent JSON responses.

Regular endpoints use the ``{success, data, error}`` envelope. Run reports
are returned as-is because automation reads their top-level fields.
"""

from __future__ import annotations

from typing import Any, Mapping

from flask import Response, jsonify


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    """Success envelope."""

    return jsonify({"success": True, "data": data, "error": None}), status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    """Error envelope."""

    return (
        jsonify(
            {
                "success": False,
                "data": None,
                "error": {"code": code, "message": message, "details": details},
            }
        ),
        status_code,
    )


def run_report(report: Mapping[str, Any]) -> tuple[Response, int]:
    """Reconciliation report: 200 if any game succeeded, else 500."""

    return jsonify(dict(report)), 200 if report.get("success") else 500
