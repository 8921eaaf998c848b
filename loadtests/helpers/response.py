"""Error extraction for load test failure messages.

Every cellar error comes back as
``{"success": false, "error": {"code": ..., "message": ..., "details": ...}}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """A compact ``CODE: message`` string for Locust failures and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return str(body)[:300]

    detail = f"{error.get('code', 'ERROR')}: {error.get('message', '')}"
    if error.get("details"):
        detail += f" {error['details']}"
    return detail[:300]
