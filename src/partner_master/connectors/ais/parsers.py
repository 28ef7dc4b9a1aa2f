"""Parsers for remote data service JSON payloads."""

from typing import Any, Optional

from partner_master.models.raw import RawRow

from .constants import FORM_KEY_TEMPLATE


def extract_token(payload: Any) -> Optional[str]:
    """Session token from a token request response, or None."""
    if not isinstance(payload, dict):
        return None
    user_info = payload.get("userInfo") or {}
    token = user_info.get("token") if isinstance(user_info, dict) else None
    return token or None


def extract_rowset(payload: Any, table: str) -> list[RawRow]:
    """
    Pull the row list out of a data browse response.
    Accepts the form-wrapped shape or a bare top-level "rowset".
    Raises ValueError when the payload does not describe the table.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected JSON object for {table}, got {type(payload).__name__}")

    if "rowset" in payload:
        rowset = payload["rowset"]
    else:
        form = payload.get(FORM_KEY_TEMPLATE.format(table=table))
        if not isinstance(form, dict):
            raise ValueError(f"Response has no {FORM_KEY_TEMPLATE.format(table=table)} section")
        grid = (form.get("data") or {}).get("gridData") or {}
        rowset = grid.get("rowset", [])

    if rowset is None:
        return []
    if not isinstance(rowset, list):
        raise ValueError(f"rowset for {table} is {type(rowset).__name__}, expected list")
    rows = [r for r in rowset if isinstance(r, dict)]
    if len(rows) != len(rowset):
        raise ValueError(f"rowset for {table} contains non-object rows")
    return rows


def extract_jargon_item(payload: Any) -> Optional[dict]:
    """First item of a jargon service response."""
    if not isinstance(payload, dict):
        return None
    items = payload.get("items") or []
    if not items or not isinstance(items[0], dict):
        return None
    return items[0]
