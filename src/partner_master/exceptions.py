"""Exceptions raised across partner-master."""

from typing import Optional


class PartnerMasterError(Exception):
    """Base class for all partner-master errors."""


class AuthenticationError(PartnerMasterError):
    """Could not obtain a session token (bad credentials, missing settings, no token)."""


class QueryError(PartnerMasterError):
    """
    A table query failed: non-2xx response, transport error or malformed body.
    status_code is None when no HTTP response was received.
    """

    def __init__(
        self,
        table: str,
        filter_expression: Optional[str],
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.table = table
        self.filter_expression = filter_expression
        self.status_code = status_code
        self.body = body
        self.reason = reason
        parts = [f"Query on {table} failed"]
        if filter_expression:
            parts.append(f"filter={filter_expression!r}")
        if status_code is not None:
            parts.append(f"HTTP {status_code}")
        if reason:
            parts.append(reason)
        super().__init__(": ".join([parts[0], ", ".join(parts[1:])]) if len(parts) > 1 else parts[0])


class PrimaryFetchError(PartnerMasterError):
    """The primary table could not be fetched; the run cannot produce a batch."""

    def __init__(self, table: str, cause: Exception):
        self.table = table
        self.cause = cause
        super().__init__(f"Failed to fetch primary table {table}: {cause}")
