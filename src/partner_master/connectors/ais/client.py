"""Client for the remote tabular data service (token auth + table data browse).

Flow used by every run:
1. Authenticate: POST credentials to /v2/tokenrequest, keep userInfo.token
2. Query: GET /v2/dataservice/table/{table} with $filter, $limit and $token
3. Rows live under fs_DATABROWSE_{table}.data.gridData.rowset
"""

import logging
import os
from typing import Optional

import httpx

from partner_master.connectors.base import BaseQueryClient
from partner_master.exceptions import AuthenticationError, QueryError
from partner_master.models.metadata import RemoteFieldMetadata
from partner_master.models.raw import RawRow

from .constants import (
    AUTH_HEADER,
    DATASERVICE_TABLE_PATH,
    DEFAULT_CONFIG_PATH,
    ENV_BASE_URL,
    ENV_ENVIRONMENT,
    ENV_PASSWORD,
    ENV_ROLE,
    ENV_TIMEOUT,
    ENV_USERNAME,
    ENV_VERIFY_SSL,
    JARGON_PATH,
    PARAM_FILTER,
    PARAM_LIMIT,
    PARAM_TOKEN,
    TOKEN_PATH,
)
from .parsers import extract_jargon_item, extract_rowset, extract_token

logger = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}


class AISClient(BaseQueryClient):
    """
    Query client for the remote data service.
    One client per run; the token obtained by authenticate() is reused by every query.
    The underlying httpx client is safe to share across the aggregator's worker threads.
    """

    source_id = "ais"
    requires_pacing = True

    DEFAULT_HEADERS = {
        "User-Agent": "partner-master/0.1",
        "Accept": "application/json",
    }

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        environment: str = "",
        role: str = "",
        *,
        verify_ssl: bool = True,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._environment = environment
        self._role = role
        self._token: Optional[str] = None
        self._client = client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            verify=verify_ssl,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    @classmethod
    def from_env(cls, client: Optional[httpx.Client] = None) -> "AISClient":
        """Build a client from AIS_* environment variables."""
        missing = [
            name
            for name in (ENV_BASE_URL, ENV_USERNAME, ENV_PASSWORD)
            if not os.environ.get(name)
        ]
        if missing:
            raise AuthenticationError(f"Missing connection settings: {', '.join(missing)}")
        verify = (os.environ.get(ENV_VERIFY_SSL) or "true").strip().lower() not in _FALSE_VALUES
        try:
            timeout = float(os.environ.get(ENV_TIMEOUT) or 60.0)
        except ValueError:
            raise AuthenticationError(f"Invalid {ENV_TIMEOUT}: {os.environ.get(ENV_TIMEOUT)!r}")
        return cls(
            base_url=os.environ[ENV_BASE_URL],
            username=os.environ[ENV_USERNAME],
            password=os.environ[ENV_PASSWORD],
            environment=os.environ.get(ENV_ENVIRONMENT, ""),
            role=os.environ.get(ENV_ROLE, ""),
            verify_ssl=verify,
            timeout=timeout,
            client=client,
        )

    @property
    def token(self) -> Optional[str]:
        return self._token

    def _url(self, path: str) -> str:
        return self.base_url + path

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def authenticate(self) -> str:
        """Request a session token. Raises AuthenticationError on any failure."""
        body = {
            "username": self._username,
            "password": self._password,
            "environment": self._environment,
            "role": self._role,
        }
        try:
            resp = self._client.post(self._url(TOKEN_PATH), json=body)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Authentication failed: HTTP %s", e.response.status_code)
            raise AuthenticationError(f"Authentication failed: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Authentication failed: %s", e)
            raise AuthenticationError(f"Authentication failed: {e}") from e

        token = extract_token(payload)
        if not token:
            logger.error("Authentication failed: no token received")
            raise AuthenticationError("No token received")
        self._token = token
        logger.info("Authenticated successfully.")
        return token

    def _ensure_token(self) -> str:
        if not self._token:
            return self.authenticate()
        return self._token

    def validate_connection(self) -> str:
        """
        Authenticate if needed, then call the default config endpoint.
        Returns the service version ('unknown' when not reported).
        """
        self._ensure_token()
        try:
            resp = self._client.get(self._url(DEFAULT_CONFIG_PATH), headers=self._auth_headers())
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise AuthenticationError(
                f"Connection validation failed: HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise AuthenticationError(f"Connection validation failed: {e}") from e

        version = (payload or {}).get("aisVersion") if isinstance(payload, dict) else None
        version = version or "unknown"
        logger.info("Connection validated. Service version: %s", version)
        return version

    def query(self, table: str, filter_expression: Optional[str], row_limit: int) -> list[RawRow]:
        """
        Fetch up to row_limit rows from one table.
        Raises QueryError for non-2xx, transport errors and malformed payloads.
        """
        token = self._ensure_token()
        params = {PARAM_LIMIT: str(row_limit), PARAM_TOKEN: token}
        if filter_expression:
            params[PARAM_FILTER] = filter_expression
        url = self._url(DATASERVICE_TABLE_PATH.format(table=table))

        try:
            resp = self._client.get(url, params=params, headers=self._auth_headers())
        except httpx.RequestError as e:
            raise QueryError(table, filter_expression, reason=str(e)) from e

        if not resp.is_success:
            raise QueryError(
                table,
                filter_expression,
                status_code=resp.status_code,
                body=resp.text[:2000],
            )

        try:
            payload = resp.json()
            return extract_rowset(payload, table)
        except ValueError as e:
            raise QueryError(
                table,
                filter_expression,
                status_code=resp.status_code,
                body=resp.text[:2000],
                reason=f"malformed response: {e}",
            ) from e

    def field_metadata(self, table: str, field: str) -> Optional[RemoteFieldMetadata]:
        """Look up live metadata for table.field. Returns None (logged) on failure."""
        token = self._ensure_token()
        headers = {
            **self._auth_headers(),
            AUTH_HEADER: token,
            "Content-Type": "application/json",
        }
        try:
            resp = self._client.post(
                self._url(JARGON_PATH),
                json={"items": [f"{table}.{field}"]},
                headers=headers,
            )
            resp.raise_for_status()
            item = extract_jargon_item(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Failed to get field metadata for %s.%s: %s", table, field, e)
            return None

        if item is None:
            logger.info("No metadata returned for %s.%s", table, field)
            return None
        item.setdefault("field", field)
        meta = RemoteFieldMetadata.model_validate(item)
        if meta.has_udc:
            logger.info(
                "Field %s has UDC mapping: product code=%s, type code=%s",
                field, meta.udc_product_code, meta.udc_type_code,
            )
        elif not meta.valid_values:
            logger.info("Field %s does not have UDC or enum mapping.", field)
        return meta

    def close(self) -> None:
        self._client.close()
