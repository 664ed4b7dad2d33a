"""Supabase integration: remote store client for the site content row.

Reads go straight to the PostgREST table; writes go through the
``save-content`` Edge Function, which holds the service-role rights and
checks the admin secret.  No retries: a failed call is reported once
and the caller decides what to fall back to.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request

from pydantic import ValidationError

from sitecontent.config import RemoteConfig
from sitecontent.errors import RemoteStoreError
from sitecontent.models import SiteContent

logger = logging.getLogger(__name__)

# PostgREST error code for "the result contains 0 rows".
NO_ROWS_CODE = "PGRST116"


class SupabaseContentClient:
    """Client for the single-row site content table.

    Handles anon-key authentication and JSON encoding via urllib.
    """

    def __init__(self, config: RemoteConfig) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {self.config.anon_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(self, method: str, url: str, data: dict | None = None) -> object:
        """Make an authenticated request and return the decoded JSON body."""
        body = json.dumps(data, ensure_ascii=False).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method, headers=self._headers())

        with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
            raw = resp.read().decode("utf-8")
        return json.loads(raw) if raw else None

    @staticmethod
    def _error_body(exc: urllib.error.HTTPError) -> dict:
        try:
            payload = json.loads(exc.read().decode("utf-8"))
        except (ValueError, OSError):
            return {}
        return payload if isinstance(payload, dict) else {}

    def write_document(self, content: SiteContent) -> bool:
        """Save *content* through the Edge Function.

        Returns:
            True if the function answered ``{"success": true}``, False on
            any HTTP error, network fault, or ``success: false`` body.
        """
        if not self.base_url:
            logger.error("Supabase URL not configured; cannot save content")
            return False

        url = f"{self.base_url}/functions/v1/{self.config.function}"
        payload = {"content": content.to_dict(), "adminSecret": self.config.admin_secret}
        try:
            result = self._request("POST", url, payload)
        except urllib.error.HTTPError as exc:
            logger.error("Saving content failed: HTTP %s %s", exc.code, self._error_body(exc) or exc.reason)
            return False
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.error("Saving content failed: %s", exc)
            return False

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else result
            logger.error("Save function rejected content: %s", error)
            return False

        logger.info("Content saved to database")
        return True

    def read_document(self) -> SiteContent | None:
        """Fetch the ``main`` row.

        Returns:
            The stored document, or None when the row is absent or has no
            content.

        Raises:
            RemoteStoreError: On any other HTTP error, network fault, or
                an undecodable row.
        """
        if not self.base_url:
            raise RemoteStoreError("Supabase URL not configured")

        query = urllib.parse.urlencode({"id": f"eq.{self.config.row_id}", "select": "content"})
        url = f"{self.base_url}/rest/v1/{self.config.table}?{query}"
        try:
            rows = self._request("GET", url)
        except urllib.error.HTTPError as exc:
            body = self._error_body(exc)
            if body.get("code") == NO_ROWS_CODE:
                logger.info("No content row in database")
                return None
            message = body.get("message") or exc.reason
            raise RemoteStoreError(f"HTTP {exc.code}: {message}") from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise RemoteStoreError(str(exc)) from exc

        if isinstance(rows, dict):
            rows = [rows]
        if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict) or rows[0].get("content") is None:
            logger.info("No content row in database")
            return None

        try:
            content = SiteContent.model_validate(rows[0]["content"])
        except ValidationError as exc:
            raise RemoteStoreError(f"Malformed content row: {exc}") from exc

        logger.info("Content loaded from database")
        return content
