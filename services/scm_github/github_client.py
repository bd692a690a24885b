"""GitHub REST API provider.

Implements the GitHubProvider protocol on top of a shared httpx.AsyncClient.
The OAuth credential set by authenticate() is copied into the request
headers when a lookup is called, not when it is awaited, so one client can
serve concurrent calls made with different tokens.
"""

import hashlib
import hmac
from collections.abc import Awaitable
from typing import Any
from urllib.parse import quote as url_quote

import httpx

from scm_github.errors import ProviderError, ProviderTimeout
from scm_github.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


def validate_webhook_signature(secret: str, payload: bytes, signature_header: str) -> bool:
    """Validate GitHub webhook HMAC-SHA256 signature."""
    if not secret:
        return False

    if not signature_header.startswith("sha256="):
        return False

    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    received = signature_header.removeprefix("sha256=")

    return hmac.compare_digest(expected, received)


class GitHubClient:
    """GitHubProvider backed by the GitHub v3 REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str = DEFAULT_GITHUB_API_URL,
        user_agent: str = "scm-github",
    ) -> None:
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._user_agent = user_agent
        self._credential: dict[str, str] | None = None

    def authenticate(self, credential: dict[str, str]) -> None:
        self._credential = dict(credential)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": self._user_agent,
        }
        if self._credential and self._credential.get("token"):
            if self._credential.get("type") == "oauth":
                headers["Authorization"] = f"token {self._credential['token']}"
            else:
                headers["Authorization"] = f"Bearer {self._credential['token']}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and translate failures into ProviderError."""
        url = f"{self._api_url}{path}"
        try:
            resp = await self._client.request(
                method, url, headers=headers, params=params, json=json
            )
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(f"Timed out calling {method} {path}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Network error calling {method} {path}: {exc}") from exc

        if resp.is_error:
            try:
                message = resp.json().get("message", resp.reason_phrase)
            except (ValueError, AttributeError):
                message = resp.reason_phrase
            logger.debug(
                "GitHub API error", method=method, path=path, status=resp.status_code
            )
            raise ProviderError(
                f"GitHub returned HTTP {resp.status_code} for {method} {path}: {message}",
                status_code=resp.status_code,
            )

        return resp.json()

    def get(self, owner: str, repo: str) -> Awaitable[dict[str, Any]]:
        return self._request("GET", f"/repos/{owner}/{repo}", self._headers())

    def get_branch(self, owner: str, repo: str, branch: str) -> Awaitable[dict[str, Any]]:
        return self._request(
            "GET",
            f"/repos/{owner}/{repo}/branches/{url_quote(branch, safe='')}",
            self._headers(),
        )

    def get_content(
        self, owner: str, repo: str, path: str, ref: str
    ) -> Awaitable[dict[str, Any]]:
        return self._request(
            "GET",
            f"/repos/{owner}/{repo}/contents/{url_quote(path.lstrip('/'))}",
            self._headers(),
            params={"ref": ref},
        )

    def create_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        description: str,
        context: str,
        target_url: str | None = None,
    ) -> Awaitable[dict[str, Any]]:
        body = {"state": state, "description": description, "context": context}
        if target_url:
            body["target_url"] = target_url
        return self._request(
            "POST", f"/repos/{owner}/{repo}/statuses/{sha}", self._headers(), json=body
        )
