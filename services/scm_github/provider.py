"""Provider API abstraction.

Defines the GitHubProvider protocol that the REST client (and test doubles)
conform to. The invoker authenticates the provider right before each
attempt and immediately calls the lookup, so implementations must bind the
current credential when a lookup is called rather than when it is awaited.
"""

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GitHubProvider(Protocol):
    """Interface for the repository lookups the adapter needs.

    Lookups return an awaitable resolving to the decoded API response, or
    raising ProviderError.
    """

    def authenticate(self, credential: dict[str, str]) -> None:
        """Set the credential for the next lookup, e.g. ``{"type": "oauth", "token": ...}``."""
        ...

    def get(self, owner: str, repo: str) -> Awaitable[dict[str, Any]]:
        """Fetch repository metadata (id, full_name, permissions, ...)."""
        ...

    def get_branch(self, owner: str, repo: str, branch: str) -> Awaitable[dict[str, Any]]:
        """Fetch a branch, including its head commit and links."""
        ...

    def get_content(
        self, owner: str, repo: str, path: str, ref: str
    ) -> Awaitable[dict[str, Any]]:
        """Fetch content metadata for a path at a ref."""
        ...

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
        """Create a commit status."""
        ...
