"""GitHub SCM adapter.

Composes the identity codec, the webhook normalizer and the resilient
invoker into the operation set the CI orchestrator consumes. Operations that
talk to GitHub are coroutines; URL formatting and webhook parsing are plain
synchronous calls with no network access.
"""

import base64
from collections.abc import Mapping
from typing import Any

from scm_github.config import ScmOptions
from scm_github.errors import NotAFile
from scm_github.events import normalize_event
from scm_github.identity import (
    DEFAULT_BRANCH,
    decode_remote_url,
    decorate_for_display,
    encode_canonical,
    format_remote_url,
)
from scm_github.invoker import ResilientInvoker
from scm_github.logging_config import get_logger
from scm_github.provider import GitHubProvider

logger = get_logger(__name__)

STATUS_CONTEXT = "Screwdriver"

_BUILD_STATES = {
    "SUCCESS": ("success", "Everything looks good!"),
}
_DEFAULT_BUILD_STATE = ("failure", "Did not work as expected.")


class GithubScm:
    """SCM operations over the GitHub API.

    Either pass a ready ``invoker`` or a ``provider`` to build one from
    ``options``. The invoker is the only path to the provider, so breaker
    state and stats cover every operation.
    """

    def __init__(
        self,
        options: ScmOptions | Mapping[str, Any] | None = None,
        provider: GitHubProvider | None = None,
        invoker: ResilientInvoker | None = None,
    ) -> None:
        if options is None:
            options = ScmOptions()
        elif not isinstance(options, ScmOptions):
            options = ScmOptions.model_validate(dict(options))
        self.options = options

        if invoker is None:
            if provider is None:
                raise ValueError("GithubScm needs a provider or an invoker")
            invoker = ResilientInvoker(provider, retry=options.retry, breaker=options.breaker)
        self.invoker = invoker

    # --- URL helpers (no network) ---

    def format_scm_url(self, scm_url: str) -> str:
        """Normalize a remote URL: lowercase repo parts, explicit branch."""
        return format_remote_url(decode_remote_url(scm_url))

    def decorate_url(self, scm_url: str) -> dict[str, str]:
        return decorate_for_display(scm_url)

    def parse_hook(
        self, payload: Mapping[str, Any], headers: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Normalize a webhook payload into a canonical event dict."""
        event = normalize_event(payload, headers)
        logger.debug("Parsed webhook", action=event.action.value, url=event.url)
        return event.as_dict()

    # --- Provider operations ---

    async def get_commit_sha(self, scm_url: str, token: str) -> str:
        identity = decode_remote_url(scm_url)
        branch = await self.invoker.invoke(
            "get_branch",
            token,
            owner=identity.owner,
            repo=identity.repo,
            branch=identity.branch,
        )
        return branch["commit"]["sha"]

    async def get_permissions(self, scm_url: str, token: str) -> dict[str, bool]:
        """Return the token holder's admin/push/pull rights on the repository."""
        identity = decode_remote_url(scm_url)
        repo = await self.invoker.invoke(
            "get", token, owner=identity.owner, repo=identity.repo
        )
        return dict(repo["permissions"])

    async def update_commit_status(
        self,
        scm_url: str,
        sha: str,
        build_status: str,
        token: str,
        url: str | None = None,
        job_name: str | None = None,
    ) -> dict[str, Any]:
        """Report a build result as a commit status; returns GitHub's response."""
        identity = decode_remote_url(scm_url)
        state, description = _BUILD_STATES.get(build_status, _DEFAULT_BUILD_STATE)
        context = f"{STATUS_CONTEXT}/{job_name}" if job_name else STATUS_CONTEXT

        params: dict[str, Any] = {
            "owner": identity.owner,
            "repo": identity.repo,
            "sha": sha,
            "state": state,
            "description": description,
            "context": context,
        }
        if url:
            params["target_url"] = url

        return await self.invoker.invoke("create_status", token, **params)

    async def get_file(
        self, scm_url: str, path: str, token: str, ref: str | None = None
    ) -> str:
        """Fetch a file and return its decoded text.

        Raises:
            NotAFile: the path is a directory, symlink or submodule.
        """
        identity = decode_remote_url(scm_url)
        content = await self.invoker.invoke(
            "get_content",
            token,
            owner=identity.owner,
            repo=identity.repo,
            path=path,
            ref=ref or DEFAULT_BRANCH,
        )

        if not isinstance(content, Mapping) or content.get("type") != "file":
            raise NotAFile(path)

        # GitHub wraps base64 content at 60 columns
        return base64.b64decode("".join(content["content"].split())).decode("utf-8")

    async def get_repo_id(self, scm_url: str, token: str) -> dict[str, str]:
        """Resolve the canonical id, full name and branch link of a repository.

        The repository and branch lookups run in sequence; the first failure
        is raised as-is.
        """
        identity = decode_remote_url(scm_url)
        repo = await self.invoker.invoke(
            "get", token, owner=identity.owner, repo=identity.repo
        )
        branch = await self.invoker.invoke(
            "get_branch",
            token,
            owner=identity.owner,
            repo=identity.repo,
            branch=identity.branch,
        )
        return {
            "id": encode_canonical(identity.host, repo["id"], identity.branch),
            "name": repo["full_name"],
            "url": branch["_links"]["html"],
        }

    async def parse_url(self, scm_url: str, token: str) -> str:
        """Resolve a remote URL to its canonical ``host:repoId:branch`` identity."""
        identity = decode_remote_url(scm_url)
        repo = await self.invoker.invoke(
            "get", token, owner=identity.owner, repo=identity.repo
        )
        return encode_canonical(identity.host, repo["id"], identity.branch)

    def stats(self) -> dict[str, Any]:
        return self.invoker.stats()
