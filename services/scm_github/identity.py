"""Repository identity codec.

Converts between the SSH remote form ``git@host:owner/repo.git#branch``,
the canonical identity ``host:repoId:branch`` handed to consumers, and the
display form shown in UIs. Pure functions, no network access.
"""

import re
from dataclasses import dataclass

from scm_github.errors import InvalidIdentityFormat

DEFAULT_BRANCH = "master"

_REMOTE_URL_RE = re.compile(r"^git@([^:]+):([^/]+)/(.+?)\.git(?:#(.+))?$")


@dataclass(frozen=True)
class RepositoryIdentity:
    """A repository and branch on a specific provider host."""

    host: str
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def decode_remote_url(url: str, normalize: bool = True) -> RepositoryIdentity:
    """Parse ``git@host:owner/repo.git[#branch]`` into its parts.

    With ``normalize`` the host, owner and repo are lowercased. The branch
    always keeps its case and defaults to ``master``.
    """
    match = _REMOTE_URL_RE.match(url)
    if not match:
        raise InvalidIdentityFormat(url)

    host, owner, repo, branch = match.groups()
    if normalize:
        host, owner, repo = host.lower(), owner.lower(), repo.lower()

    return RepositoryIdentity(
        host=host,
        owner=owner,
        repo=repo,
        branch=branch or DEFAULT_BRANCH,
    )


def format_remote_url(identity: RepositoryIdentity) -> str:
    return f"git@{identity.host}:{identity.owner}/{identity.repo}.git#{identity.branch}"


def encode_canonical(host: str, numeric_id: int | str, branch: str) -> str:
    """Join host, provider repo id and branch into the canonical identity."""
    return f"{host}:{numeric_id}:{branch}"


def decode_canonical(value: str) -> tuple[str, int, str]:
    """Split a canonical identity back into ``(host, repo_id, branch)``.

    The branch is everything after the second colon, so branch names that
    contain colons survive the round trip.
    """
    parts = value.split(":", 2)
    if len(parts) != 3 or not all(parts) or not parts[1].isdigit():
        raise InvalidIdentityFormat(value)
    host, numeric_id, branch = parts
    return host, int(numeric_id), branch


def decorate_for_display(url: str) -> dict[str, str]:
    """Build the title, subtitle and browse link for a remote URL.

    Keeps the caller's casing since the result is only ever shown to people.
    """
    identity = decode_remote_url(url, normalize=False)
    return {
        "title": f"{identity.owner}:{identity.repo}",
        "subtitle": identity.branch,
        "url": (
            f"https://{identity.host}/{identity.owner}/{identity.repo}"
            f"/tree/{identity.branch}"
        ),
    }
