"""Tests for the repository identity codec."""

import pytest

from scm_github.errors import InvalidIdentityFormat
from scm_github.identity import (
    RepositoryIdentity,
    decode_canonical,
    decode_remote_url,
    decorate_for_display,
    encode_canonical,
    format_remote_url,
)


class TestDecodeRemoteUrl:
    def test_full_url(self):
        identity = decode_remote_url("git@github.com:screwdriver-cd/models.git#develop")

        assert identity == RepositoryIdentity(
            host="github.com", owner="screwdriver-cd", repo="models", branch="develop"
        )
        assert identity.full_name == "screwdriver-cd/models"

    def test_defaults_branch_to_master(self):
        identity = decode_remote_url("git@github.com:screwdriver-cd/models.git")
        assert identity.branch == "master"

    def test_lowercases_repo_parts_and_keeps_branch_case(self):
        identity = decode_remote_url("git@GitHub.com:Screwdriver-cd/SCM-GitHub.git#Test")

        assert identity.host == "github.com"
        assert identity.owner == "screwdriver-cd"
        assert identity.repo == "scm-github"
        assert identity.branch == "Test"

    def test_without_normalize_keeps_case(self):
        identity = decode_remote_url("git@github.com:iAm/theCaptain.git#boat", normalize=False)

        assert identity.owner == "iAm"
        assert identity.repo == "theCaptain"

    def test_branch_with_slashes(self):
        identity = decode_remote_url("git@github.com:foo/bar.git#feature/Thing")
        assert identity.branch == "feature/Thing"

    @pytest.mark.parametrize(
        "url",
        ["foo", "https://github.com/foo/bar", "git@github.com:foo.git", "git@github.com:foo/bar"],
    )
    def test_invalid_url_raises(self, url):
        with pytest.raises(InvalidIdentityFormat) as exc_info:
            decode_remote_url(url)

        assert str(exc_info.value) == f"Invalid scmUrl: {url}"
        assert exc_info.value.value == url


class TestFormatRemoteUrl:
    def test_adds_branch(self):
        identity = decode_remote_url("git@github.com:Screwdriver-cd/scm-github.git")
        assert format_remote_url(identity) == "git@github.com:screwdriver-cd/scm-github.git#master"


class TestCanonicalIdentity:
    def test_encode(self):
        assert encode_canonical("github.com", 8675309, "boat") == "github.com:8675309:boat"

    def test_encode_from_decoded_url(self):
        identity = decode_remote_url("git@GitHub.com:iAm/theCaptain.git#Boat")
        assert encode_canonical(identity.host, 42, identity.branch) == "github.com:42:Boat"

    def test_decode(self):
        assert decode_canonical("github.com:8675309:boat") == ("github.com", 8675309, "boat")

    def test_decode_keeps_colons_in_branch(self):
        value = encode_canonical("github.com", 1, "release:2024")
        assert decode_canonical(value) == ("github.com", 1, "release:2024")

    @pytest.mark.parametrize("value", ["github.com", "github.com:abc:master", "github.com:1:"])
    def test_decode_invalid(self, value):
        with pytest.raises(InvalidIdentityFormat):
            decode_canonical(value)


class TestDecorateForDisplay:
    def test_complete_url(self):
        assert decorate_for_display("git@github.com:iAm/theCaptain.git#boat") == {
            "subtitle": "boat",
            "title": "iAm:theCaptain",
            "url": "https://github.com/iAm/theCaptain/tree/boat",
        }

    def test_default_branch(self):
        result = decorate_for_display("git@github.com:foo/bar.git")

        assert result["subtitle"] == "master"
        assert result["url"] == "https://github.com/foo/bar/tree/master"

    def test_invalid(self):
        with pytest.raises(InvalidIdentityFormat):
            decorate_for_display("foo")
