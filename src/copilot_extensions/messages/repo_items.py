"""github.com URL grammars and the issue / pull request refs derived from them.

Three grammars are recognised::

    https://github.com/[orgs/]{owner}/{repo}[/{path}][#{hash}]
    https://github.com/{owner}/{repo}/issues/{number}[#{hash}]
    https://github.com/{owner}/{repo}/pull/{number}[/commits|checks|files][#{hash}]

Matching is unanchored, the same as a substring search.
"""
from __future__ import annotations

import re
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._types import RepoItemKind

REPO_URL_RE = re.compile(
    r"https://github\.com/(?:orgs/)?(?P<owner>[^/#?]+)/(?P<repo>[^/#?]+)"
    r"(?:/(?P<path>[^#?]*))?(?:\?[^#]*)?(?:#(?P<hash>.*))?"
)
ISSUE_URL_RE = re.compile(
    r"https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)/issues/(?P<number>\d+)"
    r"(?:#(?P<hash>.+))?"
)
PULL_URL_RE = re.compile(
    r"https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)/pull/(?P<number>\d+)"
    r"(?:/(?P<page>commits|checks|files))?(?:#(?P<hash>.+))?"
)

WEB_URL_TEMPLATE = "https://github.com/{owner}/{repo}/{plural}/{number}"
API_URL_TEMPLATE = "https://api.github.com/repos/{owner}/{repo}/{plural}/{number}"


class RepositoryUrlParts(NamedTuple):
    owner: str
    repo: str
    path: Optional[str]
    hash: Optional[str]


def match_repository_url(url: str) -> Optional[RepositoryUrlParts]:
    """Split a github.com repository URL into owner / repo / path / hash."""
    match = REPO_URL_RE.search(url or "")
    if match is None:
        return None
    return RepositoryUrlParts(
        owner=match.group("owner"),
        repo=match.group("repo"),
        path=match.group("path") or None,
        hash=match.group("hash") or None,
    )


class RepoItemRef(BaseModel):
    """An issue or pull request identified from a URL. Never transmitted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: RepoItemKind = Field(alias="type")
    owner: str
    repo: str
    number: int
    page: Optional[str] = None
    hash: Optional[str] = None
    url: str
    api: str

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, v):
        return RepoItemKind.parse(v)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Issue(RepoItemRef):
    """A github issue."""


class PullRequest(RepoItemRef):
    """A github pull request."""


def resolve_repo_item_ref(url: str) -> Optional[RepoItemRef]:
    """Match ``url`` against the issue grammar, then the pull request grammar.

    The first grammar that matches wins. ``None`` means the URL is not an
    issue or pull request URL, which is not an error.
    """
    if not url:
        return None

    for kind, pattern in ((RepoItemKind.ISSUE, ISSUE_URL_RE), (RepoItemKind.PULL, PULL_URL_RE)):
        match = pattern.search(url)
        if match is None:
            continue

        owner = match.group("owner")
        repo = match.group("repo")
        number = int(match.group("number"))
        groups = match.groupdict()
        fields = dict(owner=owner, repo=repo, number=number, plural=kind.plural)
        return RepoItemRef(
            kind=kind,
            owner=owner,
            repo=repo,
            number=number,
            page=groups.get("page") or None,
            hash=groups.get("hash") or None,
            url=WEB_URL_TEMPLATE.format(**fields),
            api=API_URL_TEMPLATE.format(**fields),
        )

    return None
