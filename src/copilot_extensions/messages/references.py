"""Copilot references attached to chat messages.

A reference is a tagged union keyed by its ``type`` string. The ``data``
payload is decoded into one concrete model per known type. Types this module
does not know about decode to ``OtherReferenceData`` instead of failing, so
new platform reference kinds do not break request parsing.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from ._types import ReferenceType
from .repo_items import RepoItemRef, match_repository_url, resolve_repo_item_ref

logger = logging.getLogger(__name__)


class _ReferenceData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── github.* ─────────────────────────────────────────────────────────────────

class GitHubRedactedData(_ReferenceData):
    """Placeholder for a reference the platform withheld.

    ``type`` holds the reference type that was redacted.
    """
    type: str = ""


class GitHubAgentData(_ReferenceData):
    avatar_url: str = Field(default="", alias="avatarURL")
    id: int = 0
    login: str = ""
    type: str = ReferenceType.GITHUB_AGENT.value
    url: str = ""


class GitHubCurrentUrlData(_ReferenceData):
    """The page the user is looking at on github.com.

    Only ``url`` is transmitted. ``owner``, ``repo``, ``path`` and ``hash``
    are derived from it, and so is ``repo_item`` when the page is an issue
    or pull request.
    """
    type: str = ReferenceType.GITHUB_CURRENT_URL.value
    url: str = ""
    owner: str = ""
    repo: str = ""
    path: Optional[str] = None
    hash: Optional[str] = None
    repo_item: Optional[RepoItemRef] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _derive_from_url(self) -> "GitHubCurrentUrlData":
        self.type = ReferenceType.GITHUB_CURRENT_URL.value
        parts = match_repository_url(self.url)
        if parts is not None:
            self.owner = parts.owner
            self.repo = parts.repo
            self.path = parts.path
            self.hash = parts.hash
        self.repo_item = resolve_repo_item_ref(self.url)
        return self


class GitHubFileData(_ReferenceData):
    commit_oid: str = Field(default="", alias="commitOID")
    language_id: int = Field(default=0, alias="languageID")
    language_name: str = Field(default="", alias="languageName")
    path: str = ""
    ref: str = ""
    repo_id: int = Field(default=0, alias="repoID")
    repo_name: str = Field(default="", alias="repoName")
    repo_owner: str = Field(default="", alias="repoOwner")
    type: str = "file"
    url: str = ""


class RepositoryLanguage(BaseModel):
    name: str = ""
    percent: float = 0.0


class RepositoryRefInfo(BaseModel):
    name: str = ""
    type: str = ""


class GitHubRepositoryData(_ReferenceData):
    commit_oid: str = Field(default="", alias="commitOID")
    description: str = ""
    id: int = 0
    languages: List[RepositoryLanguage] = Field(default_factory=list)
    name: str = ""
    owner_login: str = Field(default="", alias="ownerLogin")
    owner_type: str = Field(default="", alias="ownerType")
    readme_path: str = Field(default="", alias="readmePath")
    ref: str = ""
    ref_info: RepositoryRefInfo = Field(default_factory=RepositoryRefInfo, alias="refInfo")
    type: str = "repository"
    visibility: str = ""


class SnippetRange(BaseModel):
    start: int = 0
    end: int = 0


class GitHubSnippetData(_ReferenceData):
    commit_oid: str = Field(default="", alias="commitOID")
    language_id: int = Field(default=0, alias="languageID")
    language_name: str = Field(default="", alias="languageName")
    path: str = ""
    range: SnippetRange = Field(default_factory=SnippetRange)
    ref: str = ""
    repo_id: int = Field(default=0, alias="repoID")
    repo_name: str = Field(default="", alias="repoName")
    repo_owner: str = Field(default="", alias="repoOwner")
    type: str = "snippet"
    url: str = ""


# ── client.* ────────────────────────────────────────────────────────────────

class ClientFileData(_ReferenceData):
    """A file open in the user's editor."""
    content: str = ""
    language: str = ""
    type: str = ReferenceType.CLIENT_FILE.value


class SelectionLocation(BaseModel):
    line: int = 0
    col: int = 0


class ClientSelectionData(_ReferenceData):
    """A text selection in the user's editor."""
    content: str = ""
    end: SelectionLocation = Field(default_factory=SelectionLocation)
    start: SelectionLocation = Field(default_factory=SelectionLocation)
    type: str = ReferenceType.CLIENT_SELECTION.value


class OtherReferenceData(_ReferenceData):
    """Data of a reference type this library does not model.

    ``raw`` is the payload as received: usually an object, but any JSON value
    (or undecodable text) is kept.
    """
    reference_type: str
    raw: Any = None

    @model_serializer
    def ser_model(self) -> Any:
        return self.raw


ReferenceData = Union[
    GitHubRedactedData,
    GitHubAgentData,
    GitHubCurrentUrlData,
    GitHubFileData,
    GitHubRepositoryData,
    GitHubSnippetData,
    ClientFileData,
    ClientSelectionData,
    OtherReferenceData,
]

_DATA_MODELS: Dict[str, type] = {
    ReferenceType.GITHUB_REDACTED.value: GitHubRedactedData,
    ReferenceType.GITHUB_AGENT.value: GitHubAgentData,
    ReferenceType.GITHUB_CURRENT_URL.value: GitHubCurrentUrlData,
    ReferenceType.GITHUB_FILE.value: GitHubFileData,
    ReferenceType.GITHUB_REPOSITORY.value: GitHubRepositoryData,
    ReferenceType.GITHUB_SNIPPET.value: GitHubSnippetData,
    ReferenceType.CLIENT_FILE.value: ClientFileData,
    ReferenceType.CLIENT_SELECTION.value: ClientSelectionData,
}


def _loads_lenient(raw: Any) -> Any:
    if not isinstance(raw, (str, bytes, bytearray)):
        return raw
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw


def decode_reference(
    reference_type: str,
    raw: Any,
) -> ReferenceData:
    """Decode the ``data`` payload of a reference according to its type.

    ``raw`` may be a mapping or a JSON document. Malformed data for a known
    type raises (``ValueError`` / pydantic ``ValidationError``); an unknown
    type never does, whatever its data looks like.
    """
    model = _DATA_MODELS.get(str(reference_type))
    if model is None:
        logger.debug("Unknown reference type %r, keeping raw data", reference_type)
        return OtherReferenceData(reference_type=str(reference_type), raw=_loads_lenient(raw))

    if isinstance(raw, (str, bytes, bytearray)):
        raw = json.loads(raw) if raw else None
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"reference data for {reference_type!r} must be a JSON object")
    return model.model_validate(dict(raw))


class ReferenceMetadata(BaseModel):
    """Display hints for the chat UI."""
    display_name: str = ""
    display_icon: str = ""
    display_url: str = ""


class Reference(BaseModel):
    """A typed attachment on a chat message (file, repository, URL, ...)."""

    type: str
    id: str = ""
    is_implicit: bool = False
    metadata: ReferenceMetadata = Field(default_factory=ReferenceMetadata)
    data: Optional[ReferenceData] = None

    @model_validator(mode="before")
    @classmethod
    def _decode_data(cls, values: Any) -> Any:
        if isinstance(values, Mapping):
            data = values.get("data")
            if not isinstance(data, _ReferenceData):
                values = {**values, "data": decode_reference(values.get("type", ""), data)}
        return values

    @property
    def reference_type(self) -> Optional[ReferenceType]:
        """The known type of this reference, or ``None`` for other types."""
        try:
            return ReferenceType(self.type)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
