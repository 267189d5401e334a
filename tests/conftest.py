"""Shared fixtures: signing keys and chat message builders."""
from __future__ import annotations

import base64

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from copilot_extensions.messages import ChatMessage


class _Sink:
    """Collects written frames and counts flushes."""

    def __init__(self) -> None:
        self.frames: list[bytes] = []
        self.flushes = 0
        self.headers: dict[str, str] = {}

    def write(self, data: bytes) -> int:
        self.frames.append(data)
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    @property
    def value(self) -> bytes:
        return b"".join(self.frames)


@pytest.fixture
def sink() -> _Sink:
    return _Sink()


@pytest.fixture
def signing_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


def public_pem(private_key) -> str:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


def sign(private_key, body: bytes) -> str:
    return base64.b64encode(private_key.sign(body, ec.ECDSA(hashes.SHA256()))).decode()


def ref(ref_type: str, data: dict, **extra) -> dict:
    return {"type": ref_type, "id": extra.pop("id", ""), "is_implicit": False, "data": data, **extra}


def current_url_ref(url: str) -> dict:
    return ref("github.current-url", {"url": url})


def repository_ref(owner: str, name: str) -> dict:
    return ref(
        "github.repository",
        {"type": "repository", "id": 7, "name": name, "ownerLogin": owner, "visibility": "public"},
        id=f"{owner}/{name}",
    )


def agent_ref(login: str) -> dict:
    return ref(
        "github.agent",
        {"login": login, "id": 99, "type": "github.agent", "url": f"https://github.com/apps/{login}"},
    )


def message(role: str, *refs: dict, name: str | None = None, content: str = "") -> ChatMessage:
    return ChatMessage.model_validate(
        {"role": role, "content": content, "name": name, "copilot_references": list(refs)}
    )


def session_message(*refs: dict, role: str = "user") -> ChatMessage:
    return message(role, *refs, name="_session")
