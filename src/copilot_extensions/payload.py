"""Verification of request payloads signed by the Copilot platform.

Every agent request carries an ECDSA (P-256 / SHA-256) signature of the raw
body in the ``Github-Public-Key-Signature`` header, base64 encoded ASN.1.
Checking it against GitHub's current public key proves the request came
from GitHub and not from elsewhere on the internet.

The key is either given as a PEM string or fetched once from the public key
metadata endpoint when the verifier is built; the verifier then holds it for
its whole lifetime.
"""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional, Tuple, Union

import httpx
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from copilot_extensions.exceptions import PayloadDecodeError, PublicKeyError

logger = logging.getLogger(__name__)

PUBLIC_KEYS_URL = "https://api.github.com/meta/public_keys/copilot_api"

_DEFAULT_TIMEOUT = httpx.Timeout(10.0)


def parse_public_key(pem: str) -> ec.EllipticCurvePublicKey:
    """Parse a PEM encoded EC public key.

    Literal ``\\n`` sequences (as found in env files) are turned into real
    newlines first.
    """
    pem = pem.replace("\\n", "\n")
    try:
        key = load_pem_public_key(pem.encode("utf-8"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise PublicKeyError("error parsing PEM block with GitHub public key") from e

    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise PublicKeyError(
            "GitHub key is not ECDSA",
            details={"key_type": type(key).__name__},
        )
    return key


async def fetch_public_key(
    url: str = PUBLIC_KEYS_URL,
    client: Optional[httpx.AsyncClient] = None,
) -> Tuple[str, str]:
    """Fetch the current signing key from the metadata endpoint.

    Returns:
        ``(key_identifier, pem)`` of the entry flagged ``is_current``.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT) as owned:
            return await fetch_public_key(url, owned)

    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        raise PublicKeyError(f"failed to fetch public key: {e}", details={"url": url}) from e

    if resp.status_code != 200:
        raise PublicKeyError(
            f"failed to fetch public key: {resp.status_code} {resp.reason_phrase}",
            details={"url": url, "status_code": resp.status_code},
        )

    try:
        body = resp.json()
        public_keys = body.get("public_keys") or []
    except (ValueError, AttributeError) as e:
        raise PublicKeyError("failed to decode public key", details={"url": url}) from e

    for entry in public_keys:
        if isinstance(entry, dict) and entry.get("is_current") and entry.get("key"):
            return entry.get("key_identifier", ""), entry["key"]

    raise PublicKeyError("could not find current public key", details={"url": url})


class PayloadVerifier:
    """Checks request bodies against the platform's signing key."""

    def __init__(self, public_key: ec.EllipticCurvePublicKey, key_identifier: str = ""):
        self._public_key = public_key
        self.key_identifier = key_identifier

    @classmethod
    def from_key(cls, pem: str, key_identifier: str = "") -> "PayloadVerifier":
        """Build a verifier from an explicit PEM public key."""
        return cls(parse_public_key(pem), key_identifier)

    @classmethod
    async def from_metadata_endpoint(
        cls,
        url: str = PUBLIC_KEYS_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "PayloadVerifier":
        """Build a verifier from the key currently published by GitHub."""
        key_identifier, pem = await fetch_public_key(url, client)
        logger.info("Using Copilot public key %s", key_identifier or "(unnamed)")
        return cls(parse_public_key(pem), key_identifier)

    def verify(self, body: Union[bytes, str], signature: str) -> bool:
        """Return whether ``signature`` is a valid signature of ``body``.

        Raises:
            PayloadDecodeError: ``signature`` is not base64 encoded ASN.1
                ``(r, s)``. A decodable signature that does not match returns
                ``False`` instead.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        try:
            der = base64.b64decode(signature or "", validate=True)
        except (binascii.Error, ValueError) as e:
            raise PayloadDecodeError("payload signature is not valid base64") from e

        try:
            r, s = decode_dss_signature(der)
        except ValueError as e:
            raise PayloadDecodeError("payload signature is not a valid ASN.1 ECDSA signature") from e

        try:
            self._public_key.verify(
                encode_dss_signature(r, s),
                body,
                ec.ECDSA(hashes.SHA256()),
            )
        except InvalidSignature:
            return False
        return True
