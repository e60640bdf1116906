"""Cryptographic provider and key pair provisioning.

The pipeline never calls ``cryptography`` directly. It goes through a
CryptoProvider, which mirrors the small set of operations it needs:

- key pair generation for a signing algorithm
- message digests
- signing of encoded structures
- key export (SubjectPublicKeyInfo and PKCS#8, both DER)

Blocking operations run in a worker thread so the event loop stays free and
the caller's timeout can fire while a key is being generated.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from opentelemetry import trace

from certgen.ca.errors import KeyGenerationFailure, ProviderUnavailable
from certgen.domain.models import KeyPairMaterial
from certgen.metrics import certgen_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RSASSA_PKCS1_V1_5 = "RSASSA-PKCS1-v1_5"
SHA1 = "SHA-1"

_HASH_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    SHA1: hashes.SHA1,
}


class KeyFormat(StrEnum):
    """Export formats supported by the provider."""

    SPKI = "spki"
    PKCS8 = "pkcs8"


@dataclass(frozen=True)
class SigningAlgorithm:
    """Key generation and signature parameters."""

    name: str = RSASSA_PKCS1_V1_5
    hash_name: str = SHA1
    modulus_length: int = 2048
    public_exponent: int = 65537


class CryptoProvider(Protocol):
    """Operations the pipeline needs from a cryptographic backend."""

    def is_available(self) -> bool: ...

    async def generate_key_pair(self, algorithm: SigningAlgorithm) -> KeyPairMaterial: ...

    async def digest(self, hash_name: str, data: bytes) -> bytes: ...

    async def sign(self, data: bytes, private_key: Any, hash_name: str) -> bytes: ...

    async def export_key(self, key_format: KeyFormat | str, key: Any) -> bytes: ...


def _hash_for(hash_name: str) -> hashes.HashAlgorithm:
    try:
        return _HASH_ALGORITHMS[hash_name]()
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {hash_name}") from None


class CryptographyProvider:
    """CryptoProvider backed by the ``cryptography`` package."""

    def is_available(self) -> bool:
        """Check that the backend can compute the digest the pipeline signs with."""
        try:
            hashes.Hash(hashes.SHA1())
        except UnsupportedAlgorithm:
            return False
        return True

    async def generate_key_pair(self, algorithm: SigningAlgorithm) -> KeyPairMaterial:
        if algorithm.name != RSASSA_PKCS1_V1_5:
            raise ValueError(f"Unsupported signing algorithm: {algorithm.name}")
        _hash_for(algorithm.hash_name)

        private_key = await asyncio.to_thread(
            rsa.generate_private_key,
            public_exponent=algorithm.public_exponent,
            key_size=algorithm.modulus_length,
        )
        return KeyPairMaterial(
            public_key=private_key.public_key(),
            private_key=private_key,
            algorithm=f"RSA-{private_key.key_size}",
        )

    async def digest(self, hash_name: str, data: bytes) -> bytes:
        digest = hashes.Hash(_hash_for(hash_name))
        digest.update(data)
        return digest.finalize()

    async def sign(self, data: bytes, private_key: Any, hash_name: str) -> bytes:
        return await asyncio.to_thread(
            private_key.sign,
            data,
            padding.PKCS1v15(),
            _hash_for(hash_name),
        )

    async def export_key(self, key_format: KeyFormat | str, key: Any) -> bytes:
        if key_format == KeyFormat.SPKI:
            return key.public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        if key_format == KeyFormat.PKCS8:
            return key.private_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        raise ValueError(f"Unsupported key format: {key_format}")


def get_crypto_provider() -> CryptographyProvider:
    """Return the default provider.

    Raises:
        ProviderUnavailable: If the backend cannot compute SHA-1 digests
            (for example an OpenSSL build in FIPS-only mode).
    """
    provider = CryptographyProvider()
    if not provider.is_available():
        raise ProviderUnavailable("No cryptographic provider supporting SHA-1 is available")
    return provider


async def provision_key_pair(
    provider: CryptoProvider | None,
    algorithm: SigningAlgorithm,
) -> KeyPairMaterial:
    """Generate the key pair for one pipeline run.

    Raises:
        ProviderUnavailable: If no provider is present or it reports unavailable.
        KeyGenerationFailure: If the provider rejects key generation.
    """
    with tracer.start_as_current_span("provision_key_pair") as span:
        span.set_attribute("algorithm", algorithm.name)
        span.set_attribute("modulus_length", algorithm.modulus_length)

        if provider is None or not provider.is_available():
            raise ProviderUnavailable("No cryptographic provider available for key generation")

        try:
            key_pair = await provider.generate_key_pair(algorithm)
        except Exception as e:
            logger.error(
                "key_generation_failed",
                extra={"algorithm": algorithm.name, "error": str(e)},
            )
            raise KeyGenerationFailure(f"Failed to generate key pair: {e}") from e

        certgen_metrics.record_key_pair_generated(key_pair.algorithm)
        logger.info("key_pair_generated", extra={"algorithm": key_pair.algorithm})
        return key_pair
