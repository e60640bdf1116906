"""Shared fixtures for certgen tests."""

import asyncio
import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pyasn1.codec.der import decoder as der_decoder
from pyasn1_modules import rfc5280

from certgen.ca.key_export import ExportedPublicKey
from certgen.ca.provider import CryptographyProvider
from certgen.domain.models import CertificateParams, KeyPairMaterial


class StubProvider:
    """CryptoProvider that delegates to CryptographyProvider.

    Fails the operation named by ``fail_on`` (e.g. "sign" or
    "export_key:pkcs8") and can stall key generation to exercise timeouts.
    Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        fail_on: str | None = None,
        available: bool = True,
        key_generation_delay: float = 0.0,
    ) -> None:
        self._inner = CryptographyProvider()
        self.fail_on = fail_on
        self.available = available
        self.key_generation_delay = key_generation_delay
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return self.available

    async def _call(self, name, *args):
        self.calls.append(name)
        if self.fail_on == name or self.fail_on == name.split(":")[0]:
            raise RuntimeError(f"{name} rejected by stub")
        return await getattr(self._inner, name.split(":")[0])(*args)

    async def generate_key_pair(self, algorithm):
        if self.key_generation_delay:
            await asyncio.sleep(self.key_generation_delay)
        return await self._call("generate_key_pair", algorithm)

    async def digest(self, hash_name, data):
        return await self._call("digest", hash_name, data)

    async def sign(self, data, private_key, hash_name):
        return await self._call("sign", data, private_key, hash_name)

    async def export_key(self, key_format, key):
        return await self._call(f"export_key:{key_format}", key_format, key)


def pem_to_der(pem: str) -> bytes:
    """Strip armor lines and CRLFs, then base64-decode the body."""
    lines = pem.split("\r\n")
    assert lines[0].startswith("-----BEGIN ")
    assert lines[-2].startswith("-----END ")
    return base64.b64decode("".join(lines[1:-2]))


@pytest.fixture
def make_provider():
    return StubProvider


@pytest.fixture
def params() -> CertificateParams:
    return CertificateParams(
        organization="TestOrg",
        organization_unit="TestOrgUnit",
        email="test@mail.com",
    )


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def key_pair(rsa_key) -> KeyPairMaterial:
    return KeyPairMaterial(
        public_key=rsa_key.public_key(),
        private_key=rsa_key,
        algorithm="RSA-2048",
    )


@pytest.fixture(scope="session")
def exported_public_key(rsa_key) -> ExportedPublicKey:
    der = rsa_key.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    info, _ = der_decoder.decode(der, asn1Spec=rfc5280.SubjectPublicKeyInfo())
    return ExportedPublicKey(der=der, info=info)


@pytest.fixture
def decode_pem():
    return pem_to_der
