"""Tests for public and private key export."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from certgen.ca.errors import ExportFailure
from certgen.ca.key_export import (
    ensure_same_public_key,
    export_private_key,
    export_subject_public_key_info,
)
from certgen.ca.provider import CryptographyProvider


class TestExportSubjectPublicKeyInfo:
    @pytest.mark.asyncio
    async def test_subject_public_key_is_pkcs1_key(self, rsa_key):
        """Test that the BIT STRING contents are the PKCS#1 RSAPublicKey."""
        exported = await export_subject_public_key_info(
            CryptographyProvider(), rsa_key.public_key()
        )

        assert exported.subject_public_key == rsa_key.public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1
        )
        assert str(exported.info["algorithm"]["algorithm"]) == "1.2.840.113549.1.1.1"

    @pytest.mark.asyncio
    async def test_two_exports_are_identical(self, rsa_key):
        provider = CryptographyProvider()

        first = await export_subject_public_key_info(provider, rsa_key.public_key())
        second = await export_subject_public_key_info(provider, rsa_key.public_key())

        ensure_same_public_key(first, second)
        assert first.der == second.der

    @pytest.mark.asyncio
    async def test_different_keys_rejected(self, rsa_key):
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        provider = CryptographyProvider()

        first = await export_subject_public_key_info(provider, rsa_key.public_key())
        second = await export_subject_public_key_info(provider, other_key.public_key())

        with pytest.raises(ExportFailure, match="differ"):
            ensure_same_public_key(first, second)

    @pytest.mark.asyncio
    async def test_provider_failure_raises_export_failure(self, rsa_key, make_provider):
        provider = make_provider(fail_on="export_key:spki")

        with pytest.raises(ExportFailure, match="public key"):
            await export_subject_public_key_info(provider, rsa_key.public_key())

    @pytest.mark.asyncio
    async def test_malformed_export_raises_export_failure(self, rsa_key):
        """Test that output which is not a SubjectPublicKeyInfo is rejected."""

        class GarbageProvider(CryptographyProvider):
            async def export_key(self, key_format, key):
                return b"\x04\x03abc"

        with pytest.raises(ExportFailure):
            await export_subject_public_key_info(GarbageProvider(), rsa_key.public_key())


class TestExportPrivateKey:
    @pytest.mark.asyncio
    async def test_pkcs8_der(self, rsa_key):
        der = await export_private_key(CryptographyProvider(), rsa_key)

        loaded = serialization.load_der_private_key(der, password=None)
        assert loaded.private_numbers() == rsa_key.private_numbers()

    @pytest.mark.asyncio
    async def test_provider_failure_raises_export_failure(self, rsa_key, make_provider):
        with pytest.raises(ExportFailure, match="private key"):
            await export_private_key(make_provider(fail_on="export_key:pkcs8"), rsa_key)
