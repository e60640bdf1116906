"""Public and private key export stages."""

import logging
from dataclasses import dataclass
from typing import Any

from pyasn1.codec.der import decoder as der_decoder
from pyasn1_modules import rfc5280

from certgen.ca.errors import ExportFailure
from certgen.ca.provider import CryptoProvider, KeyFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedPublicKey:
    """A public key in SubjectPublicKeyInfo form."""

    der: bytes
    info: rfc5280.SubjectPublicKeyInfo

    @property
    def subject_public_key(self) -> bytes:
        """Raw octets of the subjectPublicKey BIT STRING."""
        return self.info["subjectPublicKey"].asOctets()


async def export_subject_public_key_info(
    provider: CryptoProvider, public_key: Any
) -> ExportedPublicKey:
    """Export ``public_key`` and decode it into a SubjectPublicKeyInfo structure.

    Raises:
        ExportFailure: If the provider cannot export the key or the result is
            not a valid SubjectPublicKeyInfo.
    """
    try:
        der = await provider.export_key(KeyFormat.SPKI, public_key)
        info, rest = der_decoder.decode(der, asn1Spec=rfc5280.SubjectPublicKeyInfo())
    except Exception as e:
        logger.error("public_key_export_failed", extra={"error": str(e)})
        raise ExportFailure(f"Failed to export public key: {e}") from e

    if rest:
        raise ExportFailure(f"Trailing data after SubjectPublicKeyInfo ({len(rest)} bytes)")
    return ExportedPublicKey(der=der, info=info)


def ensure_same_public_key(first: ExportedPublicKey, second: ExportedPublicKey) -> None:
    """Check that two exports of the same key encode identically."""
    if first.der != second.der:
        raise ExportFailure("SubjectPublicKeyInfo exports of the same key differ")


async def export_private_key(provider: CryptoProvider, private_key: Any) -> bytes:
    """Export the private key as PKCS#8 DER."""
    try:
        return await provider.export_key(KeyFormat.PKCS8, private_key)
    except Exception as e:
        logger.error("private_key_export_failed", extra={"error": str(e)})
        raise ExportFailure(f"Failed to export private key: {e}") from e
