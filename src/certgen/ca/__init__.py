"""Certificate and request generation for the certgen service.

This module provides:
- Distinguished Name construction from identity fields
- Key pair provisioning through a pluggable crypto provider
- PKCS#10 request and self-signed X.509 certificate assembly
- PEM armoring of the signed structures
"""

from certgen.ca.errors import (
    CertificateGenerationError,
    DigestFailure,
    EncodingFailure,
    ExportFailure,
    GenerationTimeout,
    KeyGenerationFailure,
    ProviderUnavailable,
    SigningFailure,
)
from certgen.ca.provider import CryptographyProvider, CryptoProvider, SigningAlgorithm

__all__ = [
    "CertificateGenerationError",
    "CryptoProvider",
    "CryptographyProvider",
    "DigestFailure",
    "EncodingFailure",
    "ExportFailure",
    "GenerationTimeout",
    "KeyGenerationFailure",
    "ProviderUnavailable",
    "SigningAlgorithm",
    "SigningFailure",
]
