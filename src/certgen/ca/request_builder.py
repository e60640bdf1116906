"""PKCS#10 certification request assembly.

The request carries one ``extensionRequest`` attribute with a
SubjectKeyIdentifier extension. The identifier is the SHA-1 digest of the
subjectPublicKey BIT STRING contents (RFC 5280 section 4.2.1.2, method 1).
"""

import logging
from typing import Any

from opentelemetry import trace
from pyasn1.type import univ
from pyasn1_modules import rfc2986, rfc5280

from certgen.ca.distinguished_name import build_name
from certgen.ca.errors import DigestFailure
from certgen.ca.key_export import ExportedPublicKey
from certgen.ca.oids import EXTENSION_REQUEST, SUBJECT_KEY_IDENTIFIER
from certgen.ca.provider import SHA1, CryptoProvider, SigningAlgorithm
from certgen.ca.signing import encode_der, fill_signature_algorithm, make_extension, sign_structure
from certgen.domain.models import Identity

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

REQUEST_VERSION = 0


async def compute_subject_key_identifier(
    provider: CryptoProvider, public_key: ExportedPublicKey
) -> bytes:
    """Return the SHA-1 digest of the raw subjectPublicKey octets.

    Raises:
        DigestFailure: If the provider fails to compute the digest.
    """
    try:
        return await provider.digest(SHA1, public_key.subject_public_key)
    except Exception as e:
        logger.error("subject_key_identifier_digest_failed", extra={"error": str(e)})
        raise DigestFailure(f"Failed to compute subject key identifier: {e}") from e


def build_extension_request(key_identifier: bytes) -> rfc5280.Attribute:
    """Wrap a SubjectKeyIdentifier extension in a PKCS#9 extensionRequest attribute."""
    extensions = rfc5280.Extensions()
    extensions.append(make_extension(SUBJECT_KEY_IDENTIFIER, univ.OctetString(key_identifier)))

    attribute = rfc5280.Attribute()
    attribute["type"] = EXTENSION_REQUEST
    attribute["values"].append(encode_der(extensions))
    return attribute


async def build_signed_request(
    provider: CryptoProvider,
    identity: Identity,
    public_key: ExportedPublicKey,
    private_key: Any,
    algorithm: SigningAlgorithm,
) -> bytes:
    """Assemble and sign a certification request.

    Returns:
        The DER encoding of the signed CertificationRequest.

    Raises:
        DigestFailure: If the subject key identifier cannot be computed.
        SigningFailure: If signing fails.
        EncodingFailure: If the structure cannot be DER-encoded.
    """
    with tracer.start_as_current_span("build_signed_request") as span:
        span.set_attribute("hash", algorithm.hash_name)

        request_info = rfc2986.CertificationRequestInfo()
        request_info["version"] = REQUEST_VERSION
        request_info["subject"] = build_name(identity)
        request_info["subjectPKInfo"] = public_key.info

        key_identifier = await compute_subject_key_identifier(provider, public_key)
        request_info["attributes"].append(build_extension_request(key_identifier))

        signature = await sign_structure(
            provider,
            encode_der(request_info),
            private_key,
            algorithm.hash_name,
            "request",
        )

        request = rfc2986.CertificationRequest()
        request["certificationRequestInfo"] = request_info
        fill_signature_algorithm(request["signatureAlgorithm"], algorithm.hash_name)
        request["signature"] = signature

        der = encode_der(request)
        logger.info(
            "certificate_request_signed",
            extra={"key_identifier": key_identifier.hex(), "size": len(der)},
        )
        return der
