"""Helpers shared by the request and certificate assemblers."""

import logging
from typing import Any

from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ
from pyasn1_modules import rfc5280

from certgen.ca.errors import EncodingFailure, SigningFailure
from certgen.ca.oids import SIGNATURE_ALGORITHMS
from certgen.ca.provider import CryptoProvider
from certgen.metrics import certgen_metrics

logger = logging.getLogger(__name__)

_DER_NULL = der_encoder.encode(univ.Null(""))


def encode_der(value: Any) -> bytes:
    """DER-encode a pyasn1 value, reporting failures as EncodingFailure."""
    try:
        return der_encoder.encode(value)
    except PyAsn1Error as e:
        raise EncodingFailure(f"Failed to DER-encode {type(value).__name__}: {e}") from e


def fill_signature_algorithm(algorithm_identifier: Any, hash_name: str) -> None:
    """Set an AlgorithmIdentifier in place to <hash>WithRSAEncryption, NULL parameters."""
    try:
        oid = SIGNATURE_ALGORITHMS[hash_name]
    except KeyError:
        raise SigningFailure(f"No RSA signature algorithm for hash {hash_name}") from None
    algorithm_identifier["algorithm"] = oid
    algorithm_identifier["parameters"] = _DER_NULL


def make_extension(oid: univ.ObjectIdentifier, value: Any, critical: bool = False) -> rfc5280.Extension:
    """Build an Extension whose extnValue wraps the DER of ``value``."""
    extension = rfc5280.Extension()
    extension["extnID"] = oid
    extension["critical"] = critical
    extension["extnValue"] = encode_der(value)
    return extension


async def sign_structure(
    provider: CryptoProvider,
    to_be_signed: bytes,
    private_key: Any,
    hash_name: str,
    structure: str,
) -> univ.BitString:
    """Sign encoded bytes and return the signature as a BIT STRING.

    Args:
        structure: "request" or "certificate", used for logs and metrics.

    Raises:
        SigningFailure: If the provider fails to sign.
    """
    try:
        signature = await provider.sign(to_be_signed, private_key, hash_name)
    except Exception as e:
        logger.error(
            "signing_failed",
            extra={"structure": structure, "hash": hash_name, "error": str(e)},
        )
        raise SigningFailure(f"Failed to sign {structure}: {e}") from e

    certgen_metrics.record_structure_signed(structure)
    return univ.BitString.fromOctetString(signature)
