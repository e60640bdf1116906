"""PEM armoring of DER structures."""

import base64
from enum import StrEnum

from certgen.ca.errors import EncodingFailure

PEM_LINE_WIDTH = 64
PEM_LINE_ENDING = "\r\n"


class PemLabel(StrEnum):
    """Armor labels for the structures the pipeline emits."""

    CERTIFICATE_REQUEST = "CERTIFICATE REQUEST"
    CERTIFICATE = "CERTIFICATE"
    PRIVATE_KEY = "PRIVATE KEY"


def encode_base64(der: bytes) -> str:
    """Base64-encode ``der`` without line wrapping.

    Raises:
        EncodingFailure: If ``der`` is not a bytes-like object.
    """
    if not isinstance(der, (bytes, bytearray, memoryview)):
        raise EncodingFailure(f"Expected bytes, got {type(der).__name__}")
    return base64.b64encode(der).decode("ascii")


def format_pem(text: str) -> str:
    """Split ``text`` into CRLF-separated lines of at most 64 characters."""
    return PEM_LINE_ENDING.join(
        text[i : i + PEM_LINE_WIDTH] for i in range(0, len(text), PEM_LINE_WIDTH)
    )


def encode_pem(der: bytes, label: PemLabel | str) -> str:
    """Armor ``der`` with BEGIN/END lines for ``label``.

    Raises:
        EncodingFailure: If ``der`` is not bytes or ``label`` is not a PemLabel value.
    """
    try:
        label = PemLabel(label)
    except ValueError:
        raise EncodingFailure(f"Unsupported PEM label: {label!r}") from None

    body = format_pem(encode_base64(der))
    return (
        f"-----BEGIN {label}-----{PEM_LINE_ENDING}"
        f"{body}{PEM_LINE_ENDING}"
        f"-----END {label}-----{PEM_LINE_ENDING}"
    )
