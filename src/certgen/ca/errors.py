"""Error types raised by the certificate generation pipeline.

Every stage failure surfaces as exactly one subclass of
CertificateGenerationError. The ``stage`` attribute names the pipeline stage
that failed and is used as the metrics label.
"""


class CertificateGenerationError(Exception):
    """Raised when certificate or request generation fails."""

    stage = "pipeline"


class ProviderUnavailable(CertificateGenerationError):
    """Raised when no usable cryptographic provider is present."""

    stage = "provider"


class KeyGenerationFailure(CertificateGenerationError):
    """Raised when the provider rejects key pair generation."""

    stage = "key_generation"


class DigestFailure(CertificateGenerationError):
    """Raised when computing a digest fails."""

    stage = "digest"


class SigningFailure(CertificateGenerationError):
    """Raised when signing a request or certificate fails."""

    stage = "signing"


class ExportFailure(CertificateGenerationError):
    """Raised when exporting public or private key material fails."""

    stage = "export"


class EncodingFailure(CertificateGenerationError):
    """Raised when DER or PEM encoding fails."""

    stage = "encoding"


class GenerationTimeout(CertificateGenerationError):
    """Raised when the pipeline does not finish within the configured time."""

    stage = "timeout"
