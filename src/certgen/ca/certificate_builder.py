"""Self-signed X.509 certificate assembly.

Certificate attributes:
- Issuer and Subject: the same Distinguished Name (self-signed)
- Serial number: 1
- Validity: start of the current local day to the same moment 20 years later
- Key Usage: Digital Signature only, non-critical
- Signature: sha1WithRSAEncryption with the request's key pair
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any

from opentelemetry import trace
from pyasn1.type import univ
from pyasn1_modules import rfc5280

from certgen.ca.distinguished_name import build_name
from certgen.ca.key_export import ExportedPublicKey
from certgen.ca.oids import KEY_USAGE
from certgen.ca.provider import CryptoProvider, SigningAlgorithm
from certgen.ca.signing import encode_der, fill_signature_algorithm, make_extension, sign_structure
from certgen.domain.models import Identity, ValidityWindow
from shared.config import settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Version value 0 (v1) although the certificate carries extensions; see DESIGN.md
CERTIFICATE_VERSION = 0
SERIAL_NUMBER = 1

# digitalSignature is bit 0, the most significant bit of the first octet
KEY_USAGE_DIGITAL_SIGNATURE = b"\x80"

# RFC 5280 section 4.1.2.5: UTCTime through 2049, GeneralizedTime from 2050
UTC_TIME_CUTOFF_YEAR = 2050


def _add_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year rolls over to Mar 1
        return moment.replace(year=moment.year + years, month=3, day=1)


def _localize(moment: datetime, zone: tzinfo | None) -> datetime:
    # Each wall-clock time gets the offset in force at that instant
    if zone is None:
        return moment.astimezone()
    return moment.replace(tzinfo=zone)


def compute_validity(now: datetime | None = None, years: int | None = None) -> ValidityWindow:
    """Compute the validity window from a single captured moment.

    Day truncation and year arithmetic are done on wall-clock time, so both
    ends keep the correct local offset across daylight saving changes.

    Args:
        now: The captured moment. Naive datetimes are taken as local time;
            aware ones keep their own tzinfo. Defaults to the current
            local time.
        years: Validity length in calendar years. Defaults to
            settings.CERT_VALIDITY_YEARS.
    """
    if years is None:
        years = settings.CERT_VALIDITY_YEARS
    if now is None:
        now = datetime.now()

    zone = now.tzinfo
    wall_clock = now.replace(tzinfo=None)

    return ValidityWindow(
        not_before=_localize(wall_clock.replace(hour=0, minute=0, second=0, microsecond=0), zone),
        not_after=_localize(_add_years(wall_clock, years), zone),
    )


def encode_time(moment: datetime) -> rfc5280.Time:
    """Encode a timezone-aware datetime as an X.509 Time in UTC."""
    moment = moment.astimezone(timezone.utc)
    time = rfc5280.Time()
    if moment.year < UTC_TIME_CUTOFF_YEAR:
        time["utcTime"] = moment.strftime("%y%m%d%H%M%SZ")
    else:
        time["generalTime"] = moment.strftime("%Y%m%d%H%M%SZ")
    return time


def build_key_usage_extension() -> rfc5280.Extension:
    return make_extension(KEY_USAGE, univ.BitString.fromOctetString(KEY_USAGE_DIGITAL_SIGNATURE))


async def build_signed_certificate(
    provider: CryptoProvider,
    identity: Identity,
    public_key: ExportedPublicKey,
    private_key: Any,
    algorithm: SigningAlgorithm,
    validity: ValidityWindow,
) -> bytes:
    """Assemble and self-sign a certificate.

    Returns:
        The DER encoding of the signed Certificate.

    Raises:
        SigningFailure: If signing fails.
        EncodingFailure: If the structure cannot be DER-encoded.
    """
    with tracer.start_as_current_span("build_signed_certificate") as span:
        span.set_attribute("hash", algorithm.hash_name)
        span.set_attribute("not_after", validity.not_after.isoformat())

        tbs = rfc5280.TBSCertificate()
        tbs["version"] = CERTIFICATE_VERSION
        tbs["serialNumber"] = SERIAL_NUMBER
        fill_signature_algorithm(tbs["signature"], algorithm.hash_name)
        tbs["issuer"] = build_name(identity)
        tbs["subject"] = build_name(identity)
        tbs["validity"]["notBefore"] = encode_time(validity.not_before)
        tbs["validity"]["notAfter"] = encode_time(validity.not_after)
        tbs["subjectPublicKeyInfo"] = public_key.info
        tbs["extensions"].append(build_key_usage_extension())

        signature = await sign_structure(
            provider,
            encode_der(tbs),
            private_key,
            algorithm.hash_name,
            "certificate",
        )

        certificate = rfc5280.Certificate()
        certificate["tbsCertificate"] = tbs
        fill_signature_algorithm(certificate["signatureAlgorithm"], algorithm.hash_name)
        certificate["signature"] = signature

        der = encode_der(certificate)
        logger.info(
            "certificate_signed",
            extra={
                "serial": SERIAL_NUMBER,
                "not_before": validity.not_before.isoformat(),
                "not_after": validity.not_after.isoformat(),
                "size": len(der),
            },
        )
        return der
