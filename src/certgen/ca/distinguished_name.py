"""Distinguished Name construction for certificates and requests."""

from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import char
from pyasn1_modules import rfc5280

from certgen.ca.oids import COMMON_NAME, ORGANIZATION_NAME, ORGANIZATIONAL_UNIT_NAME
from certgen.domain.models import CertificateParams, Identity


def build_identity(params: CertificateParams) -> Identity:
    """Return the ordered DN attributes for the given identity fields.

    The same ordering is used for the certificate issuer, the certificate
    subject and the request subject.
    """
    return (
        (ORGANIZATIONAL_UNIT_NAME, params.organization_unit),
        (ORGANIZATION_NAME, params.organization),
        (COMMON_NAME, params.email),
    )


def build_name(identity: Identity) -> rfc5280.Name:
    """Encode an Identity as an X.501 Name, one RDN per attribute."""
    rdn_sequence = rfc5280.RDNSequence()
    for oid, value in identity:
        attribute = rfc5280.AttributeTypeAndValue()
        attribute["type"] = rfc5280.AttributeType(oid)
        attribute["value"] = der_encoder.encode(char.UTF8String(value))

        rdn = rfc5280.RelativeDistinguishedName()
        rdn.append(attribute)
        rdn_sequence.append(rdn)

    name = rfc5280.Name()
    name["rdnSequence"] = rdn_sequence
    return name
