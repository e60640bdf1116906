"""Object identifiers used in generated requests and certificates."""

from pyasn1.type import univ

# Distinguished Name attribute types
ORGANIZATIONAL_UNIT_NAME = "2.5.4.11"
ORGANIZATION_NAME = "2.5.4.10"
# Carries the email value; see DESIGN.md for why this is not emailAddress
COMMON_NAME = "2.5.4.3"

# Extensions
SUBJECT_KEY_IDENTIFIER = univ.ObjectIdentifier("2.5.29.14")
KEY_USAGE = univ.ObjectIdentifier("2.5.29.15")

# PKCS#9 extensionRequest attribute
EXTENSION_REQUEST = univ.ObjectIdentifier("1.2.840.113549.1.9.14")

# Signature algorithms
SHA1_WITH_RSA_ENCRYPTION = univ.ObjectIdentifier("1.2.840.113549.1.1.5")

SIGNATURE_ALGORITHMS = {
    "SHA-1": SHA1_WITH_RSA_ENCRYPTION,
}
