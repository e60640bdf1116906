"""Tests for identity fields and Distinguished Name construction."""

import pytest
from pydantic import ValidationError
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import char

from certgen.ca.distinguished_name import build_identity, build_name
from certgen.domain.models import CertificateParams


def _decoded_attributes(name):
    attributes = []
    for rdn in name["rdnSequence"]:
        assert len(rdn) == 1
        attribute = rdn[0]
        value, _ = der_decoder.decode(bytes(attribute["value"]), asn1Spec=char.UTF8String())
        attributes.append((str(attribute["type"]), str(value)))
    return attributes


class TestBuildIdentity:
    def test_order_and_values(self, params):
        """Test OU, O, CN ordering with the email carried in CN."""
        identity = build_identity(params)

        assert identity == (
            ("2.5.4.11", "TestOrgUnit"),
            ("2.5.4.10", "TestOrg"),
            ("2.5.4.3", "test@mail.com"),
        )

    def test_accepts_empty_strings(self):
        """Test that the builder itself performs no validation."""
        params = CertificateParams.model_construct(
            organization="", organization_unit="", email=""
        )

        identity = build_identity(params)

        assert [value for _, value in identity] == ["", "", ""]


class TestBuildName:
    def test_one_rdn_per_attribute(self, params):
        """Test that each attribute sits in its own RDN as a UTF8String."""
        name = build_name(build_identity(params))

        assert _decoded_attributes(name) == [
            ("2.5.4.11", "TestOrgUnit"),
            ("2.5.4.10", "TestOrg"),
            ("2.5.4.3", "test@mail.com"),
        ]

    def test_repeated_builds_encode_identically(self, params):
        """Test that separately built names for the same identity match byte-for-byte."""
        identity = build_identity(params)

        assert der_encoder.encode(build_name(identity)) == der_encoder.encode(build_name(identity))

    def test_non_ascii_values(self):
        """Test that non-ASCII text survives UTF-8 encoding."""
        identity = (("2.5.4.10", "Økologisk Ärende"),)

        assert _decoded_attributes(build_name(identity)) == [("2.5.4.10", "Økologisk Ärende")]

    def test_empty_value_encodes(self):
        """Test that an empty value produces an empty UTF8String."""
        encoded = der_encoder.encode(build_name((("2.5.4.3", ""),)))

        assert encoded.endswith(b"\x0c\x00")


class TestCertificateParams:
    def test_accepts_camel_case_alias(self):
        """Test that organizationUnit is accepted as an alias."""
        params = CertificateParams.model_validate(
            {"organization": "O", "organizationUnit": "OU", "email": "a@b.c"}
        )

        assert params.organization_unit == "OU"

    @pytest.mark.parametrize("field", ["organization", "organization_unit", "email"])
    def test_empty_field_rejected(self, field):
        values = {"organization": "O", "organization_unit": "OU", "email": "a@b.c", field: ""}

        with pytest.raises(ValidationError):
            CertificateParams(**values)

    def test_overlong_field_rejected(self):
        """Test the 64 character upper bound."""
        with pytest.raises(ValidationError):
            CertificateParams(organization="x" * 65, organization_unit="OU", email="a@b.c")

    def test_control_characters_rejected(self):
        with pytest.raises(ValidationError, match="control characters"):
            CertificateParams(organization="Org\nName", organization_unit="OU", email="a@b.c")

    def test_max_length_accepted(self):
        params = CertificateParams(organization="x" * 64, organization_unit="OU", email="a@b.c")

        assert len(params.organization) == 64
