"""Value types passed between pipeline stages."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound shared by ub-common-name, ub-organization-name and
# ub-organizational-unit-name (RFC 5280 appendix A.1)
MAX_ATTRIBUTE_LENGTH = 64

# Ordered (OID, value) pairs of a Distinguished Name
Identity = tuple[tuple[str, str], ...]


class CertificateParams(BaseModel):
    """Identity fields supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    organization: str = Field(..., min_length=1, max_length=MAX_ATTRIBUTE_LENGTH)
    organization_unit: str = Field(
        ..., min_length=1, max_length=MAX_ATTRIBUTE_LENGTH, alias="organizationUnit"
    )
    email: str = Field(..., min_length=1, max_length=MAX_ATTRIBUTE_LENGTH)

    @field_validator("organization", "organization_unit", "email")
    @classmethod
    def reject_control_characters(cls, value: str) -> str:
        if not value.isprintable():
            raise ValueError("must not contain control characters")
        return value


@dataclass(frozen=True)
class KeyPairMaterial:
    """Key handles owned by a single pipeline run."""

    public_key: Any
    private_key: Any
    algorithm: str

    def __repr__(self) -> str:
        return f"KeyPairMaterial(algorithm={self.algorithm!r})"


@dataclass(frozen=True)
class ValidityWindow:
    """Certificate validity period (timezone-aware)."""

    not_before: datetime
    not_after: datetime


@dataclass(frozen=True)
class CertificateBundle:
    """Result of one pipeline run."""

    request: str
    raw_request: str
    cert: str
    key: str

    def to_dict(self) -> dict[str, str]:
        """Return the bundle keyed the way callers of the generator expect."""
        return {
            "request": self.request,
            "rawRequest": self.raw_request,
            "cert": self.cert,
            "key": self.key,
        }
