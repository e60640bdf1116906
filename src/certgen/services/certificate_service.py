"""Certificate service: runs the generation pipeline for one identity."""

import asyncio
import logging
import time
from datetime import datetime

from opentelemetry import trace

from certgen.ca.certificate_builder import build_signed_certificate, compute_validity
from certgen.ca.distinguished_name import build_identity
from certgen.ca.errors import CertificateGenerationError, GenerationTimeout
from certgen.ca.key_export import (
    ensure_same_public_key,
    export_private_key,
    export_subject_public_key_info,
)
from certgen.ca.pem import PemLabel, encode_base64, encode_pem
from certgen.ca.provider import (
    CryptoProvider,
    SigningAlgorithm,
    get_crypto_provider,
    provision_key_pair,
)
from certgen.ca.request_builder import build_signed_request
from certgen.domain.models import CertificateBundle, CertificateParams
from certgen.metrics import certgen_metrics
from shared.config import Settings
from shared.config import settings as default_settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class CertificateService:
    """Generates a key pair, a signed request and a self-signed certificate.

    Each call to generate_bundle is independent: key material lives only in
    the local scope of that call.
    """

    def __init__(
        self,
        provider: CryptoProvider | None = None,
        settings: Settings = default_settings,
        algorithm: SigningAlgorithm | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._algorithm = algorithm
        self._timeout = settings.GENERATION_TIMEOUT_SECONDS

    @property
    def provider(self) -> CryptoProvider:
        """Get the crypto provider (lazy initialization)."""
        if self._provider is None:
            self._provider = get_crypto_provider()
        return self._provider

    @property
    def algorithm(self) -> SigningAlgorithm:
        if self._algorithm is None:
            self._algorithm = SigningAlgorithm(
                modulus_length=self._settings.RSA_KEY_SIZE,
                public_exponent=self._settings.RSA_PUBLIC_EXPONENT,
            )
        return self._algorithm

    async def generate_bundle(
        self,
        params: CertificateParams,
        now: datetime | None = None,
    ) -> CertificateBundle:
        """Run the pipeline and return the complete bundle.

        Args:
            params: Validated identity fields.
            now: Moment the validity window is computed from (default: now).

        Returns:
            CertificateBundle with the PEM request, raw request, PEM
            certificate and PEM private key.

        Raises:
            CertificateGenerationError: The subclass names the failed stage.
                No bundle is produced on failure.
        """
        with tracer.start_as_current_span("CertificateService.generate_bundle") as span:
            span.set_attribute("organization", params.organization)
            span.set_attribute("organization_unit", params.organization_unit)

            start_time = time.time()
            try:
                async with asyncio.timeout(self._timeout):
                    bundle = await self._run(params, now)
            except TimeoutError as e:
                certgen_metrics.record_bundle_failed(GenerationTimeout.stage)
                span.set_attribute("failed_stage", GenerationTimeout.stage)
                logger.error(
                    "bundle_generation_timed_out",
                    extra={"timeout_seconds": self._timeout},
                )
                raise GenerationTimeout(
                    f"Certificate generation did not finish within {self._timeout} seconds"
                ) from e
            except CertificateGenerationError as e:
                certgen_metrics.record_bundle_failed(e.stage)
                span.set_attribute("failed_stage", e.stage)
                logger.error(
                    "bundle_generation_failed",
                    extra={"stage": e.stage, "error": str(e)},
                )
                raise

            generation_time = time.time() - start_time
            certgen_metrics.record_bundle_generated(generation_time)
            logger.info(
                "bundle_generated",
                extra={
                    "organization": params.organization,
                    "organization_unit": params.organization_unit,
                    "duration_seconds": generation_time,
                },
            )
            return bundle

    async def _run(self, params: CertificateParams, now: datetime | None) -> CertificateBundle:
        """Execute the stages strictly in order; any exception ends the run."""
        provider = self.provider
        algorithm = self.algorithm

        identity = build_identity(params)
        key_pair = await provision_key_pair(provider, algorithm)

        certificate_public_key = await export_subject_public_key_info(
            provider, key_pair.public_key
        )
        request_public_key = await export_subject_public_key_info(provider, key_pair.public_key)
        ensure_same_public_key(certificate_public_key, request_public_key)

        request_der = await build_signed_request(
            provider, identity, request_public_key, key_pair.private_key, algorithm
        )
        request_pem = encode_pem(request_der, PemLabel.CERTIFICATE_REQUEST)
        raw_request = encode_base64(request_der)

        validity = compute_validity(now, self._settings.CERT_VALIDITY_YEARS)
        certificate_der = await build_signed_certificate(
            provider, identity, certificate_public_key, key_pair.private_key, algorithm, validity
        )
        certificate_pem = encode_pem(certificate_der, PemLabel.CERTIFICATE)

        private_key_der = await export_private_key(provider, key_pair.private_key)
        private_key_pem = encode_pem(private_key_der, PemLabel.PRIVATE_KEY)

        return CertificateBundle(
            request=request_pem,
            raw_request=raw_request,
            cert=certificate_pem,
            key=private_key_pem,
        )


async def generate_certificate(params: CertificateParams) -> CertificateBundle:
    """Generate a bundle with the default provider and settings."""
    return await CertificateService().generate_bundle(params)
