"""OpenTelemetry metrics for the certificate generation pipeline."""

from opentelemetry import metrics

meter = metrics.get_meter("certgen")

key_pairs_generated_total = meter.create_counter(
    name="certgen_key_pairs_generated_total",
    description="Total RSA key pairs generated",
    unit="1",
)

structures_signed_total = meter.create_counter(
    name="certgen_structures_signed_total",
    description="Total structures signed",
    unit="1",
)

bundles_generated_total = meter.create_counter(
    name="certgen_bundles_generated_total",
    description="Total certificate bundles generated",
    unit="1",
)

bundle_generation_failures_total = meter.create_counter(
    name="certgen_bundle_generation_failures_total",
    description="Total failed bundle generations",
    unit="1",
)

bundle_generation_duration = meter.create_histogram(
    name="certgen_bundle_generation_duration_seconds",
    description="Bundle generation duration in seconds",
    unit="s",
)


class CertgenMetrics:
    """Facade for pipeline metrics with proper labels."""

    def record_key_pair_generated(self, algorithm: str) -> None:
        """Record key pair generation. Labels: algorithm=RSA-2048|..."""
        key_pairs_generated_total.add(1, {"algorithm": algorithm})

    def record_structure_signed(self, structure: str) -> None:
        """Record a signature. Labels: structure=certificate|request"""
        structures_signed_total.add(1, {"structure": structure})

    def record_bundle_generated(self, duration_seconds: float) -> None:
        bundles_generated_total.add(1)
        bundle_generation_duration.record(duration_seconds)

    def record_bundle_failed(self, stage: str) -> None:
        """Record pipeline failure. Labels: stage=key_generation|signing|..."""
        bundle_generation_failures_total.add(1, {"stage": stage})


# Singleton instance
certgen_metrics = CertgenMetrics()
