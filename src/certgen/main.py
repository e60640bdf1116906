"""Command-line entry point: generate one certificate bundle and print it."""

import argparse
import asyncio
import json
import sys

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from pydantic import ValidationError

from certgen.ca.errors import CertificateGenerationError
from certgen.domain.models import CertificateParams
from certgen.services.certificate_service import CertificateService
from shared.config import settings
from shared.logging import logger, setup_logging
from shared.metrics import setup_metrics


def setup_tracing() -> TracerProvider:
    resource = Resource.create({"service.name": settings.APP_NAME})
    provider = TracerProvider(resource=resource)

    # Spans are written to stderr alongside the logs
    processor = BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)
    return provider


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certgen",
        description="Generate an RSA key pair, a PKCS#10 request and a self-signed certificate.",
    )
    parser.add_argument("--organization", required=True)
    parser.add_argument("--organization-unit", required=True)
    parser.add_argument("--email", required=True, help="stored as the Common Name")
    parser.add_argument(
        "--json",
        action="store_true",
        help=(
            "print the bundle as a JSON object instead of concatenated PEM; "
            "only the JSON form includes rawRequest (the unwrapped base64 request)"
        ),
    )
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="enable OpenTelemetry logging, tracing and metrics exporters",
    )
    return parser


async def generate(args: argparse.Namespace) -> int:
    try:
        params = CertificateParams(
            organization=args.organization,
            organization_unit=args.organization_unit,
            email=args.email,
        )
    except ValidationError as e:
        print(f"Invalid identity: {e}", file=sys.stderr)
        return 2

    try:
        bundle = await CertificateService().generate_bundle(params)
    except CertificateGenerationError as e:
        logger.error("generation_failed", extra={"stage": e.stage})
        print(f"Generation failed at stage {e.stage}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(bundle.to_dict(), indent=2))
    else:
        sys.stdout.write(bundle.request)
        sys.stdout.write(bundle.cert)
        sys.stdout.write(bundle.key)
    return 0


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.telemetry:
        return asyncio.run(generate(args))

    providers = [setup_logging(), setup_tracing(), setup_metrics(settings.APP_NAME)]
    try:
        return asyncio.run(generate(args))
    finally:
        # Flush batched spans, log records and the final metrics export
        for provider in providers:
            provider.shutdown()


if __name__ == "__main__":
    sys.exit(run())
