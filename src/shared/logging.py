import logging
import sys

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogRecordExporter
from opentelemetry.sdk.resources import Resource

from .config import settings


def setup_logging() -> LoggerProvider:
    """Route standard logging through an OpenTelemetry console exporter.

    Everything is written to stderr; stdout carries only the generated bundle.
    Returns the provider so a short-lived process can flush it on exit.
    """

    logger_provider = LoggerProvider(resource=Resource.create({"service.name": settings.APP_NAME}))
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(ConsoleLogRecordExporter(out=sys.stderr))
    )
    set_logger_provider(logger_provider)

    # Module loggers use plain logging; the OTel handler picks them up from root
    handler = LoggingHandler(
        level=getattr(logging, settings.LOG_LEVEL), logger_provider=logger_provider
    )

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(stream_handler)

    # pyasn1 debug output is not useful at the application log level
    logging.getLogger("pyasn1").setLevel(logging.WARNING)

    return logger_provider


logger = logging.getLogger("certgen")
