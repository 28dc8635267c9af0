"""Command-line entry point: run the service under uvicorn."""

import uvicorn

from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context
from wasession.settings import Settings

logger = get_logger(__name__)


def main() -> None:
    settings = Settings.from_env()
    logger.info(
        "WhatsApp session service starting",
        extra={
            "extra_fields": safe_log_context(
                port=settings.port, persistence=settings.persistence_backend
            )
        },
    )
    uvicorn.run("wasession.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
