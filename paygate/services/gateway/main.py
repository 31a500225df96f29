"""Process entrypoint for the payments gateway.

Run with `uvicorn paygate.services.gateway.main:app` or the `paygate` script.
"""

import os

import uvicorn

from paygate.common.config import settings
from paygate.common.logging import configure_logging
from paygate.common.startup import log_startup_config
from paygate.services.gateway.app import create_app

configure_logging()
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "LOG_LEVEL",
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "STRIPE_API_VERSION",
        "WEBHOOK_TOLERANCE_SECONDS",
        "OTEL_EXPORTER_OTLP_ENDPOINT",
    ],
)
app = create_app(settings)


def run() -> None:
    """Serve the app with uvicorn; HOST/PORT come from the environment."""

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    run()
