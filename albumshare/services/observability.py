"""
Observability setup: optional Sentry error reporting
"""
import logging

import sentry_sdk

from albumshare.config import Settings

logger = logging.getLogger(__name__)


def init_observability(settings: Settings) -> bool:
    if not settings.SENTRY_DSN:
        return False
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=0.1,
        environment=settings.APP_ENV,
    )
    logger.info("Sentry initialized")
    return True
