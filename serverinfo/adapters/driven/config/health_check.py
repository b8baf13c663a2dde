"""Healthcheck validator for container orchestration."""

import logging

from serverinfo.adapters.driven.config.settings import load_settings
from serverinfo.adapters.driven.logging.logging_config import configure_logs
from serverinfo.adapters.driven.naming.name_table import load_name_table
from serverinfo.core.endpoints import parse_endpoints

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Check that the service could start and poll something.

    Validates:
    - Environment variables parse and pass validation.
    - Names file (if configured) exists and is valid JSON.
    - An enabled rotation has at least one valid SERVERINFO_SERVERS entry.

    Rejected server entries are logged as warnings but only fail the check
    when none is left.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    try:
        configure_logs()
        settings = load_settings()
        load_name_table(settings.names_file_path)
    except Exception as exc:
        logger.error(f"Serverinfo healthcheck FAILED: {exc}")
        return 1

    endpoints = parse_endpoints(settings.servers, warn=logger.warning)
    if settings.enabled and not endpoints:
        logger.error(
            "Serverinfo healthcheck FAILED: enabled but SERVERINFO_SERVERS "
            f"has no valid host:port entry ({len(settings.servers)} given)"
        )
        return 1

    logger.info(f"Serverinfo healthcheck OK: enabled={settings.enabled}, servers={len(endpoints)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
