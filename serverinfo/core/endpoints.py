"""Parsing of configured "host:port" strings into endpoints."""

import logging
from collections.abc import Callable, Iterable
from ipaddress import IPv4Address

from pydantic import TypeAdapter, ValidationError

from serverinfo.ports.status import Endpoint

__all__ = ["parse_endpoints", "is_ipv4"]

logger = logging.getLogger(__name__)
_ipv4_adapter = TypeAdapter(IPv4Address)


def is_ipv4(host: str) -> bool:
    """Return True if ``host`` is a dotted-quad IPv4 address."""
    try:
        _ipv4_adapter.validate_python(host)
    except ValidationError:
        return False
    return True


def parse_endpoints(
    raw_entries: Iterable[str],
    warn: Callable[[str], None] | None = None,
) -> list[Endpoint]:
    """Build the rotation list from raw configuration entries.

    Rules:
    - An entry must split into exactly two ``:``-separated parts, otherwise
      it is reported through ``warn`` and skipped.
    - The host must be an IPv4 address, otherwise the entry is skipped
      without a warning.
    - The port must be numeric, otherwise it is reported and skipped.

    Args:
        raw_entries: Configured "host:port" strings.
        warn: Sink for non-fatal configuration problems. Defaults to the
            module logger.

    Returns:
        Accepted endpoints, in input order.
    """
    warn = warn or logger.warning
    endpoints: list[Endpoint] = []

    for raw in raw_entries:
        parts = raw.split(":")
        if len(parts) != 2:
            warn(f"Serverinfo: invalid server entry {raw!r}")
            continue

        host, port_raw = parts
        if not is_ipv4(host):
            logger.debug(f"Skipping {raw!r}: host is not an IPv4 address")
            continue

        try:
            port = int(port_raw)
        except ValueError:
            warn(f"Serverinfo: invalid port in server entry {raw!r}")
            continue

        endpoints.append(Endpoint(host=host, port=port))

    return endpoints
