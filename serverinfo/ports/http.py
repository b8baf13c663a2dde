"""HTTP port definition (DTO)."""

from dataclasses import dataclass
from typing import Any

__all__ = ["HttpPort"]


@dataclass
class HttpPort:
    """HTTP request to be sent by an outbound adapter.

    Decouples announcers from HTTP implementation details.

    Attributes:
        url: Target HTTP endpoint URL.
        payload: JSON-serializable dictionary to send as request body.
    """

    url: str
    payload: dict[str, Any]
