from __future__ import annotations

import re
from typing import Mapping, Optional, Protocol

DEFAULT_URL_PREFIX = "REPLICA_URL_"


class EndpointRegistry(Protocol):
    def resolve(self, target: str) -> Optional[str]:
        """Return the connection URL for `target`, or None if unknown."""
        ...


def env_key(target: str) -> str:
    """Environment-variable suffix for a target id: `rdp03-ins.1` -> `RDP03_INS_1`."""
    return re.sub(r"[^A-Za-z0-9]", "_", target).upper()


class StaticEndpointRegistry:
    """
    Registry backed by a fixed target -> URL mapping.

    Lookups try the target id as given, then its env_key() form, so a
    registry loaded from the environment resolves `rdp03-ins-1` through
    `REPLICA_URL_RDP03_INS_1`. Empty URLs count as unknown.

    Usage:
        registry = StaticEndpointRegistry({"rdp03-ins-1": "mongodb://..."})
        url = registry.resolve("rdp03-ins-1")
    """

    def __init__(self, endpoints: Mapping[str, str]) -> None:
        self._endpoints = {k: v for k, v in endpoints.items() if v}

    def resolve(self, target: str) -> Optional[str]:
        url = self._endpoints.get(target)
        if url is None:
            url = self._endpoints.get(env_key(target))
        return url

    def __len__(self) -> int:
        return len(self._endpoints)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        prefix: str = DEFAULT_URL_PREFIX,
    ) -> "StaticEndpointRegistry":
        endpoints = {
            key[len(prefix):]: value
            for key, value in environ.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        }
        return cls(endpoints)
