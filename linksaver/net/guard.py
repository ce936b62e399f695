"""URL validation against server-side request forgery.

A URL passes when it is ``http``/``https``, names a host, and that host is
neither a local name nor an address outside the public internet. Hostnames
are resolved and every resolved address must be public; a lookup that fails
or times out rejects the URL.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from typing import List
from urllib.parse import urlsplit, urlunsplit

from linksaver.core.exceptions import InvalidURLError
from linksaver.core.settings import Settings

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})
RESERVED_HOSTNAMES = frozenset(
    {"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"}
)


def is_public_address(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    mapped = getattr(ip, "ipv4_mapped", None)
    if mapped is not None:
        ip = mapped
    return not (
        ip.is_loopback
        or ip.is_private
        or ip.is_unspecified
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
    )


def is_reserved_hostname(host: str) -> bool:
    host = host.lower().rstrip(".")
    return host in RESERVED_HOSTNAMES or host.endswith(".localhost")


class UrlGuard:
    """Validate and canonicalize user-submitted URLs."""

    def __init__(self, dns_timeout: float = 5.0, *, resolve_hostnames: bool = True) -> None:
        self.dns_timeout = dns_timeout
        # Only tests turn this off; build_guard() never does.
        self.resolve_hostnames = resolve_hostnames

    async def validate(self, candidate: str) -> str:
        """Return the canonical form of ``candidate`` or raise InvalidURLError."""
        candidate = (candidate or "").strip()
        try:
            parts = urlsplit(candidate)
            host = parts.hostname or ""
            parts.port  # noqa: B018 - raises ValueError on a bad port
        except ValueError as exc:
            raise InvalidURLError(f"unparseable URL: {exc}") from exc

        scheme = parts.scheme.lower()
        if scheme not in ALLOWED_SCHEMES:
            raise InvalidURLError(f"scheme not allowed: {scheme!r}")
        if not host:
            raise InvalidURLError("missing host")

        try:
            literal = ipaddress.ip_address(host)
        except ValueError:
            literal = None

        if literal is not None:
            if not is_public_address(literal):
                raise InvalidURLError(f"non-public address: {host}")
        elif is_reserved_hostname(host):
            raise InvalidURLError(f"reserved hostname: {host}")
        elif self.resolve_hostnames:
            await self._check_resolved(host)

        return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))

    async def _check_resolved(self, host: str) -> None:
        try:
            addresses = await asyncio.wait_for(self._resolve(host), self.dns_timeout)
        except (OSError, asyncio.TimeoutError, UnicodeError) as exc:
            logger.warning("DNS lookup failed", extra={"host": host, "reason": repr(exc)})
            raise InvalidURLError(f"cannot resolve host: {host}") from exc
        if not addresses:
            raise InvalidURLError(f"cannot resolve host: {host}")
        for address in addresses:
            try:
                ip = ipaddress.ip_address(address.split("%", 1)[0])
            except ValueError as exc:
                raise InvalidURLError(f"unexpected address for {host}: {address}") from exc
            if not is_public_address(ip):
                raise InvalidURLError(f"{host} resolves to non-public address {address}")

    async def _resolve(self, host: str) -> List[str]:
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
        return [info[4][0] for info in infos]


def build_guard(settings: Settings) -> UrlGuard:
    """Guard used by the running application; hostname resolution is always on."""
    return UrlGuard(dns_timeout=settings.dns_timeout, resolve_hostnames=True)


__all__ = [
    "UrlGuard",
    "build_guard",
    "is_public_address",
    "is_reserved_hostname",
]
