"""Self-identification collaborators: local hostname and outbound IPv4.

Both lookups are injectable so tests can substitute deterministic fakes.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
import struct
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from .errors import SelfIdentificationError

if sys.platform != "win32":
    import fcntl

logger = logging.getLogger(__name__)

HostnameProvider = Callable[[], str]
ClientIpProvider = Callable[[], str]

# Any routable address works; a UDP connect sends no packets.
_ROUTE_TARGET = ("192.0.2.1", 9)

# Linux ioctl requests and interface flags from <linux/sockios.h> and <net/if.h>.
_SIOCGIFFLAGS = 0x8913
_SIOCGIFADDR = 0x8915
_IFF_UP = 0x1
_IFF_LOOPBACK = 0x8


def local_hostname() -> str:
    """Return the local machine's reported hostname."""
    return socket.gethostname()


def outbound_ipv4() -> str:
    """Return the first non-loopback IPv4 address of this host.

    Active interfaces are enumerated first (Linux only). Then come the
    address the kernel would use for outbound traffic and the addresses
    resolved for the local hostname.
    """
    for lookup in (_interface_ipv4, _routed_ipv4, _hostname_ipv4):
        for candidate in lookup():
            if _is_usable_ipv4(candidate):
                return candidate
    raise SelfIdentificationError(message="are you connected to the network?")


def _interface_ipv4() -> list[str]:
    """Return IPv4 addresses of interfaces that are up and not loopback."""
    if not sys.platform.startswith("linux"):
        return []
    try:
        names = [name for _, name in socket.if_nameindex()]
    except OSError:
        return []

    addresses: list[str] = []
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        for name in names:
            request = struct.pack("256s", name.encode("utf-8")[:15])
            try:
                flags_reply = fcntl.ioctl(sock.fileno(), _SIOCGIFFLAGS, request)
                (flags,) = struct.unpack("H", flags_reply[16:18])
                if not flags & _IFF_UP or flags & _IFF_LOOPBACK:
                    continue
                address_reply = fcntl.ioctl(sock.fileno(), _SIOCGIFADDR, request)
            except OSError:
                continue
            addresses.append(socket.inet_ntoa(address_reply[20:24]))
    return addresses


def _routed_ipv4() -> list[str]:
    """Return the local address selected for outbound traffic, if any."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(_ROUTE_TARGET)
        return [sock.getsockname()[0]]
    except OSError:
        return []
    finally:
        sock.close()


def _hostname_ipv4() -> list[str]:
    """Return IPv4 addresses resolved for the local hostname."""
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        return []
    return [str(info[4][0]) for info in infos]


def _is_usable_ipv4(value: str) -> bool:
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return False
    return (
        address.version == 4
        and not address.is_loopback
        and not address.is_unspecified
    )


@dataclass(frozen=True)
class Identity:
    """Hostname and client IP providers used to stamp audit fields."""

    hostname: HostnameProvider = field(default=local_hostname)
    client_ip: ClientIpProvider = field(default=outbound_ipv4)

    def resolve_hostname(self) -> str:
        """Return the hostname, or ``""`` when the lookup fails."""
        try:
            return self.hostname()
        except OSError as exc:
            logger.debug("hostname lookup failed: %s", exc)
            return ""

    def resolve_client_ip(self) -> str:
        """Return the client IP, or ``""`` when self-identification fails."""
        try:
            return self.client_ip()
        except (SelfIdentificationError, OSError) as exc:
            logger.debug("client ip lookup failed: %s", exc)
            return ""


def static_identity(*, hostname: str, client_ip: str) -> Identity:
    """Return an identity with fixed values."""
    return Identity(hostname=lambda: hostname, client_ip=lambda: client_ip)
