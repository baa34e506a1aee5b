"""Local address discovery, IP pattern matching and host:port helpers."""

from __future__ import annotations

import ipaddress
import logging
import os
import re
import socket
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

import psutil

_log = logging.getLogger(__name__)

IPV4_SPLIT_CHARACTER = "."
IPV6_SPLIT_CHARACTER = ":"

_PRIVATE_BLOCKS = tuple(
    ipaddress.IPv4Network(block)
    for block in ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16")
)

_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)
_INT16_MAX = 2**15 - 1
_INT16_MIN = -(2**15)
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_BASE_DIGITS = {
    2: frozenset("01_"),
    8: frozenset("01234567_"),
    10: frozenset("0123456789_"),
    16: frozenset("0123456789abcdefABCDEF_"),
}

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class Address:
    """A network endpoint: a network name plus host, port and optional zone."""

    network: str
    host: str
    port: int
    zone: str = ""

    def __str__(self) -> str:
        host = f"{self.host}%{self.zone}" if self.zone else self.host
        return _join_host_port(host, str(self.port))


def _parse_ip(text: str) -> Optional[IPAddress]:
    if not text or "%" in text or text != text.strip():
        return None
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def _as_ip(value: Union[str, IPAddress]) -> Optional[IPAddress]:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    return _parse_ip(str(value))


def _to4(ip: Optional[IPAddress]) -> Optional[ipaddress.IPv4Address]:
    """The IPv4 form of ``ip``, also for IPv4-mapped IPv6 addresses."""
    if isinstance(ip, ipaddress.IPv4Address):
        return ip
    if isinstance(ip, ipaddress.IPv6Address):
        return ip.ipv4_mapped
    return None


def is_private_ip(ip: Union[str, IPAddress]) -> bool:
    """Return whether ``ip`` lies in one of the private IPv4 blocks."""
    v4 = _to4(_as_ip(ip))
    return v4 is not None and any(v4 in block for block in _PRIVATE_BLOCKS)


def _is_valid_interface(name: str, stats) -> bool:
    if stats is None or not stats.isup:
        return False
    flags = getattr(stats, "flags", "") or ""
    if "loopback" in flags.split(","):
        return False
    return "docker" not in name.lower()


def _first_valid_ipv4(addrs: Iterable) -> Optional[ipaddress.IPv4Address]:
    for entry in addrs:
        if entry.family not in (socket.AF_INET, socket.AF_INET6):
            continue
        ip = _parse_ip(str(entry.address).split("%", 1)[0])
        if ip is None:
            continue
        v4 = _to4(ip)
        if v4 is None or v4.is_loopback:
            continue
        return v4
    return None


def get_local_ip() -> str:
    """Return an IPv4 address of this host, preferring a private one.

    Raises :class:`OSError` when no usable address is found.
    """
    stats = psutil.net_if_stats()
    found: Optional[ipaddress.IPv4Address] = None
    for name, addrs in psutil.net_if_addrs().items():
        if not _is_valid_interface(name, stats.get(name)):
            continue
        ipv4 = _first_valid_ipv4(addrs)
        if ipv4 is not None:
            found = ipv4
            if is_private_ip(ipv4):
                return str(ipv4)
    if found is None:
        raise OSError("can not get local IP")
    return str(found)


def is_same_addr(addr1, addr2) -> bool:
    """Compare two addresses, treating ``[::]`` and ``0.0.0.0`` hosts as equal."""
    if addr1.network != addr2.network:
        return False
    first, second = str(addr1), str(addr2)
    if first == second:
        return True
    for prefix in ("[::]", "0.0.0.0"):
        first = first.removeprefix(prefix)
        second = second.removeprefix(prefix)
    return first == second


def _bind_host(ip: str, network: str) -> str:
    if not ip:
        return "0.0.0.0"
    parsed = _parse_ip(ip)
    if parsed is None:
        return "0.0.0.0"
    v4 = _to4(parsed)
    if v4 is None:
        raise OSError(f"listen {network}: non-IPv4 address {ip}")
    return str(v4)


def listen_on_tcp_random_port(ip: str = "") -> socket.socket:
    """Open a listening IPv4 TCP socket on a random port."""
    host = _bind_host(ip, "tcp4")
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        if os.name == "posix":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, 0))
        sock.listen()
    except BaseException:
        sock.close()
        raise
    return sock


def listen_on_udp_random_port(ip: str = "") -> socket.socket:
    """Open an IPv4 UDP socket bound to a random port."""
    host = _bind_host(ip, "udp4")
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, 0))
    except BaseException:
        sock.close()
        raise
    return sock


def match_ip(pattern: str, host: str, port: str) -> bool:
    """Return whether ``host:port`` matches ``pattern``.

    The pattern may be a subnet in CIDR form, an exact address, or an address
    with ``*`` wildcards and ``a-b`` ranges in its segments, optionally with
    a port.
    """
    if "/" in pattern:
        try:
            network = ipaddress.ip_network(pattern, strict=False)
        except ValueError:
            return False
        ip = _parse_ip(host)
        if ip is None:
            return False
        if network.version == 4:
            v4 = _to4(ip)
            return v4 is not None and v4 in network
        return ip in network
    return _match_ip_range(pattern, host, port)


def _match_ip_range(pattern: str, host: str, port: str) -> bool:
    if not pattern or not host:
        _log.warning(
            "Illegal Argument pattern or hostName. Pattern:%s, Host:%s", pattern, host
        )
        return False

    pattern = pattern.strip()
    if pattern in ("*.*.*.*", "*"):
        return True

    is_ipv4 = _to4(_parse_ip(host)) is not None
    pattern_host, pattern_port = _pattern_host_and_port(pattern, is_ipv4)
    if pattern_port and pattern_port != port:
        return False

    pattern = pattern_host
    split_char = IPV4_SPLIT_CHARACTER if is_ipv4 else IPV6_SPLIT_CHARACTER
    mask = pattern.split(split_char)
    try:
        _check_host_pattern(pattern, mask, is_ipv4)
    except ValueError as exc:
        _log.warning("check host pattern error: %s", exc)
        return False

    if pattern == host:
        return True
    if not _ip_pattern_contains(pattern):
        return False

    segments = host.split(split_char)
    if len(segments) < len(mask):
        _log.warning("The host %s does not fit the pattern %s", host, pattern)
        return False

    for part, segment in zip(mask, segments):
        if part == "*" or part == segment:
            continue
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                _log.warning("There is wrong format of ip Address: %s", part)
                return False
            low = _ip_segment_number(bounds[0], is_ipv4)
            high = _ip_segment_number(bounds[1], is_ipv4)
            value = _ip_segment_number(segment, is_ipv4)
            if value < low or value > high:
                return False
        elif (segment == "0" and part == "0") or part in ("00", "000", "0000"):
            continue
        else:
            return False
    return True


def _ip_pattern_contains(pattern: str) -> bool:
    return "*" in pattern or "-" in pattern


def _check_host_pattern(pattern: str, mask: List[str], is_ipv4: bool) -> None:
    if is_ipv4:
        if len(mask) != 4:
            raise ValueError(
                f"The host is ipv4, but the pattern is not ipv4 pattern : {pattern}"
            )
        return
    if len(mask) != 8 and _ip_pattern_contains(pattern):
        raise ValueError(
            "If you config ip expression that contains '*' or '-', please fill "
            "qualified ip pattern like 234e:0:4567:0:0:0:3d:*. "
        )
    if len(mask) != 8 and "::" not in pattern:
        raise ValueError(
            f"The host is ipv6, but the pattern is not ipv6 pattern : {pattern}"
        )


def _pattern_host_and_port(pattern: str, is_ipv4: bool) -> Tuple[str, str]:
    if pattern.startswith("[") and "]:" in pattern:
        end = pattern.index("]:")
        return pattern[1:end], pattern[end + 2 :]
    if pattern.startswith("[") and pattern.endswith("]"):
        return pattern[1:-1], ""
    if is_ipv4 and ":" in pattern:
        end = pattern.index(":")
        return pattern[:end], pattern[end + 1 :]
    return pattern, ""


def _atoi(text: str) -> int:
    if not _DECIMAL_RE.fullmatch(text):
        return 0
    return max(min(int(text), _INT64_MAX), _INT64_MIN)


def _parse_base0(text: str) -> Optional[int]:
    """Parse an integer with an optional 0x/0o/0b/0 prefix selecting the base."""
    negative = False
    body = text
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if not body:
        return None
    base, digits = 10, body
    if len(body) >= 2 and body[0] == "0":
        prefix = body[1].lower()
        if prefix == "x":
            base, digits = 16, body[2:]
        elif prefix == "b":
            base, digits = 2, body[2:]
        elif prefix == "o":
            base, digits = 8, body[2:]
        else:
            base, digits = 8, body[1:]
    if not digits or not set(digits) <= _BASE_DIGITS[base]:
        return None
    try:
        value = int(digits, base)
    except ValueError:
        return None
    return -value if negative else value


def _ip_segment_number(segment: str, is_ipv4: bool) -> int:
    if is_ipv4:
        return _atoi(segment)
    value = _parse_base0(segment)
    if value is None:
        return 0
    return max(min(value, _INT16_MAX), _INT16_MIN)


def _join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def host_address(host: str, port: int) -> str:
    """Compose ``host:port``, bracketing IPv6 hosts."""
    return _join_host_port(host, str(port))


def ws_host_address(host: str, port: int, path: str) -> str:
    """Compose a ``ws://`` address."""
    return "ws://" + _join_host_port(host, str(port)) + path


def wss_host_address(host: str, port: int, path: str) -> str:
    """Compose a ``wss://`` address."""
    return "wss://" + _join_host_port(host, str(port)) + path


def host_address2(host: str, port: str) -> str:
    """Compose ``host:port`` from a string port."""
    return _join_host_port(host, port)


def ws_host_address2(host: str, port: str, path: str) -> str:
    """Compose a ``ws://`` address from a string port."""
    return "ws://" + _join_host_port(host, port) + path


def wss_host_address2(host: str, port: str, path: str) -> str:
    """Compose a ``wss://`` address from a string port."""
    return "wss://" + _join_host_port(host, port) + path


def host_port(addr: str) -> Tuple[str, str]:
    """Split ``host:port`` or ``[host]:port`` into host and port.

    Raises :class:`ValueError` for a malformed address.
    """

    def fail(why: str) -> ValueError:
        return ValueError(f"address {addr}: {why}")

    missing_port = "missing port in address"
    too_many_colons = "too many colons in address"

    i = addr.rfind(":")
    if i < 0:
        raise fail(missing_port)
    j = k = 0
    if addr[0] == "[":
        end = addr.find("]")
        if end < 0:
            raise fail("missing ']' in address")
        if end + 1 == len(addr):
            raise fail(missing_port)
        if end + 1 != i:
            if addr[end + 1] == ":":
                raise fail(too_many_colons)
            raise fail(missing_port)
        host = addr[1:end]
        j, k = 1, end + 1
    else:
        host = addr[:i]
        if ":" in host:
            raise fail(too_many_colons)
    if "[" in addr[j:]:
        raise fail("unexpected '[' in address")
    if "]" in addr[k:]:
        raise fail("unexpected ']' in address")
    return host, addr[i + 1 :]


def conn_check(sock) -> None:
    """Check that a connected socket is still usable without blocking.

    Raises :class:`EOFError` if the peer closed the connection and
    :class:`ConnectionError` if unexpected data is waiting; any other socket
    error is raised as is. Objects that are not sockets are not checked.
    """
    if not isinstance(sock, socket.socket):
        return None
    timeout = sock.gettimeout()
    sock.setblocking(False)
    try:
        data = sock.recv(1)
    except (BlockingIOError, InterruptedError):
        return None
    finally:
        sock.settimeout(timeout)
    if not data:
        raise EOFError("connection closed by peer")
    raise ConnectionError("unexpected read from socket")