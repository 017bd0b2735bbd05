"""
URL safety guard for outbound requests.

Every fetch performed by the engine (adapters, redirect hops, link checks,
image downloads) goes through ``ensure_external_url`` first. The check is
purely syntactic: no DNS resolution is performed, so it never blocks and
never touches the network.
"""

from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from ..errors import ValidationError


class ReasonCode(str, Enum):
    ALLOWED = "ALLOWED"
    INVALID_URL = "INVALID_URL"
    BLOCKED_PROTOCOL = "BLOCKED_PROTOCOL"
    BLOCKED_LOCALHOST = "BLOCKED_LOCALHOST"
    BLOCKED_PRIVATE_IP = "BLOCKED_PRIVATE_IP"
    BLOCKED_LINK_LOCAL = "BLOCKED_LINK_LOCAL"


@dataclass
class Verdict:
    allowed: bool
    reason: ReasonCode
    normalized_url: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


ALLOWED_SCHEMES = {"http", "https"}
BLOCKED_HOSTNAMES = {"localhost", "::1"}

_PRIVATE_V4_NETWORKS = (
    (ipaddress.IPv4Network("0.0.0.0/8"), ReasonCode.BLOCKED_LOCALHOST),
    (ipaddress.IPv4Network("10.0.0.0/8"), ReasonCode.BLOCKED_PRIVATE_IP),
    (ipaddress.IPv4Network("127.0.0.0/8"), ReasonCode.BLOCKED_LOCALHOST),
    (ipaddress.IPv4Network("169.254.0.0/16"), ReasonCode.BLOCKED_LINK_LOCAL),
    (ipaddress.IPv4Network("172.16.0.0/12"), ReasonCode.BLOCKED_PRIVATE_IP),
    (ipaddress.IPv4Network("192.168.0.0/16"), ReasonCode.BLOCKED_PRIVATE_IP),
    (ipaddress.IPv4Network("224.0.0.0/4"), ReasonCode.BLOCKED_PRIVATE_IP),
)

# fc00::/7 covers fc and fd; fe80::/10 covers fe8, fe9, fea, feb.
_UNIQUE_LOCAL_V6_PREFIXES = ("fc", "fd")
_LINK_LOCAL_V6_PREFIXES = ("fe8", "fe9", "fea", "feb")

# Hosts whose every label is a decimal, octal or hex number are IPv4 literals.
_NUMERIC_HOST_RE = re.compile(r"^(?:0x[0-9a-f]*|[0-9]+)(?:\.(?:0x[0-9a-f]*|[0-9]+)){0,3}\.?$")


def normalize_hostname(hostname: str) -> str:
    if not hostname:
        return ""
    normalized = hostname.strip().lower()
    if normalized.endswith("."):
        normalized = normalized[:-1]

    if normalized.startswith("[") and normalized.endswith("]"):
        normalized = normalized[1:-1]

    return normalized


def is_blocked_hostname(hostname: str) -> bool:
    normalized = normalize_hostname(hostname)
    if not normalized:
        return False
    if normalized in BLOCKED_HOSTNAMES:
        return True
    return normalized.endswith(".local")


def _parse_ipv4(host: str) -> ipaddress.IPv4Address | None:
    """Read ``host`` as an IPv4 address the way resolvers do.

    Besides dotted quads this accepts shorthand (``127.1``), a single
    integer (``2130706433``), hex (``0x7f.0.0.1``) and octal parts.
    """
    if not _NUMERIC_HOST_RE.match(host):
        return None
    try:
        return ipaddress.IPv4Address(socket.inet_aton(host.rstrip(".")))
    except (OSError, ValueError):
        return None


def _v4_violation(ip: ipaddress.IPv4Address) -> ReasonCode | None:
    for network, reason in _PRIVATE_V4_NETWORKS:
        if ip in network:
            return reason
    return None


def _ip_violation(host: str) -> ReasonCode | None:
    ip = _parse_ipv4(host)
    if ip is not None:
        return _v4_violation(ip)

    if ":" not in host:
        return None
    try:
        ip6 = ipaddress.IPv6Address(host.split("%", 1)[0])
    except ValueError:
        ip6 = None
    if ip6 is not None:
        if ip6.is_loopback or ip6.is_unspecified:
            return ReasonCode.BLOCKED_LOCALHOST
        embedded = ip6.ipv4_mapped or ip6.sixtofour
        if embedded is not None:
            return _v4_violation(embedded)
        host = ip6.exploded
    if host.startswith(_UNIQUE_LOCAL_V6_PREFIXES):
        return ReasonCode.BLOCKED_PRIVATE_IP
    if host.startswith(_LINK_LOCAL_V6_PREFIXES):
        return ReasonCode.BLOCKED_LINK_LOCAL
    return None


def validate_external_url(url: str) -> Verdict:
    """Decide whether ``url`` may be fetched.

    Rejects unparsable URLs, schemes other than http/https, localhost-style
    hostnames, private/loopback/link-local/multicast IPv4 literals (including
    shorthand, integer and hex spellings), and IPv6 loopback, unique-local or
    link-local literals and IPv4-mapped forms of blocked addresses.

    Returns:
        Verdict; ``normalized_url`` is the input URL unchanged when allowed.
    """
    if not isinstance(url, str) or not url.strip():
        return Verdict(False, ReasonCode.INVALID_URL, details={"error": "Empty URL"})

    try:
        parsed = urlsplit(url.strip())
        hostname = parsed.hostname
        # Accessing .port validates the port component.
        parsed.port
    except ValueError as exc:
        return Verdict(False, ReasonCode.INVALID_URL, details={"error": str(exc)})

    scheme = parsed.scheme.lower()
    if not scheme:
        return Verdict(False, ReasonCode.INVALID_URL, details={"error": "No scheme"})
    if scheme not in ALLOWED_SCHEMES:
        return Verdict(False, ReasonCode.BLOCKED_PROTOCOL, details={"scheme": scheme})
    if not parsed.netloc or not hostname:
        return Verdict(False, ReasonCode.INVALID_URL, details={"error": "No hostname found"})

    host = normalize_hostname(hostname)
    if is_blocked_hostname(host):
        return Verdict(False, ReasonCode.BLOCKED_LOCALHOST, details={"hostname": host})

    violation = _ip_violation(host)
    if violation is not None:
        return Verdict(False, violation, details={"hostname": host})

    return Verdict(True, ReasonCode.ALLOWED, normalized_url=url, details={"hostname": host})


def ensure_external_url(url: str) -> str:
    """Validate ``url`` and return it, raising ValidationError when unsafe."""
    verdict = validate_external_url(url)
    if not verdict.allowed:
        raise ValidationError(url, verdict.reason.value, verdict.details.get("error"))
    return verdict.normalized_url or url
