"""Resolve a client's public IP address from request headers."""

import logging
import warnings
from typing import Mapping, Optional, Sequence, Union

from .models import AddressParseError, AddressSource, HostPortError, ResolvedAddress
from .utils.ip_utils import extract_host, is_private_address, is_valid_public_ip, split_host_port

logger = logging.getLogger(__name__)

X_FORWARDED_FOR = "X-Forwarded-For"
X_REAL_IP = "X-Real-Ip"
X_CLIENT_IP = "X-Client-Ip"

HeaderValue = Union[str, Sequence[str]]
Headers = Optional[Mapping[str, HeaderValue]]


def get_header(headers: Headers, name: str) -> str:
    """Return the first value of header *name*, matched case-insensitively."""
    if not headers:
        return ""

    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, str):
            return value
        for item in value:
            return item
        return ""
    return ""


def _public_host(candidate: str) -> str:
    """Return the host in *candidate* if it is a public address, else ''."""
    host = extract_host(candidate)
    if is_valid_public_ip(host):
        return host
    logger.debug(f"Skipping candidate {candidate!r}: not a valid public address")
    return ""


def resolve_client_ip(headers: Headers, remote_addr: str) -> ResolvedAddress:
    """Return the client's real public IP address and where it came from.

    Sources are checked in order: every entry of X-Forwarded-For, X-Real-Ip,
    X-Client-Ip and finally the connection address. Each candidate has its
    port stripped and must classify as public. When nothing qualifies an
    empty ResolvedAddress is returned; this function never raises.
    """
    for candidate in get_header(headers, X_FORWARDED_FOR).split(","):
        host = _public_host(candidate)
        if host:
            return _found(host, AddressSource.FORWARDED_FOR)

    host = _public_host(get_header(headers, X_REAL_IP))
    if host:
        return _found(host, AddressSource.REAL_IP)

    host = _public_host(get_header(headers, X_CLIENT_IP))
    if host:
        return _found(host, AddressSource.CLIENT_IP)

    host = _public_host(remote_addr or "")
    if host:
        return _found(host, AddressSource.CONNECTION)

    logger.debug("No public client address found")
    return ResolvedAddress()


def _found(address: str, source: AddressSource) -> ResolvedAddress:
    logger.debug(f"Resolved client address {address} from {source.value}")
    return ResolvedAddress(address=address, source=source)


def simple_client_ip(headers: Headers, remote_addr: str) -> str:
    """Return the client's IP address using the simple fallback rules.

    With neither X-Real-Ip nor X-Forwarded-For set, the connection address
    is returned with its port removed. Otherwise the first public entry of
    X-Forwarded-For wins, and failing that X-Real-Ip is returned as-is,
    even when it holds a private address.
    """
    x_real_ip = get_header(headers, X_REAL_IP)
    x_forwarded_for = get_header(headers, X_FORWARDED_FOR)

    if not x_real_ip and not x_forwarded_for:
        remote_addr = remote_addr or ""
        if ":" not in remote_addr:
            return remote_addr
        try:
            host, _ = split_host_port(remote_addr)
        except HostPortError as e:
            logger.debug(f"Cannot strip port from connection address: {e}")
            return ""
        return host

    for address in x_forwarded_for.split(","):
        address = address.strip()
        try:
            if not is_private_address(address):
                return address
        except AddressParseError as e:
            logger.debug(f"Skipping forwarded entry {address!r}: {e}")

    return x_real_ip


def real_ip(headers: Headers, remote_addr: str) -> str:
    """Deprecated alias of simple_client_ip."""
    warnings.warn(
        "real_ip is deprecated, use simple_client_ip instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return simple_client_ip(headers, remote_addr)
