"""IP address classification and host:port helpers."""

from __future__ import annotations

import ipaddress
from typing import Optional, Union

from ..models import AddressParseError, HostPortError

IPv4Address = ipaddress.IPv4Address
IPv6Address = ipaddress.IPv6Address
IPv4Network = ipaddress.IPv4Network
IPv6Network = ipaddress.IPv6Network
IPAddress = Union[IPv4Address, IPv6Address]
IPNetwork = Union[IPv4Network, IPv6Network]

_IPV4_PRIVATE_NETWORKS: tuple[IPv4Network, ...] = (
    ipaddress.ip_network("127.0.0.0/8"),  # loopback
    ipaddress.ip_network("10.0.0.0/8"),  # 24-bit block
    ipaddress.ip_network("172.16.0.0/12"),  # 20-bit block
    ipaddress.ip_network("192.168.0.0/16"),  # 16-bit block
    ipaddress.ip_network("169.254.0.0/16"),  # link-local
)

_IPV6_PRIVATE_NETWORKS: tuple[IPv6Network, ...] = (
    ipaddress.ip_network("::1/128"),  # loopback
    ipaddress.ip_network("fc00::/7"),  # unique local addresses
    ipaddress.ip_network("fe80::/10"),  # link-local
)

PRIVATE_NETWORKS: tuple[IPNetwork, ...] = _IPV4_PRIVATE_NETWORKS + _IPV6_PRIVATE_NETWORKS


def parse_ip(address: str) -> IPAddress:
    """Parse *address* as an IPv4 or IPv6 literal.

    Raises AddressParseError for anything else, including strings that still
    carry a port or surrounding whitespace.
    """
    if not isinstance(address, str):
        raise AddressParseError(repr(address), "expected a string")
    try:
        return ipaddress.ip_address(address)
    except ValueError as e:
        raise AddressParseError(address, str(e)) from e


def private_network_for(ip: IPAddress) -> Optional[IPNetwork]:
    """Return the private/reserved network containing *ip*, if any."""
    if isinstance(ip, IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    networks = _IPV4_PRIVATE_NETWORKS if isinstance(ip, IPv4Address) else _IPV6_PRIVATE_NETWORKS
    for network in networks:
        if ip in network:
            return network
    return None


def is_private_ip(ip: IPAddress) -> bool:
    """Return True if *ip* should be treated as private/reserved."""
    return private_network_for(ip) is not None


def is_private_address(address: str) -> bool:
    """Return True if the textual *address* lies in a private/reserved range.

    See https://en.wikipedia.org/wiki/Private_network and
    https://en.wikipedia.org/wiki/Link-local_address for the ranges.
    """
    return is_private_ip(parse_ip(address))


def is_valid_public_ip(address: str) -> bool:
    """Return True if *address* parses and is not private."""
    try:
        return not is_private_address(address)
    except AddressParseError:
        return False


def split_host_port(host_port: str) -> tuple[str, str]:
    """Split ``host:port``, ``[host]:port`` or ``[ipv6]:port`` into host and port."""
    i = host_port.rfind(":")
    if i < 0:
        raise HostPortError(host_port, "missing port in address")

    if host_port.startswith("["):
        end = host_port.find("]")
        if end < 0:
            raise HostPortError(host_port, "missing ']' in address")
        if end + 1 == len(host_port):
            raise HostPortError(host_port, "missing port in address")
        if end + 1 != i:
            # the last colon must directly follow ']'
            if host_port[end + 1] == ":":
                raise HostPortError(host_port, "too many colons in address")
            raise HostPortError(host_port, "missing port in address")
        host = host_port[1:end]
        bracket_open, bracket_close = 1, end + 1
    else:
        host = host_port[:i]
        if ":" in host:
            raise HostPortError(host_port, "too many colons in address")
        bracket_open = bracket_close = 0

    if "[" in host_port[bracket_open:]:
        raise HostPortError(host_port, "unexpected '[' in address")
    if "]" in host_port[bracket_close:]:
        raise HostPortError(host_port, "unexpected ']' in address")

    return host, host_port[i + 1:]


def extract_host(candidate: str) -> str:
    """Strip the port from *candidate* and return the trimmed host.

    Returns an empty string when the candidate looks like host:port but
    cannot be split. Bare IPv6 literals must be bracketed to carry a port;
    unbracketed ones fail the split and yield an empty string.
    """
    host = candidate
    if ":" in candidate:
        try:
            host, _ = split_host_port(candidate)
        except HostPortError:
            host = ""
    return host.strip()
