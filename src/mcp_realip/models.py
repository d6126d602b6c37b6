"""Pydantic models and exceptions for client IP resolution."""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class AddressSource(str, Enum):
    """Where a resolved client address was taken from."""
    FORWARDED_FOR = "header-forwarded-for"
    REAL_IP = "header-real-ip"
    CLIENT_IP = "header-client-ip"
    CONNECTION = "connection-address"
    NONE = ""


class ResolutionMode(str, Enum):
    """Available resolution strategies."""
    STRICT = "strict"
    SIMPLE = "simple"


class ResolvedAddress(BaseModel):
    """Result of resolving the client address of a request."""
    address: str = ""
    source: AddressSource = AddressSource.NONE

    model_config = {"frozen": True}

    @property
    def found(self) -> bool:
        """Check if a public address was found."""
        return bool(self.address)

    def as_tuple(self) -> tuple[str, str]:
        """Return the result as an ``(address, source)`` pair."""
        return self.address, self.source.value


class AddressClassification(BaseModel):
    """Classification of a single candidate address."""
    candidate: str
    host: str
    valid: bool
    private: bool = False
    network: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.valid and not self.private


class ResolveRequest(BaseModel):
    """Arguments accepted by the resolve_client_ip tool."""
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    remote_addr: str = ""
    mode: Optional[ResolutionMode] = None


class ClassifyRequest(BaseModel):
    """Arguments accepted by the classify_ip tool."""
    address: str


class AddressParseError(ValueError):
    """Raised when a string is not a valid IPv4 or IPv6 literal."""

    def __init__(self, address: str, details: Optional[str] = None) -> None:
        self.address = address
        self.details = details
        message = f"address is not valid: {address!r}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message)


class HostPortError(ValueError):
    """Raised when a host:port string cannot be split."""

    def __init__(self, host_port: str, reason: str) -> None:
        self.host_port = host_port
        self.reason = reason
        super().__init__(f"{reason}: {host_port!r}")
