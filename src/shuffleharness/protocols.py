# src/shuffleharness/protocols.py

"""
Shared protocols and address types.
"""

from typing import Protocol, runtime_checkable

from attrs import define, field


@define(frozen=True, slots=True)
class Address:
    """
    Where a client should connect. `host` is a hostname or a UNIX socket path,
    `port` is None when the host needs no port.
    """

    host: str = field()
    port: str | None = field(default=None, converter=lambda p: str(p) if p not in (None, "") else None)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}" if self.port else self.host


@runtime_checkable
class AddressProvider(Protocol):
    """Anything that can tell a client which server to talk to."""

    def address(self) -> Address:
        ...


@define(frozen=True, slots=True)
class LiteralAddress:
    """An AddressProvider that always returns the same host/port."""

    host: str = field()
    port: str | None = field(default=None)

    def address(self) -> Address:
        return Address(self.host, self.port)


# 🔼⚙️
