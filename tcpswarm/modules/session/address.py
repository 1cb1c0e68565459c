from typing import Tuple

DEFAULT_HOST = "127.0.0.1"


class AddressError(ValueError):
    """Raised when a target address cannot be parsed."""


def parse_address(address: str, default_host: str = DEFAULT_HOST) -> Tuple[str, int]:
    """
    Split a target address into host and port.

    Accepted forms:
    - "host:port"
    - "[ipv6]:port"
    - "port" (host falls back to default_host)

    Args:
        address: Address string
        default_host: Host used when only a port is given

    Returns:
        (host, port) tuple

    Raises:
        AddressError: If the address is malformed or the port is out of range
    """
    address = address.strip()
    if not address:
        raise AddressError("Address is empty")

    if address.isdigit():
        host, port_text = default_host, address
    elif address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1 : end + 2] != ":":
            raise AddressError(f"Invalid IPv6 address: {address!r}")
        host, port_text = address[1:end], address[end + 2 :]
    else:
        host, sep, port_text = address.rpartition(":")
        if not sep or ":" in host:
            raise AddressError(f"Expected host:port, got {address!r}")

    if not host:
        raise AddressError(f"Missing host in {address!r}")

    try:
        port = int(port_text)
    except ValueError:
        raise AddressError(f"Invalid port in {address!r}") from None

    if not 0 < port < 65536:
        raise AddressError(f"Port out of range in {address!r}")

    return host, port


def format_address(host: str, port: int) -> str:
    """Join host and port, bracketing IPv6 hosts."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
