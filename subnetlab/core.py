"""
Core IPv4 networking functions for SubnetLab.
"""

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

MAX_ADDRESS = 0xFFFFFFFF
ADDRESS_BITS = 32

_PREFIX_RE = re.compile(r'^(0|[1-9][0-9]?)$')


class ErrorCode(str, Enum):
    INVALID_FORMAT = "invalid_format"
    NOT_CONTIGUOUS_MASK = "not_contiguous_mask"
    UNSUPPORTED_CLASS = "unsupported_class"
    NOT_NETWORK_ADDRESS = "not_network_address"
    INSUFFICIENT_SPACE = "insufficient_space"
    BLOCK_EXCEEDS_PARENT = "block_exceeds_parent"


class SubnetError(ValueError):
    """Base error for every failure the engine can report to a caller."""

    code = ErrorCode.INVALID_FORMAT

    def __init__(self, reason: str, requested: str = "", suggestion: str = ""):
        super().__init__(reason)
        self.reason = reason
        self.requested = requested
        self.suggestion = suggestion


class InvalidFormat(SubnetError):
    code = ErrorCode.INVALID_FORMAT


class NotContiguousMask(SubnetError):
    code = ErrorCode.NOT_CONTIGUOUS_MASK


class UnsupportedClass(SubnetError):
    code = ErrorCode.UNSUPPORTED_CLASS


class NotNetworkAddress(SubnetError):
    code = ErrorCode.NOT_NETWORK_ADDRESS

    def __init__(self, reason: str, corrected: "Network", requested: str = ""):
        super().__init__(reason, requested, f"Use {corrected.cidr} instead.")
        self.corrected = corrected


class InsufficientSpace(SubnetError):
    code = ErrorCode.INSUFFICIENT_SPACE


class BlockExceedsParent(SubnetError):
    code = ErrorCode.BLOCK_EXCEEDS_PARENT


@dataclass(frozen=True)
class CalculationError:
    """Typed failure returned by the allocators instead of raising."""

    code: ErrorCode
    reason: str
    requested: str = ""
    suggestion: str = ""
    corrected: Optional["Network"] = None

    @classmethod
    def from_exception(cls, exc: SubnetError) -> "CalculationError":
        return cls(
            code=exc.code,
            reason=exc.reason,
            requested=exc.requested,
            suggestion=exc.suggestion,
            corrected=getattr(exc, "corrected", None),
        )

    @property
    def message(self) -> str:
        parts = [p for p in (self.requested, self.reason, self.suggestion) if p]
        return " ".join(parts)

    def to_dict(self) -> Dict:
        result = {
            "code": self.code.value,
            "message": self.message,
            "requested": self.requested,
            "reason": self.reason,
            "suggestion": self.suggestion,
        }
        if self.corrected is not None:
            result["corrected_network"] = format_address(self.corrected.address)
            result["corrected_prefix"] = self.corrected.prefix
        return result


class AddressClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


_DEFAULT_PREFIXES = {
    AddressClass.A: 8,
    AddressClass.B: 16,
    AddressClass.C: 24,
}


def parse_address(text: str) -> int:
    """Parse a dotted-quad IPv4 address into a 32-bit integer."""
    if not isinstance(text, str):
        raise InvalidFormat(f"Expected an address string, got {type(text).__name__}.")
    try:
        # ipaddress rejects empty octets, values over 255 and leading zeros
        return int(ipaddress.IPv4Address(text))
    except ipaddress.AddressValueError as e:
        raise InvalidFormat(f"'{text}' is not a valid IPv4 address ({e}).") from e


def format_address(address: int) -> str:
    """Format a 32-bit integer as a dotted-quad string."""
    _check_address(address)
    return str(ipaddress.IPv4Address(address))


def _check_address(address: int) -> None:
    if isinstance(address, bool) or not isinstance(address, int) or not 0 <= address <= MAX_ADDRESS:
        raise InvalidFormat(f"{address!r} is not a 32-bit unsigned address.")


def _check_prefix(prefix: int) -> None:
    if isinstance(prefix, bool) or not isinstance(prefix, int) or not 0 <= prefix <= ADDRESS_BITS:
        raise InvalidFormat(f"Prefix {prefix!r} is outside /0 to /32.")


def prefix_to_mask(prefix: int) -> int:
    """Convert a prefix length to its 32-bit mask."""
    _check_prefix(prefix)
    return (MAX_ADDRESS << (ADDRESS_BITS - prefix)) & MAX_ADDRESS


def mask_to_prefix(mask: int) -> int:
    """Convert a contiguous 32-bit mask to its prefix length."""
    _check_address(mask)
    inverted = ~mask & MAX_ADDRESS
    # inverted + 1 must be a power of two (or wrap to zero for /0)
    if ((inverted + 1) & MAX_ADDRESS) & inverted:
        raise NotContiguousMask(f"Mask {format_address(mask)} has non-contiguous bits.")
    return ADDRESS_BITS - inverted.bit_length()


def parse_mask(mask_str: str) -> int:
    """Parse subnet mask from /24, 24 or 255.255.255.0 formats into a prefix."""
    if not isinstance(mask_str, str):
        raise InvalidFormat(f"Expected a mask string, got {type(mask_str).__name__}.")
    mask_str = mask_str.strip()

    if mask_str.startswith('/'):
        mask_str = mask_str[1:]
    elif '.' in mask_str:
        return mask_to_prefix(parse_address(mask_str))

    if not _PREFIX_RE.match(mask_str) or int(mask_str) > ADDRESS_BITS:
        raise InvalidFormat(f"'{mask_str}' is not a valid prefix length.")
    return int(mask_str)


def parse_cidr(text: str) -> Tuple[int, int]:
    """Parse 'a.b.c.d/p' into (address, prefix). Host bits may be set."""
    if not isinstance(text, str) or text.count('/') != 1:
        raise InvalidFormat(f"'{text}' is not in a.b.c.d/prefix notation.")
    ip_part, prefix_part = text.strip().split('/')
    if not _PREFIX_RE.match(prefix_part) or int(prefix_part) > ADDRESS_BITS:
        raise InvalidFormat(f"'{prefix_part}' is not a valid prefix length.")
    return parse_address(ip_part), int(prefix_part)


def class_of(address: int) -> AddressClass:
    """Classify an address by its first octet (0.x and 127.x count as class A)."""
    _check_address(address)
    first = address >> 24
    if first <= 127:
        return AddressClass.A
    if first <= 191:
        return AddressClass.B
    if first <= 223:
        return AddressClass.C
    if first <= 239:
        return AddressClass.D
    return AddressClass.E


def default_prefix(address_class: AddressClass) -> Optional[int]:
    return _DEFAULT_PREFIXES.get(address_class)


def default_mask(address_class: AddressClass) -> Optional[int]:
    prefix = default_prefix(address_class)
    return None if prefix is None else prefix_to_mask(prefix)


def ceil_log2(n: int) -> int:
    """Smallest k such that 2**k >= n."""
    if n < 1:
        raise ValueError(f"ceil_log2 needs a positive integer, got {n}")
    return (n - 1).bit_length()


def octets(address: int) -> Tuple[int, int, int, int]:
    _check_address(address)
    return (address >> 24) & 255, (address >> 16) & 255, (address >> 8) & 255, address & 255


def to_binary(address: int) -> str:
    """32-character zero-padded binary string."""
    _check_address(address)
    return format(address, '032b')


def ip_to_binary(address: int) -> str:
    """Convert an address to binary format with dots."""
    binary = to_binary(address)
    return f"{binary[:8]}.{binary[8:16]}.{binary[16:24]}.{binary[24:]}"


def format_binary(address: int) -> str:
    """Binary with nibble spacing, e.g. 1111 1111.1111 1111.1111 1111.1111 1100"""
    binary = to_binary(address)
    return '.'.join(
        f"{binary[i:i + 4]} {binary[i + 4:i + 8]}" for i in range(0, ADDRESS_BITS, 8)
    )


def binary_to_address(binary_str: str) -> int:
    """Convert binary IP (dots and spaces allowed) to an integer."""
    binary_clean = binary_str.replace('.', '').replace(' ', '')
    if len(binary_clean) != ADDRESS_BITS or not all(c in '01' for c in binary_clean):
        raise InvalidFormat(f"'{binary_str}' is not a 32-bit binary address.")
    return int(binary_clean, 2)


@dataclass(frozen=True, order=True)
class Network:
    """An aligned IPv4 block. The address must have every host bit cleared."""

    address: int
    prefix: int

    def __post_init__(self):
        _check_address(self.address)
        _check_prefix(self.prefix)
        expected = self.address & prefix_to_mask(self.prefix)
        if expected != self.address:
            raise NotNetworkAddress(
                f"{format_address(self.address)} has host bits set for /{self.prefix}.",
                corrected=Network(expected, self.prefix),
                requested=f"{format_address(self.address)}/{self.prefix} was given as a network.",
            )

    @classmethod
    def containing(cls, address: int, prefix: int) -> "Network":
        """The network that holds ``address`` under ``prefix``."""
        return cls(address & prefix_to_mask(prefix), prefix)

    @classmethod
    def from_cidr(cls, text: str) -> "Network":
        address, prefix = parse_cidr(text)
        return cls(address, prefix)

    @property
    def mask(self) -> int:
        return prefix_to_mask(self.prefix)

    @property
    def wildcard(self) -> int:
        return ~self.mask & MAX_ADDRESS

    @property
    def broadcast(self) -> int:
        return self.address | self.wildcard

    @property
    def block_size(self) -> int:
        return 1 << (ADDRESS_BITS - self.prefix)

    @property
    def usable_hosts(self) -> int:
        return max(self.block_size - 2, 0)

    @property
    def first_usable(self) -> Optional[int]:
        if self.prefix >= 31:
            return None
        return self.address + 1

    @property
    def last_usable(self) -> Optional[int]:
        if self.prefix >= 31:
            return None
        return self.broadcast - 1

    @property
    def cidr(self) -> str:
        return f"{format_address(self.address)}/{self.prefix}"

    @property
    def host_range(self) -> Optional[str]:
        if self.first_usable is None:
            return None
        return f"{format_address(self.first_usable)} - {format_address(self.last_usable)}"

    def contains(self, address: int) -> bool:
        return self.address <= address <= self.broadcast

    def overlaps(self, other: "Network") -> bool:
        return self.address <= other.broadcast and other.address <= self.broadcast

    def to_dict(self) -> Dict:
        first, last = self.first_usable, self.last_usable
        return {
            "subnet": self.cidr,
            "network": format_address(self.address),
            "prefix": self.prefix,
            "mask": format_address(self.mask),
            "wildcard": format_address(self.wildcard),
            "broadcast": format_address(self.broadcast),
            "first_host": None if first is None else format_address(first),
            "last_host": None if last is None else format_address(last),
            "block_size": self.block_size,
            "usable_hosts": self.usable_hosts,
        }

    def __str__(self) -> str:
        return self.cidr


def next_network(network: Network) -> Network:
    """The block of the same size that immediately follows ``network``."""
    start = network.broadcast + 1
    if start > MAX_ADDRESS:
        raise InsufficientSpace(
            f"{network.cidr} is the last /{network.prefix} in the address space.",
            requested=f"Next network after {network.cidr}.",
        )
    return Network(start, network.prefix)


def analyze_address(address: int, prefix: int) -> Dict:
    """Analyze a host address with its prefix."""
    network = Network.containing(address, prefix)

    # /31 and /32 have no network/broadcast reservation
    if prefix < 31:
        total_hosts = network.usable_hosts
        first_host = network.first_usable
        last_host = network.last_usable
    elif prefix == 31:
        total_hosts = 2
        first_host = network.address
        last_host = network.broadcast
    else:
        total_hosts = 1
        first_host = network.address
        last_host = network.address

    return {
        "ip_decimal": format_address(address),
        "ip_binary": ip_to_binary(address),
        "subnet_mask_decimal": format_address(network.mask),
        "subnet_mask_binary": ip_to_binary(network.mask),
        "subnet_mask_cidr": f"/{prefix}",
        "wildcard_mask": format_address(network.wildcard),
        "network_address": format_address(network.address),
        "broadcast_address": format_address(network.broadcast),
        "first_host": format_address(first_host),
        "last_host": format_address(last_host),
        "total_hosts": total_hosts,
        "address_class": class_of(address).value,
    }
