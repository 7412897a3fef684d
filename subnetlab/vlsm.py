"""
VLSM allocation for SubnetLab.

Requirements are placed largest first, back to back, from the start of the
parent network. A block of 2**k addresses that starts right after blocks no
smaller than itself always begins on a multiple of 2**k, so no gap search is
needed. The alignment is still checked after every placement.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .core import (
    ADDRESS_BITS,
    BlockExceedsParent,
    CalculationError,
    ErrorCode,
    InvalidFormat,
    Network,
    SubnetError,
    ceil_log2,
    format_address,
)

MIN_HOST_BITS = 2


class AlignmentError(RuntimeError):
    """A block was placed on a boundary that is not a multiple of its size."""


class EntryStatus(str, Enum):
    ASSIGNED = "assigned"
    ERROR = "error"


@dataclass(frozen=True)
class VlsmRequirement:
    name: str
    hosts_needed: int


@dataclass(frozen=True)
class VlsmEntry:
    requirement: VlsmRequirement
    status: EntryStatus
    network: Optional[Network] = None
    error_code: Optional[ErrorCode] = None
    error: Optional[str] = None

    @property
    def efficiency(self) -> Optional[float]:
        if self.network is None:
            return None
        return self.requirement.hosts_needed / self.network.usable_hosts * 100

    def to_dict(self) -> Dict:
        row = {
            "name": self.requirement.name,
            "hosts_requested": self.requirement.hosts_needed,
            "status": self.status.value,
        }
        if self.network is None:
            row["error_code"] = self.error_code.value
            row["error"] = self.error
            return row
        row.update(self.network.to_dict())
        row["efficiency"] = round(self.efficiency, 2)
        return row


@dataclass(frozen=True)
class VlsmResult:
    base: Network
    entries: Tuple[VlsmEntry, ...]

    @property
    def assigned(self) -> List[VlsmEntry]:
        return [e for e in self.entries if e.status is EntryStatus.ASSIGNED]

    @property
    def errors(self) -> List[VlsmEntry]:
        return [e for e in self.entries if e.status is EntryStatus.ERROR]

    @property
    def total_available(self) -> int:
        return self.base.block_size

    @property
    def total_allocated(self) -> int:
        return sum(e.network.block_size for e in self.assigned)

    @property
    def efficiency(self) -> float:
        return self.total_allocated / self.total_available * 100

    @property
    def remaining(self) -> Optional[Tuple[int, int]]:
        """First and last address left after the last placed block."""
        start = self.base.address + self.total_allocated
        if start > self.base.broadcast:
            return None
        return start, self.base.broadcast

    def summary(self) -> Dict:
        remaining = self.remaining
        return {
            "original_network": self.base.cidr,
            "total_available": self.total_available,
            "total_allocated": self.total_allocated,
            "total_requested_hosts": sum(e.requirement.hosts_needed for e in self.entries),
            "efficiency": round(self.efficiency, 2),
            "total_remaining": 0 if remaining is None else remaining[1] - remaining[0] + 1,
            "remaining_range": None if remaining is None else
            f"{format_address(remaining[0])} - {format_address(remaining[1])}",
            "assigned": len(self.assigned),
            "errors": len(self.errors),
        }

    def to_dict(self) -> Dict:
        return {
            "networks": [e.to_dict() for e in self.entries],
            "summary": self.summary(),
        }


def allocation_order(requirements: Sequence[VlsmRequirement]) -> List[VlsmRequirement]:
    """Largest request first; equal requests keep their input order."""
    return sorted(requirements, key=lambda r: r.hosts_needed, reverse=True)


def prefix_for_hosts(hosts_needed: int) -> int:
    """Smallest block that fits the hosts plus network and broadcast (never above /30)."""
    host_bits = max(MIN_HOST_BITS, ceil_log2(hosts_needed + 2))
    return ADDRESS_BITS - host_bits


def _vlsm(base_cidr: Union[str, Network], requirements: Sequence[VlsmRequirement]) -> VlsmResult:
    base = Network.from_cidr(base_cidr) if isinstance(base_cidr, str) else base_cidr
    if not requirements:
        raise InvalidFormat("At least one subnet requirement is needed.",
                            requested=f"VLSM allocation in {base.cidr}.")
    for req in requirements:
        if isinstance(req.hosts_needed, bool) or not isinstance(req.hosts_needed, int) \
                or req.hosts_needed < 0:
            raise InvalidFormat(
                f"Host count for '{req.name}' must be a non-negative integer, "
                f"got {req.hosts_needed!r}.",
                requested=f"VLSM allocation in {base.cidr}.",
            )

    entries = []
    cursor = base.address

    for req in allocation_order(requirements):
        prefix = prefix_for_hosts(req.hosts_needed)
        block_size = 1 << (ADDRESS_BITS - prefix)

        if prefix < base.prefix or cursor + block_size - 1 > base.broadcast:
            error = BlockExceedsParent(
                f"Insufficient contiguous space for {req.hosts_needed} hosts (/{prefix}).")
            entries.append(VlsmEntry(req, EntryStatus.ERROR,
                                     error_code=error.code, error=error.reason))
            continue

        if cursor % block_size:
            raise AlignmentError(
                f"/{prefix} block for '{req.name}' would start at {format_address(cursor)}, "
                f"which is not a multiple of {block_size}.")

        network = Network(cursor, prefix)
        entries.append(VlsmEntry(req, EntryStatus.ASSIGNED, network=network))
        cursor = network.broadcast + 1

    return VlsmResult(base=base, entries=tuple(entries))


def calculate_vlsm(base_cidr: Union[str, Network], requirements: Sequence[VlsmRequirement]
                   ) -> Union[VlsmResult, CalculationError]:
    """Allocate VLSM blocks; top-level errors come back as a CalculationError value."""
    try:
        return _vlsm(base_cidr, requirements)
    except SubnetError as e:
        return CalculationError.from_exception(e)
