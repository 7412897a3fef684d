"""
Classful subnet division for SubnetLab.

Splits a class A, B or C network into equal-size subnets from either a
subnet-count or a host-count requirement. Under the legacy policy the first
(subnet zero) and the last (all-ones) subnets are still calculated but are
flagged as unusable, which is why two extra subnets are budgeted.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Dict, Iterator, Optional, Tuple, Union

from . import config
from .core import (
    ADDRESS_BITS,
    AddressClass,
    CalculationError,
    InsufficientSpace,
    InvalidFormat,
    Network,
    SubnetError,
    UnsupportedClass,
    ceil_log2,
    class_of,
    default_prefix,
    format_address,
    parse_address,
)


class RequirementKind(str, Enum):
    SUBNETS = "subnets"
    HOSTS = "hosts"


class Reserved(str, Enum):
    NONE = "usable"
    ZERO_SUBNET = "zero-subnet"
    ALL_ONES_SUBNET = "all-ones-subnet"


@dataclass(frozen=True)
class ClassfulRequirement:
    kind: RequirementKind
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 1:
            raise InvalidFormat(f"Requirement value must be a positive integer, got {self.value!r}.")


@dataclass(frozen=True)
class ClassfulSubnet:
    index: int
    network: Network
    reserved: Reserved = Reserved.NONE

    @property
    def usable(self) -> bool:
        return self.reserved is Reserved.NONE

    def to_dict(self) -> Dict:
        row = {"name": f"Subnet {self.index}"}
        row.update(self.network.to_dict())
        row["status"] = self.reserved.value
        row["usable"] = self.usable
        return row


@dataclass(frozen=True)
class ClassfulResult:
    base: Network
    address_class: AddressClass
    requirement: ClassfulRequirement
    bits_borrowed: int
    legacy_reserved_subnets: bool

    @property
    def new_prefix(self) -> int:
        return self.base.prefix + self.bits_borrowed

    @property
    def total_subnets(self) -> int:
        return 1 << self.bits_borrowed

    @property
    def usable_subnets(self) -> int:
        if self.legacy_reserved_subnets:
            return self.total_subnets - 2
        return self.total_subnets

    @property
    def subnet_size(self) -> int:
        return 1 << (ADDRESS_BITS - self.new_prefix)

    @property
    def usable_hosts_per_subnet(self) -> int:
        return max(self.subnet_size - 2, 0)

    @property
    def total_usable_hosts(self) -> int:
        return self.usable_hosts_per_subnet * self.usable_subnets

    def subnet(self, index: int) -> ClassfulSubnet:
        """Compute a single subnet directly from its index."""
        if not 0 <= index < self.total_subnets:
            raise IndexError(f"Subnet index {index} outside 0..{self.total_subnets - 1}")
        reserved = Reserved.NONE
        if self.legacy_reserved_subnets:
            if index == 0:
                reserved = Reserved.ZERO_SUBNET
            elif index == self.total_subnets - 1:
                reserved = Reserved.ALL_ONES_SUBNET
        network = Network(self.base.address + index * self.subnet_size, self.new_prefix)
        return ClassfulSubnet(index, network, reserved)

    def usable_subnet(self, ordinal: int) -> ClassfulSubnet:
        """The ``ordinal``-th (1-based) subnet that is usable under the policy."""
        if not 1 <= ordinal <= self.usable_subnets:
            raise IndexError(f"Usable subnet {ordinal} outside 1..{self.usable_subnets}")
        return self.subnet(ordinal if self.legacy_reserved_subnets else ordinal - 1)

    def iter_subnets(self) -> Iterator[ClassfulSubnet]:
        for index in range(self.total_subnets):
            yield self.subnet(index)

    @cached_property
    def subnets(self) -> Tuple[ClassfulSubnet, ...]:
        return tuple(self.iter_subnets())

    def summary(self) -> Dict:
        return {
            "original_network": self.base.cidr,
            "address_class": self.address_class.value,
            "requirement": {"kind": self.requirement.kind.value, "value": self.requirement.value},
            "new_mask": f"/{self.new_prefix} ({format_address(Network(0, self.new_prefix).mask)})",
            "new_prefix": self.new_prefix,
            "bits_borrowed": self.bits_borrowed,
            "total_subnets": self.total_subnets,
            "usable_subnets": self.usable_subnets,
            "usable_hosts_per_subnet": self.usable_hosts_per_subnet,
            "total_usable_hosts": self.total_usable_hosts,
            "legacy_reserved_subnets": self.legacy_reserved_subnets,
        }

    def to_dict(self, limit: Optional[int] = None) -> Dict:
        count = self.total_subnets if limit is None else min(limit, self.total_subnets)
        return {
            "networks": [self.subnet(i).to_dict() for i in range(count)],
            "truncated": count < self.total_subnets,
            "summary": self.summary(),
        }


def subnet_bits_for(requirement: ClassfulRequirement, default_host_bits: int,
                    legacy_reserved_subnets: bool = True) -> int:
    """Number of host bits to borrow for a requirement."""
    if requirement.kind is RequirementKind.SUBNETS:
        # Legacy rule budgets two extra subnets for subnet zero and all-ones
        needed = requirement.value + 2 if legacy_reserved_subnets else requirement.value
        return ceil_log2(needed)

    host_bits = ceil_log2(requirement.value + 2)
    return default_host_bits - host_bits


def min_subnet_bits(legacy_reserved_subnets: bool) -> int:
    return 2 if legacy_reserved_subnets else 1


def _classful(base_ip: Union[str, int], requirement: ClassfulRequirement,
              legacy_reserved_subnets: bool) -> ClassfulResult:
    address = parse_address(base_ip) if isinstance(base_ip, str) else base_ip
    address_class = class_of(address)
    prefix = default_prefix(address_class)
    if prefix is None:
        raise UnsupportedClass(
            f"Class {address_class.value} addresses have no default mask.",
            requested=f"Classful subnetting of {format_address(address)}.",
            suggestion="Use a class A, B or C network address.",
        )

    base = Network(address, prefix)
    default_host_bits = ADDRESS_BITS - prefix
    bits = subnet_bits_for(requirement, default_host_bits, legacy_reserved_subnets)
    minimum = min_subnet_bits(legacy_reserved_subnets)
    maximum = default_host_bits - 2

    if bits < minimum or bits > maximum:
        raise InsufficientSpace(
            f"That needs {bits} subnet bits but class {address_class.value} allows "
            f"between {minimum} and {maximum}.",
            requested=f"{requirement.value} {requirement.kind.value} in {base.cidr}.",
            suggestion=_suggestion(requirement, default_host_bits, minimum, maximum,
                                   legacy_reserved_subnets),
        )

    return ClassfulResult(
        base=base,
        address_class=address_class,
        requirement=requirement,
        bits_borrowed=bits,
        legacy_reserved_subnets=legacy_reserved_subnets,
    )


def _suggestion(requirement: ClassfulRequirement, default_host_bits: int, minimum: int,
                maximum: int, legacy_reserved_subnets: bool) -> str:
    if requirement.kind is RequirementKind.SUBNETS:
        reserved = 2 if legacy_reserved_subnets else 0
        fewest = 1 if legacy_reserved_subnets else 2
        return f"Ask for between {fewest} and {(1 << maximum) - reserved} usable subnets."
    largest = (1 << (default_host_bits - minimum)) - 2
    return f"Ask for between 1 and {largest} hosts per subnet."


def calculate_classful(base_ip: Union[str, int], requirement: ClassfulRequirement,
                       legacy_reserved_subnets: Optional[bool] = None
                       ) -> Union[ClassfulResult, CalculationError]:
    """Divide a classful network; errors come back as a CalculationError value."""
    if legacy_reserved_subnets is None:
        legacy_reserved_subnets = config.LEGACY_RESERVED_SUBNETS
    try:
        return _classful(base_ip, requirement, legacy_reserved_subnets)
    except SubnetError as e:
        return CalculationError.from_exception(e)
