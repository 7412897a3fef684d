"""
Route summarization (CIDR aggregation) for SubnetLab.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from .core import ADDRESS_BITS, InvalidFormat, Network, prefix_to_mask


class EfficiencyCategory(str, Enum):
    EFFICIENT = "Efficient"
    ACCEPTABLE = "Acceptable"
    INEFFICIENT = "Inefficient"


EFFICIENT_THRESHOLD = 65
ACCEPTABLE_THRESHOLD = 50


@dataclass(frozen=True)
class AggregationEfficiency:
    used_addresses: int
    total_addresses: int
    percentage: int
    category: EfficiencyCategory


def find_summary(addresses: Iterable[int]) -> Network:
    """
    Find the smallest CIDR block that covers every address.

    The block must clear each bit position where the lowest and highest
    addresses differ, so its prefix is 32 minus the bit length of min XOR max.
    """
    values: List[int] = list(addresses)
    if not values:
        raise InvalidFormat("At least one address is needed to find a summary route.")

    low, high = min(values), max(values)
    prefix = ADDRESS_BITS - (low ^ high).bit_length()
    return Network(low & prefix_to_mask(prefix), prefix)


def efficiency_category(percentage: float) -> EfficiencyCategory:
    if percentage >= EFFICIENT_THRESHOLD:
        return EfficiencyCategory.EFFICIENT
    if percentage >= ACCEPTABLE_THRESHOLD:
        return EfficiencyCategory.ACCEPTABLE
    return EfficiencyCategory.INEFFICIENT


def aggregation_efficiency(used_addresses: int, summary: Network) -> AggregationEfficiency:
    """Share of the summary block that is really in use, rounded half-up."""
    total = summary.block_size
    percentage = math.floor(used_addresses * 100 / total + 0.5)
    return AggregationEfficiency(
        used_addresses=used_addresses,
        total_addresses=total,
        percentage=percentage,
        category=efficiency_category(percentage),
    )
