"""
Step-by-step explanations for SubnetLab exercises.

Each trace is rebuilt from the problem parameters using the manual methods a
student would use (interesting octet, magic number, bit counting), so it can
be compared against the canonical solution instead of copying it.
"""

from typing import Dict, List, Optional

from .classful import RequirementKind, min_subnet_bits
from .core import (
    ADDRESS_BITS,
    MAX_ADDRESS,
    Network,
    ceil_log2,
    class_of,
    default_prefix,
    format_address,
    format_binary,
    octets,
    prefix_to_mask,
    to_binary,
)
from .problems import (
    CalculateMaskParams,
    ClassfulParams,
    ExerciseKind,
    ExerciseParams,
    ExerciseProblem,
    IdentifyNetworkParams,
    NextNetworkParams,
    SummarizationParams,
    VlsmParams,
)
from .summary import aggregation_efficiency
from .vlsm import calculate_vlsm, prefix_for_hosts


def interesting_octet(prefix: int) -> Optional[int]:
    """1-based index of the first mask octet that is not 255 (None for /32)."""
    for index, value in enumerate(octets(prefix_to_mask(prefix)), start=1):
        if value != 255:
            return index
    return None


def magic_number(prefix: int) -> int:
    """256 minus the mask value in the interesting octet."""
    octet = interesting_octet(prefix)
    if octet is None:
        return 0
    return 256 - octets(prefix_to_mask(prefix))[octet - 1]


def _octet_shift(octet: int) -> int:
    return 8 * (4 - octet)


def _trace_identify_network(params: IdentifyNetworkParams) -> Dict:
    mask = prefix_to_mask(params.prefix)
    wildcard = ~mask & MAX_ADDRESS
    octet = interesting_octet(params.prefix)
    magic = magic_number(params.prefix)
    ip_octet = octets(params.address)[octet - 1]

    # Network octet is the largest multiple of the magic number not above the IP octet
    network_octet = (ip_octet // magic) * magic
    shift = _octet_shift(octet)
    kept = params.address & (MAX_ADDRESS << (shift + 8)) & MAX_ADDRESS
    network = kept | (network_octet << shift)
    broadcast = network | wildcard

    return {
        "mask_input_format": params.mask_format,
        "ip": format_address(params.address),
        "prefix": params.prefix,
        "mask_ddn": format_address(mask),
        "wildcard_ddn": format_address(wildcard),
        "ip_binary": format_binary(params.address),
        "mask_binary": format_binary(mask),
        "wildcard_binary": format_binary(wildcard),
        "network_binary": format_binary(network),
        "broadcast_binary": format_binary(broadcast),
        "interesting_octet": octet,
        "mask_octet_value": octets(mask)[octet - 1],
        "magic_number": magic,
        "magic_number_2x": magic * 2,
        "ip_octet_value": ip_octet,
        "network_octet_value": network_octet,
        "broadcast_octet_value": network_octet + magic - 1,
        "network": format_address(network),
        "broadcast": format_address(broadcast),
        "first_host": format_address(network + 1),
        "last_host": format_address(broadcast - 1),
    }


def _borrowing_steps(requirement, default_host_bits: int, legacy: bool) -> Dict:
    if requirement.kind is RequirementKind.SUBNETS:
        needed = requirement.value + 2 if legacy else requirement.value
        bits = ceil_log2(needed)
        return {
            "total_subnets_needed": needed,
            "host_bits_needed": default_host_bits - bits,
            "formula": "2^n >= N",
            "formula_result": f"2^{bits} = {2 ** bits}",
            "final_bits": bits,
            "subnet_bits": bits,
        }

    host_bits = ceil_log2(requirement.value + 2)
    return {
        "total_subnets_needed": None,
        "host_bits_needed": host_bits,
        "formula": "2^H - 2 >= N",
        "formula_result": f"2^{host_bits} - 2 = {2 ** host_bits - 2}",
        "final_bits": host_bits,
        "subnet_bits": default_host_bits - host_bits,
    }


def _trace_classful(params: ClassfulParams) -> Dict:
    base_prefix = default_prefix(class_of(params.base_network))
    default_host_bits = ADDRESS_BITS - base_prefix
    legacy = params.legacy_reserved_subnets
    steps = _borrowing_steps(params.requirement, default_host_bits, legacy)

    bits = steps["subnet_bits"]
    new_prefix = base_prefix + bits
    host_bits = ADDRESS_BITS - new_prefix
    total = 2 ** bits
    usable = total - 2 if legacy else total

    # Target subnet by stepping the magic number through the interesting octet
    index = params.target_ordinal if legacy else params.target_ordinal - 1
    block = 2 ** host_bits
    target = params.base_network + index * block

    trace = {
        "req_type": params.requirement.kind.value,
        "req_value": params.requirement.value,
        "legacy_reserved_subnets": legacy,
        "min_subnet_bits": min_subnet_bits(legacy),
        "default_cidr": base_prefix,
        "default_host_bits": default_host_bits,
        "bits_borrowed": bits,
        "new_cidr": new_prefix,
        "mask_ddn": format_address(prefix_to_mask(new_prefix)),
        "total_subnets": total,
        "usable_subnets": usable,
        "host_bits_final": host_bits,
        "usable_hosts": 2 ** host_bits - 2,
        "interesting_octet": interesting_octet(new_prefix),
        "magic_number": magic_number(new_prefix),
        "target_ordinal": params.target_ordinal,
        "target_index": index,
        "target_network": format_address(target),
        "target_range": f"{format_address(target + 1)} - {format_address(target + block - 2)}",
    }
    trace.update(steps)
    return trace


def _trace_calculate_mask(params: CalculateMaskParams) -> Dict:
    address_class = class_of(params.base_network)
    base_prefix = default_prefix(address_class)
    default_host_bits = ADDRESS_BITS - base_prefix
    steps = _borrowing_steps(params.requirement, default_host_bits,
                             params.legacy_reserved_subnets)

    new_prefix = base_prefix + steps["subnet_bits"]
    host_bits = ADDRESS_BITS - new_prefix
    trace = {
        "base_network": format_address(params.base_network),
        "first_octet": octets(params.base_network)[0],
        "ip_class": address_class.value,
        "default_mask": format_address(prefix_to_mask(base_prefix)),
        "default_cidr": f"/{base_prefix}",
        "default_host_bits": default_host_bits,
        "req_type": params.requirement.kind.value,
        "req_value": params.requirement.value,
        "host_bits": host_bits,
        "new_prefix": new_prefix,
        "new_cidr": f"/{new_prefix}",
        "mask_ddn": format_address(prefix_to_mask(new_prefix)),
        "total_subnets": 2 ** steps["subnet_bits"],
        "total_hosts": 2 ** host_bits - 2,
    }
    trace.update(steps)
    return trace


def _common_leading_bits(values: List[str]) -> int:
    count = 0
    for column in zip(*values):
        if len(set(column)) != 1:
            break
        count += 1
    return count


def _trace_summarization(params: SummarizationParams) -> Dict:
    addresses = [n.address for n in params.networks]
    base_prefix = params.base_prefix

    # Line the binary forms up and count the matching leading bits
    prefix = _common_leading_bits([to_binary(a) for a in addresses])
    summary = Network(addresses[0] & prefix_to_mask(prefix), prefix)

    if prefix < 8:
        octet = 1
    elif prefix < 16:
        octet = 2
    elif prefix < 24:
        octet = 3
    else:
        octet = 4
    # A /8, /16 or /24 summary changes in the following octet
    if prefix % 8 == 0 and base_prefix > prefix and prefix < ADDRESS_BITS:
        octet = prefix // 8 + 1

    binary_list = [
        {"ip": format_address(a), "bin": format(octets(a)[octet - 1], '08b')}
        for a in addresses
    ]
    fixed_octets = octet - 1
    base_bits = fixed_octets * 8
    common_bits = prefix - base_bits
    efficiency = aggregation_efficiency(params.used_addresses, summary)
    total_in_block = len(params.networks) + len(params.removed)

    return {
        "binary_list": binary_list,
        "interesting_octet": octet,
        "fixed_octets": fixed_octets,
        "base_bits": base_bits,
        "base_prefix": base_prefix,
        "common_bits": common_bits,
        "common_bits_pattern": binary_list[0]["bin"][:common_bits],
        "new_prefix": prefix,
        "new_mask_ddn": format_address(summary.mask),
        "summary_route": format_address(summary.address),
        "summary_mask": f"/{prefix}",
        "summary_range": f"{format_address(summary.address)} - {format_address(summary.broadcast)}",
        "original_network_list": [n.cidr for n in params.networks],
        "num_networks": len(params.networks),
        "summary_total_ips": efficiency.total_addresses,
        "summary_used_ips": efficiency.used_addresses,
        "efficiency_percentage": efficiency.percentage,
        "efficiency_category": efficiency.category.value,
        "is_inefficient": bool(params.removed),
        "total_networks_in_block": total_in_block,
        "removed_networks_list": [n.cidr for n in params.removed],
    }


def _trace_next_network(params: NextNetworkParams) -> Dict:
    network = params.network
    octet = interesting_octet(network.prefix)
    magic = magic_number(network.prefix)
    network_octet = octets(network.address)[octet - 1]
    next_octet = network_octet + magic

    # Add the magic number at the interesting octet; a carry ripples left
    next_address = network.address + (magic << _octet_shift(octet))

    return {
        "network_cidr": network.cidr,
        "prefix": network.prefix,
        "octet": octet,
        "mask_ddn": format_address(network.mask),
        "octet_value": octets(network.mask)[octet - 1],
        "magic_number": magic,
        "network_octet": network_octet,
        "next_network_octet": next_octet,
        "carry": next_octet > 255,
        "next_network": format_address(next_address) if next_address <= MAX_ADDRESS else None,
    }


def _trace_vlsm(params: VlsmParams) -> Dict:
    steps = []
    for req in params.requirements:
        prefix = prefix_for_hosts(req.hosts_needed)
        steps.append({
            "name": req.name,
            "hosts": req.hosts_needed,
            "hosts_with_reserved": req.hosts_needed + 2,
            "host_bits": ADDRESS_BITS - prefix,
            "block_size": 2 ** (ADDRESS_BITS - prefix),
            "cidr": f"/{prefix}",
        })
    # Largest block first keeps every block aligned
    steps.sort(key=lambda s: s["hosts"], reverse=True)

    result = calculate_vlsm(params.base, params.requirements)
    calc = result.to_dict()
    return {
        "is_vlsm": True,
        "base_network": params.base.cidr,
        "allocation_order": [s["name"] for s in steps],
        "sizing_steps": steps,
        "networks": calc.get("networks", []),
        "summary": calc.get("summary", {}),
    }


_BUILDERS = {
    ExerciseKind.IDENTIFY_NETWORK: _trace_identify_network,
    ExerciseKind.CLASSFUL_LEGACY: _trace_classful,
    ExerciseKind.CALCULATE_MASK: _trace_calculate_mask,
    ExerciseKind.SUMMARIZATION: _trace_summarization,
    ExerciseKind.NEXT_NETWORK: _trace_next_network,
    ExerciseKind.VLSM_SCENARIO: _trace_vlsm,
}


def trace_for(kind: ExerciseKind, params: ExerciseParams) -> Dict:
    return _BUILDERS[ExerciseKind(kind)](params)


def build_trace(problem: ExerciseProblem) -> Dict:
    """Explanation data for a problem, derived from its parameters only."""
    return trace_for(problem.kind, problem.parameters)
