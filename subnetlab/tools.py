"""
Tools for SubnetLab.

Every tool takes the raw strings typed into the UI (or sent by an MCP
client) and returns a JSON document.
"""

import json
import logging
from typing import List

from . import api, config
from .core import analyze_address, binary_to_address, parse_address, parse_mask

logger = logging.getLogger(__name__)


def _dumps(result) -> str:
    return json.dumps(result, indent=2)


def _split_list(text: str) -> List[str]:
    return [item.strip() for item in text.replace('\n', ',').split(',') if item.strip()]


def _parse_ip(ip: str) -> int:
    # Binary input such as 11000000.10101000.00000001.00001010
    if ip.count('.') == 3 and all(c in '01. ' for c in ip) and len(ip.replace('.', '')) > 15:
        return binary_to_address(ip)
    return parse_address(ip)


def ip_info(ip: str, subnet_mask: str) -> str:
    """
    Analyze a complete IPv4 address with its subnet mask.

    Args:
        ip (str): IP address in decimal (192.168.1.10) or binary format
        subnet_mask (str): Subnet mask in decimal (255.255.255.0), CIDR (/24), or number (24) format

    Returns:
        str: Complete IP and network information in JSON format
    """
    try:
        result = analyze_address(_parse_ip(ip.strip()), parse_mask(subnet_mask))
        return _dumps(result)
    except ValueError as e:
        return _dumps({"error": str(e)})


def classful_calculator(network: str, division_type: str = "subnets", number: str = "") -> str:
    """
    Divide a classful (A, B or C) network into equal subnets.

    Subnet zero and the all-ones subnet are reserved unless the server runs
    with LEGACY_RESERVED_SUBNETS=false.

    Args:
        network (str): Classful network address (e.g., "172.16.0.0")
        division_type (str): "subnets" for a number of usable subnets or "hosts" for hosts per subnet
        number (str): How many usable subnets or hosts per subnet are required

    Returns:
        str: Subnet table and summary in JSON format (long tables are truncated)
    """
    try:
        value = int(number.strip())
    except ValueError:
        return _dumps({"error": f"'{number}' is not a whole number"})

    try:
        result = api.calculate_classful(network.strip(), division_type.strip().lower(), value,
                                        limit=config.MAX_RESULT_ROWS)
        return _dumps(result)
    except Exception as e:
        logger.exception("Classful calculation failed")
        return _dumps({"error": str(e)})


def vlsm_calculator(network: str, hosts_per_subnet: str, subnet_names: str = "") -> str:
    """
    Allocate variable-length subnets, largest first.

    Args:
        network (str): Base network in CIDR format (e.g., "192.168.1.0/24")
        hosts_per_subnet (str): Comma-separated host counts per subnet (e.g., "100,50,10")
        subnet_names (str): Optional comma-separated names in the same order

    Returns:
        str: Allocated subnets (or per-subnet errors) and summary in JSON format
    """
    try:
        hosts = [int(h) for h in _split_list(hosts_per_subnet)]
    except ValueError:
        return _dumps({"error": f"Host counts must be whole numbers: '{hosts_per_subnet}'"})

    names = _split_list(subnet_names)
    requirements = [
        {"name": names[i] if i < len(names) else f"Subnet {i + 1}", "hosts": count}
        for i, count in enumerate(hosts)
    ]
    try:
        return _dumps(api.calculate_vlsm(network.strip(), requirements))
    except Exception as e:
        logger.exception("VLSM calculation failed")
        return _dumps({"error": str(e)})


def summary_route(ip_list: str) -> str:
    """
    Find the summary route that covers a list of networks.

    Args:
        ip_list (str): Comma or newline separated network addresses (e.g., "192.168.0.0,192.168.1.0")

    Returns:
        str: Summary network, prefix and mask in JSON format
    """
    result = api.find_summary_route(_split_list(ip_list))
    if result is None:
        return _dumps({"error": "Enter at least one address"})
    return _dumps(result)


def generate_exercise(exercise_type: str = "identify-network", difficulty: str = "easy",
                      seed: str = "") -> str:
    """
    Generate a random subnetting exercise with its solution and explanation.

    Args:
        exercise_type (str): identify-network, classful-legacy, calculate-mask, summarization, next-network or vlsm-scenario
        difficulty (str): easy, medium or hard
        seed (str): Optional integer seed to reproduce an exercise

    Returns:
        str: Exercise in JSON format with problem, solution, feedback and seed
    """
    try:
        seed_value = int(seed) if seed.strip() else None
        return _dumps(api.generate_exercise(exercise_type.strip(), difficulty.strip(), seed_value))
    except ValueError as e:
        return _dumps({"error": str(e)})


def check_exercise(exercise_type: str, difficulty: str, seed: str, answers: str) -> str:
    """
    Check answers to a seeded exercise.

    Args:
        exercise_type (str): The exercise kind used to generate it
        difficulty (str): The difficulty used to generate it
        seed (str): The seed returned by generate_exercise
        answers (str): JSON object mapping solution field names to answers

    Returns:
        str: Per-field correctness and the expected solution in JSON format
    """
    try:
        parsed = json.loads(answers)
        if not isinstance(parsed, dict):
            raise ValueError("Answers must be a JSON object")
        result = api.check_exercise(exercise_type.strip(), difficulty.strip(),
                                    int(seed), parsed)
        return _dumps(result)
    except ValueError as e:
        return _dumps({"error": str(e)})
