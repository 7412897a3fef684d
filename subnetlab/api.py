"""
Plain-data entry points for SubnetLab.

These functions take strings and numbers as a UI would send them and return
dictionaries ready to be rendered or serialized.
"""

import random
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .classful import ClassfulRequirement, RequirementKind
from .classful import calculate_classful as _calculate_classful
from .core import (
    CalculationError,
    InvalidFormat,
    SubnetError,
    format_address,
    parse_address,
    parse_cidr,
)
from .exercises import generate_exercise as _generate_exercise
from .problems import Difficulty, ExerciseKind, check_answers
from .summary import find_summary
from .vlsm import VlsmRequirement
from .vlsm import calculate_vlsm as _calculate_vlsm

__all__ = [
    "parse_address",
    "parse_cidr",
    "format_address",
    "calculate_classful",
    "calculate_vlsm",
    "find_summary_route",
    "generate_exercise",
    "check_exercise",
]

MAX_SEED = 2 ** 31 - 1


def _error(exc: SubnetError) -> Dict:
    return {"error": CalculationError.from_exception(exc).to_dict()}


def calculate_classful(ip: str, kind: Union[RequirementKind, str], value: int,
                       legacy_reserved_subnets: Optional[bool] = None,
                       limit: Optional[int] = None) -> Dict:
    """Classful division of ``ip`` for a subnets or hosts requirement."""
    try:
        requirement = ClassfulRequirement(RequirementKind(kind), value)
    except ValueError as e:
        return _error(InvalidFormat(str(e), requested=f"{value} {kind} in {ip}."))

    result = _calculate_classful(ip, requirement, legacy_reserved_subnets)
    if isinstance(result, CalculationError):
        return {"error": result.to_dict()}
    return result.to_dict(limit=limit)


def _as_requirement(index: int, item: Union[Mapping, VlsmRequirement]) -> VlsmRequirement:
    if isinstance(item, VlsmRequirement):
        return item
    name = item.get("name") or f"Subnet {index}"
    return VlsmRequirement(str(name), item.get("hosts"))


def calculate_vlsm(cidr: str, requirements: Iterable[Union[Mapping, VlsmRequirement]]) -> Dict:
    """VLSM allocation of ``requirements`` ({"name", "hosts"}) inside ``cidr``."""
    reqs = [_as_requirement(i, item) for i, item in enumerate(requirements, start=1)]
    result = _calculate_vlsm(cidr, reqs)
    if isinstance(result, CalculationError):
        return {"error": result.to_dict()}
    return result.to_dict()


def find_summary_route(ips: List[str]) -> Optional[Dict]:
    """Smallest summary route covering ``ips``; None for an empty list."""
    if not ips:
        return None
    try:
        summary = find_summary(parse_address(ip.strip() if isinstance(ip, str) else ip)
                               for ip in ips)
    except SubnetError as e:
        return _error(e)
    return {
        "network": format_address(summary.address),
        "prefix": summary.prefix,
        "mask": format_address(summary.mask),
    }


def _exercise_choice(kind: str, difficulty: str) -> Union[Tuple[ExerciseKind, Difficulty], Dict]:
    requested = f"A {difficulty} {kind} exercise."
    try:
        kind = ExerciseKind(kind)
    except ValueError:
        return _error(InvalidFormat(
            f"'{kind}' is not an exercise kind.", requested=requested,
            suggestion="Use one of: " + ", ".join(k.value for k in ExerciseKind) + "."))
    try:
        difficulty = Difficulty(difficulty)
    except ValueError:
        return _error(InvalidFormat(
            f"'{difficulty}' is not a difficulty.", requested=requested,
            suggestion="Use one of: " + ", ".join(d.value for d in Difficulty) + "."))
    return kind, difficulty


def generate_exercise(kind: str, difficulty: str = "easy", seed: Optional[int] = None) -> Dict:
    """Generate a problem; the returned seed regenerates the same problem."""
    choice = _exercise_choice(kind, difficulty)
    if isinstance(choice, dict):
        return choice
    if seed is None:
        seed = random.randint(0, MAX_SEED)
    problem = _generate_exercise(*choice, rng=random.Random(seed))
    result = problem.to_dict()
    result["seed"] = seed
    return result


def check_exercise(kind: str, difficulty: str, seed: int, answers: Mapping[str, str]) -> Dict:
    """Regenerate the seeded problem and compare ``answers`` field by field."""
    choice = _exercise_choice(kind, difficulty)
    if isinstance(choice, dict):
        return choice
    problem = _generate_exercise(*choice, rng=random.Random(seed))
    check = check_answers(problem, answers).to_dict()
    check["solution"] = problem.solution.fields()
    return check
