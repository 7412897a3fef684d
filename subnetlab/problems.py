"""
Exercise problem types, canonical solvers and answer checking for SubnetLab.

Every exercise kind has its own parameter and solution dataclass. The
canonical solution of a problem is always ``solve(kind, parameters)``, so it
can be reproduced from the parameters alone.
"""

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Tuple, Union

from .classful import ClassfulRequirement, calculate_classful
from .core import (
    CalculationError,
    InvalidFormat,
    Network,
    SubnetError,
    class_of,
    default_prefix,
    format_address,
    next_network,
    parse_mask,
)
from .summary import find_summary
from .vlsm import VlsmRequirement, calculate_vlsm


class ExerciseKind(str, Enum):
    IDENTIFY_NETWORK = "identify-network"
    CLASSFUL_LEGACY = "classful-legacy"
    CALCULATE_MASK = "calculate-mask"
    SUMMARIZATION = "summarization"
    NEXT_NETWORK = "next-network"
    VLSM_SCENARIO = "vlsm-scenario"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Parameters


@dataclass(frozen=True)
class IdentifyNetworkParams:
    address: int
    prefix: int
    mask_format: str = "cidr"

    def to_dict(self) -> Dict:
        mask = f"/{self.prefix}" if self.mask_format == "cidr" else \
            format_address(Network(0, self.prefix).mask)
        return {"ip": format_address(self.address), "mask": mask, "mask_format": self.mask_format}


@dataclass(frozen=True)
class ClassfulParams:
    base_network: int
    requirement: ClassfulRequirement
    target_ordinal: int
    legacy_reserved_subnets: bool = True

    def to_dict(self) -> Dict:
        return {
            "base_network": format_address(self.base_network),
            "requirement_kind": self.requirement.kind.value,
            "requirement_value": self.requirement.value,
            "target_subnet": self.target_ordinal,
            "legacy_reserved_subnets": self.legacy_reserved_subnets,
        }


@dataclass(frozen=True)
class CalculateMaskParams:
    base_network: int
    requirement: ClassfulRequirement
    legacy_reserved_subnets: bool = True

    def to_dict(self) -> Dict:
        return {
            "base_network": format_address(self.base_network),
            "requirement_kind": self.requirement.kind.value,
            "requirement_value": self.requirement.value,
            "legacy_reserved_subnets": self.legacy_reserved_subnets,
        }


@dataclass(frozen=True)
class SummarizationParams:
    networks: Tuple[Network, ...]
    removed: Tuple[Network, ...] = ()

    @property
    def base_prefix(self) -> int:
        return self.networks[0].prefix

    @property
    def used_addresses(self) -> int:
        return sum(n.block_size for n in self.networks)

    def to_dict(self) -> Dict:
        return {
            "networks": [n.cidr for n in self.networks],
            "base_prefix": self.base_prefix,
        }


@dataclass(frozen=True)
class NextNetworkParams:
    network: Network

    def to_dict(self) -> Dict:
        return {"network": self.network.cidr}


@dataclass(frozen=True)
class VlsmParams:
    base: Network
    requirements: Tuple[VlsmRequirement, ...]

    def to_dict(self) -> Dict:
        return {
            "base_network": self.base.cidr,
            "requirements": [{"name": r.name, "hosts": r.hosts_needed} for r in self.requirements],
        }


ExerciseParams = Union[IdentifyNetworkParams, ClassfulParams, CalculateMaskParams,
                       SummarizationParams, NextNetworkParams, VlsmParams]


# Solutions


class _SolutionFields:
    """Answer fields as the strings a student would type."""

    def fields(self) -> Dict[str, str]:
        return {k: str(v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class IdentifyNetworkSolution(_SolutionFields):
    network: str
    mask_ddn: str
    mask_cidr: str
    wildcard: str
    broadcast: str
    first_host: str
    last_host: str


@dataclass(frozen=True)
class ClassfulSolution(_SolutionFields):
    cidr: str
    total_subnets: int
    usable_subnets: int
    usable_hosts: int
    target_network: str
    target_range: str


@dataclass(frozen=True)
class CalculateMaskSolution(_SolutionFields):
    address_class: str
    default_mask: str
    new_mask_cidr: str
    new_mask_ddn: str
    total_subnets: int
    usable_hosts: int


@dataclass(frozen=True)
class SummarizationSolution(_SolutionFields):
    summary_route: str
    summary_mask: str


@dataclass(frozen=True)
class NextNetworkSolution(_SolutionFields):
    next_network: str


@dataclass(frozen=True)
class VlsmAssignment:
    name: str
    network: str
    cidr: str


@dataclass(frozen=True)
class VlsmSolution:
    assignments: Tuple[VlsmAssignment, ...]

    def fields(self) -> Dict[str, str]:
        result = {}
        for number, assignment in enumerate(self.assignments, start=1):
            result[f"net{number}_net"] = assignment.network
            result[f"net{number}_cidr"] = assignment.cidr
        return result


ExerciseSolution = Union[IdentifyNetworkSolution, ClassfulSolution, CalculateMaskSolution,
                         SummarizationSolution, NextNetworkSolution, VlsmSolution]


# Solvers


def _solve_identify_network(params: IdentifyNetworkParams) -> IdentifyNetworkSolution:
    network = Network.containing(params.address, params.prefix)
    first, last = network.first_usable, network.last_usable
    if first is None:
        raise InvalidFormat(f"/{params.prefix} has no usable host range.")
    return IdentifyNetworkSolution(
        network=format_address(network.address),
        mask_ddn=format_address(network.mask),
        mask_cidr=f"/{network.prefix}",
        wildcard=format_address(network.wildcard),
        broadcast=format_address(network.broadcast),
        first_host=format_address(first),
        last_host=format_address(last),
    )


def _solve_classful(params: ClassfulParams) -> Union[ClassfulSolution, CalculationError]:
    result = calculate_classful(params.base_network, params.requirement,
                                params.legacy_reserved_subnets)
    if isinstance(result, CalculationError):
        return result
    if not 1 <= params.target_ordinal <= result.usable_subnets:
        raise InvalidFormat(f"Subnet {params.target_ordinal} is not a usable subnet.")
    target = result.usable_subnet(params.target_ordinal).network
    return ClassfulSolution(
        cidr=f"/{result.new_prefix}",
        total_subnets=result.total_subnets,
        usable_subnets=result.usable_subnets,
        usable_hosts=result.usable_hosts_per_subnet,
        target_network=format_address(target.address),
        target_range=target.host_range,
    )


def _solve_calculate_mask(params: CalculateMaskParams
                          ) -> Union[CalculateMaskSolution, CalculationError]:
    result = calculate_classful(params.base_network, params.requirement,
                                params.legacy_reserved_subnets)
    if isinstance(result, CalculationError):
        return result
    address_class = class_of(params.base_network)
    return CalculateMaskSolution(
        address_class=address_class.value,
        default_mask=f"/{default_prefix(address_class)}",
        new_mask_cidr=f"/{result.new_prefix}",
        new_mask_ddn=format_address(Network(0, result.new_prefix).mask),
        total_subnets=result.total_subnets,
        usable_hosts=result.usable_hosts_per_subnet,
    )


def _solve_summarization(params: SummarizationParams) -> SummarizationSolution:
    summary = find_summary(n.address for n in params.networks)
    return SummarizationSolution(
        summary_route=format_address(summary.address),
        summary_mask=f"/{summary.prefix}",
    )


def _solve_next_network(params: NextNetworkParams) -> NextNetworkSolution:
    return NextNetworkSolution(next_network=format_address(next_network(params.network).address))


def _solve_vlsm(params: VlsmParams) -> Union[VlsmSolution, CalculationError]:
    result = calculate_vlsm(params.base, params.requirements)
    if isinstance(result, CalculationError):
        return result
    return VlsmSolution(tuple(
        VlsmAssignment(entry.requirement.name, format_address(entry.network.address),
                       f"/{entry.network.prefix}")
        for entry in result.assigned
    ))


SOLVERS: Dict[ExerciseKind, Callable] = {
    ExerciseKind.IDENTIFY_NETWORK: _solve_identify_network,
    ExerciseKind.CLASSFUL_LEGACY: _solve_classful,
    ExerciseKind.CALCULATE_MASK: _solve_calculate_mask,
    ExerciseKind.SUMMARIZATION: _solve_summarization,
    ExerciseKind.NEXT_NETWORK: _solve_next_network,
    ExerciseKind.VLSM_SCENARIO: _solve_vlsm,
}

PARAMS_TYPES = {
    ExerciseKind.IDENTIFY_NETWORK: IdentifyNetworkParams,
    ExerciseKind.CLASSFUL_LEGACY: ClassfulParams,
    ExerciseKind.CALCULATE_MASK: CalculateMaskParams,
    ExerciseKind.SUMMARIZATION: SummarizationParams,
    ExerciseKind.NEXT_NETWORK: NextNetworkParams,
    ExerciseKind.VLSM_SCENARIO: VlsmParams,
}


def solve(kind: ExerciseKind, params: ExerciseParams
          ) -> Union[ExerciseSolution, CalculationError]:
    """Compute the canonical solution for a problem's parameters."""
    kind = ExerciseKind(kind)
    if not isinstance(params, PARAMS_TYPES[kind]):
        raise TypeError(f"{kind.value} expects {PARAMS_TYPES[kind].__name__}, "
                        f"got {type(params).__name__}")
    try:
        return SOLVERS[kind](params)
    except SubnetError as e:
        return CalculationError.from_exception(e)


@dataclass(frozen=True)
class ExerciseProblem:
    kind: ExerciseKind
    difficulty: Difficulty
    parameters: ExerciseParams
    solution: ExerciseSolution
    trace: Dict

    def __post_init__(self):
        if not isinstance(self.parameters, PARAMS_TYPES[self.kind]):
            raise TypeError(f"{self.kind.value} problem built with "
                            f"{type(self.parameters).__name__}")

    def to_dict(self) -> Dict:
        return {
            "kind": self.kind.value,
            "difficulty": self.difficulty.value,
            "problem": self.parameters.to_dict(),
            "solution": self.solution.fields(),
            "feedback": self.trace,
        }


# Answer checking


@dataclass(frozen=True)
class AnswerCheck:
    fields: Dict[str, bool]

    @property
    def correct(self) -> bool:
        return all(self.fields.values())

    def to_dict(self) -> Dict:
        return {"correct": self.correct, "fields": dict(self.fields)}


_MASK_FIELDS = {"mask_ddn", "mask_cidr", "cidr", "default_mask", "new_mask_cidr",
                "new_mask_ddn", "summary_mask"}


def _normalize(value) -> str:
    return re.sub(r'\s', '', str(value)).lower()


def _is_mask_field(name: str) -> bool:
    return name in _MASK_FIELDS or name.endswith("_cidr")


def _same_mask(answer: str, expected: str) -> bool:
    try:
        return parse_mask(answer) == parse_mask(expected)
    except SubnetError:
        return False


def check_answers(problem: ExerciseProblem, answers: Mapping[str, str]) -> AnswerCheck:
    """Compare answers field by field with the canonical solution."""
    results = {}
    for name, expected in problem.solution.fields().items():
        answer = answers.get(name)
        if answer is None:
            results[name] = False
        elif _normalize(answer) == _normalize(expected):
            results[name] = True
        else:
            results[name] = _is_mask_field(name) and _same_mask(str(answer), expected)
    return AnswerCheck(results)

