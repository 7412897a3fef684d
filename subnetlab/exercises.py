"""
Random subnetting exercise generator for SubnetLab.

Each exercise kind has a sampler that draws parameters inside the bounds of
a difficulty level and a validator that rejects degenerate instances. Rejected
samples are redrawn a bounded number of times; when a difficulty keeps
failing the generator falls back to the easy level, whose samplers are valid
by construction.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from . import config
from .classful import ClassfulRequirement, RequirementKind, min_subnet_bits
from .core import (
    ADDRESS_BITS,
    CalculationError,
    Network,
    class_of,
    default_prefix,
    parse_address,
    prefix_to_mask,
)
from .feedback import trace_for
from .problems import (
    CalculateMaskParams,
    CalculateMaskSolution,
    ClassfulParams,
    ClassfulSolution,
    Difficulty,
    ExerciseKind,
    ExerciseProblem,
    IdentifyNetworkParams,
    IdentifyNetworkSolution,
    NextNetworkParams,
    NextNetworkSolution,
    SummarizationParams,
    SummarizationSolution,
    VlsmParams,
    VlsmSolution,
    solve,
)
from .vlsm import VlsmRequirement, calculate_vlsm

logger = logging.getLogger(__name__)

RandomSource = Union[random.Random, int, None]


class GenerationError(RuntimeError):
    """Even the easy fallback could not produce a valid problem."""


@dataclass(frozen=True)
class ExhaustedAttempts:
    kind: ExerciseKind
    difficulty: Difficulty
    attempts: int
    last_reason: str


def _address(a: int, b: int, c: int, d: int) -> int:
    return (a << 24) | (b << 16) | (c << 8) | d


def _random_requirement_kind(rng: random.Random) -> RequirementKind:
    return RequirementKind.HOSTS if rng.random() > 0.5 else RequirementKind.SUBNETS


# Samplers


def _sample_identify_network(rng: random.Random, difficulty: Difficulty,
                             legacy: bool) -> IdentifyNetworkParams:
    if difficulty is Difficulty.HARD:
        prefix = rng.randint(9, 15)
        base = _address(10, rng.randint(0, 255), rng.randint(0, 255), 0)
    elif difficulty is Difficulty.MEDIUM:
        prefix = rng.randint(17, 23)
        base = _address(172, rng.randint(16, 31), rng.randint(0, 255), 0)
    else:
        prefix = rng.randint(25, 30)
        base = _address(192, 168, rng.randint(0, 255), 0)

    network = base & prefix_to_mask(prefix)
    # Any host except the network and broadcast addresses
    offset = rng.randint(1, 2 ** (ADDRESS_BITS - prefix) - 2)
    mask_format = "cidr" if rng.random() > 0.5 else "ddn"
    return IdentifyNetworkParams(network + offset, prefix, mask_format)


def _sample_classful(rng: random.Random, difficulty: Difficulty,
                     legacy: bool) -> ClassfulParams:
    kind = _random_requirement_kind(rng)
    if difficulty is Difficulty.HARD:
        base = _address(10, 0, 0, 0)
        value = rng.randint(500, 1000)
        target = rng.randint(1, 20)
    elif difficulty is Difficulty.MEDIUM:
        base = _address(172, rng.randint(16, 31), 0, 0)
        value = rng.randint(100, 500)
        target = rng.randint(1, 10)
    else:
        base = _address(192, 168, rng.randint(0, 255), 0)
        value = rng.randint(3, 6)
        target = rng.randint(1, value)
    return ClassfulParams(base, ClassfulRequirement(kind, value), target, legacy)


def _sample_calculate_mask(rng: random.Random, difficulty: Difficulty,
                           legacy: bool) -> CalculateMaskParams:
    if difficulty is Difficulty.HARD:
        base = _address(rng.randint(1, 126), 0, 0, 0)
    elif difficulty is Difficulty.MEDIUM:
        base = _address(rng.randint(128, 191), rng.randint(0, 255), 0, 0)
    else:
        base = _address(rng.randint(192, 223), rng.randint(0, 255), rng.randint(0, 255), 0)

    max_bits = ADDRESS_BITS - default_prefix(class_of(base)) - 2
    kind = _random_requirement_kind(rng)
    if kind is RequirementKind.HOSTS:
        value = rng.randint(10, max(12, 2 ** max_bits // 4))
    else:
        value = rng.randint(4, max(5, 2 ** max_bits // 2))
    return CalculateMaskParams(base, ClassfulRequirement(kind, value), legacy)


def _sample_summarization(rng: random.Random, difficulty: Difficulty,
                          legacy: bool) -> SummarizationParams:
    to_remove = 0
    if difficulty is Difficulty.HARD:
        base_prefix = rng.randint(17, 23)
        count = 2 ** rng.randint(2, 3)
        if rng.random() < 0.40:
            # 4 networks lose 2 (50%); 8 lose 2 to 5 (75% down to 37.5%)
            to_remove = 2 if count == 4 else rng.randint(2, 5)
        increment = 2 ** (24 - base_prefix)
        span = increment * count
        start = rng.randint(0, max(0, 256 - span)) & ~(span - 1)
        first = _address(172, rng.randint(16, 31), 0, 0) + (start << 8)
    elif difficulty is Difficulty.MEDIUM:
        base_prefix = rng.randint(25, 28)
        count = 2 ** rng.randint(1, 2)
        if rng.random() < 0.25 and count == 4:
            to_remove = rng.randint(1, 2)
        increment = 2 ** (32 - base_prefix)
        span = increment * count
        start = rng.randint(0, max(0, 256 - span)) & ~(span - 1)
        first = _address(192, 168, rng.randint(0, 255), 0) + start
    else:
        base_prefix = 24
        count = 2 ** rng.randint(1, 2)
        start = rng.randint(0, 256 - count) & ~(count - 1)
        first = _address(192, 168, start, 0)

    size = 2 ** (ADDRESS_BITS - base_prefix)
    block = [Network(first + i * size, base_prefix) for i in range(count)]

    # Holes only come from the middle so the first and last networks survive
    removed_indexes = set()
    if to_remove:
        interior = range(1, count - 1)
        removed_indexes = set(rng.sample(interior, min(to_remove, len(interior))))

    kept = tuple(n for i, n in enumerate(block) if i not in removed_indexes)
    removed = tuple(n for i, n in enumerate(block) if i in removed_indexes)
    return SummarizationParams(kept, removed)


def _sample_next_network(rng: random.Random, difficulty: Difficulty,
                         legacy: bool) -> NextNetworkParams:
    if difficulty is Difficulty.HARD:
        prefix = rng.randint(9, 15)
        base = _address(10, 0, 0, 0)
        multiple = rng.randint(1, 10)
    elif difficulty is Difficulty.MEDIUM:
        prefix = rng.randint(17, 23)
        base = _address(172, 16, 0, 0)
        multiple = rng.randint(1, 10)
    else:
        prefix = rng.randint(25, 30)
        base = _address(192, 168, 1, 0)
        blocks = 256 // 2 ** (ADDRESS_BITS - prefix)
        # Skip the .0 block and stay clear of the last one
        multiple = rng.randint(1, max(1, blocks - 2))

    size = 2 ** (ADDRESS_BITS - prefix)
    return NextNetworkParams(Network((base & prefix_to_mask(prefix)) + multiple * size, prefix))


_VLSM_SCENARIOS = {
    Difficulty.HARD: (("Corporate", 1000, 2000), ("Sales", 500, 1000), ("IT", 200, 400),
                      ("Marketing", 50, 100), ("WAN link 1", 2, 2), ("WAN link 2", 2, 2)),
    Difficulty.MEDIUM: (("Network A", 200, 400), ("Network B", 50, 100),
                        ("Network C", 10, 20)),
    Difficulty.EASY: (("Administration", 40, 60), ("Support", 10, 25)),
}


def _sample_vlsm(rng: random.Random, difficulty: Difficulty, legacy: bool) -> VlsmParams:
    if difficulty is Difficulty.HARD:
        base = Network(_address(10, rng.randint(0, 255), 0, 0), 16)
    elif difficulty is Difficulty.MEDIUM:
        base = Network(_address(172, rng.randint(16, 31), 4 * rng.randint(0, 63), 0), 22)
    else:
        base = Network(_address(192, 168, rng.randint(0, 255), 0), 24)

    requirements = tuple(
        VlsmRequirement(name, rng.randint(low, high))
        for name, low, high in _VLSM_SCENARIOS[difficulty]
    )
    return VlsmParams(base, requirements)


SAMPLERS: Dict[ExerciseKind, Callable] = {
    ExerciseKind.IDENTIFY_NETWORK: _sample_identify_network,
    ExerciseKind.CLASSFUL_LEGACY: _sample_classful,
    ExerciseKind.CALCULATE_MASK: _sample_calculate_mask,
    ExerciseKind.SUMMARIZATION: _sample_summarization,
    ExerciseKind.NEXT_NETWORK: _sample_next_network,
    ExerciseKind.VLSM_SCENARIO: _sample_vlsm,
}


# Validators return None when the instance is acceptable, else the reason


def _validate_identify_network(params: IdentifyNetworkParams,
                               solution: IdentifyNetworkSolution) -> Optional[str]:
    if params.prefix > 30:
        return f"/{params.prefix} has no host range"
    network = Network.containing(params.address, params.prefix)
    if params.address in (network.address, network.broadcast):
        return "address is the network or broadcast address"
    if parse_address(solution.network) != network.address:
        return "solution network does not contain the address"
    return None


def _subnet_bits_in_range(base: int, new_cidr: str, legacy: bool) -> Optional[str]:
    base_prefix = default_prefix(class_of(base))
    bits = int(new_cidr.lstrip('/')) - base_prefix
    if not min_subnet_bits(legacy) <= bits <= ADDRESS_BITS - base_prefix - 2:
        return f"{bits} subnet bits is outside the class budget"
    return None


def _validate_classful(params: ClassfulParams, solution: ClassfulSolution) -> Optional[str]:
    reason = _subnet_bits_in_range(params.base_network, solution.cidr,
                                   params.legacy_reserved_subnets)
    if reason:
        return reason
    if not 1 <= params.target_ordinal <= solution.usable_subnets:
        return "target subnet is not usable"
    return None


def _validate_calculate_mask(params: CalculateMaskParams,
                             solution: CalculateMaskSolution) -> Optional[str]:
    reason = _subnet_bits_in_range(params.base_network, solution.new_mask_cidr,
                                   params.legacy_reserved_subnets)
    if reason:
        return reason
    if int(solution.new_mask_cidr.lstrip('/')) > 30:
        return "new mask leaves fewer than 2 usable hosts"
    return None


def _validate_summarization(params: SummarizationParams,
                            solution: SummarizationSolution) -> Optional[str]:
    summary = Network(parse_address(solution.summary_route),
                      int(solution.summary_mask.lstrip('/')))
    base_prefix = params.base_prefix
    if summary.prefix == 0:
        return "summary collapsed to /0"
    if summary.prefix >= base_prefix:
        return "summary does not aggregate anything"
    # Members may only differ inside the octet that holds the base prefix
    if summary.prefix < (base_prefix - 1) // 8 * 8:
        return f"summary /{summary.prefix} spills out of the member octet"
    if not all(summary.contains(n.address) and summary.contains(n.broadcast)
               for n in params.networks):
        return "summary does not cover every member"
    block_networks = len(params.networks) + len(params.removed)
    if summary.block_size != block_networks * 2 ** (ADDRESS_BITS - base_prefix):
        return "summary is larger than the aligned member block"
    return None


def _validate_next_network(params: NextNetworkParams,
                           solution: NextNetworkSolution) -> Optional[str]:
    following = parse_address(solution.next_network)
    if following != params.network.broadcast + 1:
        return "next network does not follow the given block"
    if params.network.address == 0:
        return "first block of the address space"
    return None


def _validate_vlsm(params: VlsmParams, solution: VlsmSolution) -> Optional[str]:
    result = calculate_vlsm(params.base, params.requirements)
    if isinstance(result, CalculationError):
        return result.message
    if result.errors:
        return f"{len(result.errors)} requirement(s) could not be placed"
    networks = [entry.network for entry in result.assigned]
    for i, network in enumerate(networks):
        if network.address % network.block_size:
            return f"{network.cidr} is not aligned"
        if not params.base.contains(network.broadcast):
            return f"{network.cidr} leaves the base network"
        if any(network.overlaps(other) for other in networks[i + 1:]):
            return f"{network.cidr} overlaps another block"
    if len(solution.assignments) != len(params.requirements):
        return "not every requirement has an answer"
    return None


VALIDATORS: Dict[ExerciseKind, Callable] = {
    ExerciseKind.IDENTIFY_NETWORK: _validate_identify_network,
    ExerciseKind.CLASSFUL_LEGACY: _validate_classful,
    ExerciseKind.CALCULATE_MASK: _validate_calculate_mask,
    ExerciseKind.SUMMARIZATION: _validate_summarization,
    ExerciseKind.NEXT_NETWORK: _validate_next_network,
    ExerciseKind.VLSM_SCENARIO: _validate_vlsm,
}


def validate(problem: ExerciseProblem) -> Optional[str]:
    """Re-run the kind-specific checks on a finished problem."""
    return VALIDATORS[problem.kind](problem.parameters, problem.solution)


def make_random(rng: RandomSource = None) -> random.Random:
    """Accept a Random instance, a seed, or None for a fresh source."""
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def try_generate(kind: ExerciseKind, difficulty: Difficulty, rng: random.Random,
                 max_attempts: int, legacy_reserved_subnets: bool
                 ) -> Union[ExerciseProblem, ExhaustedAttempts]:
    """Sample, solve and validate up to ``max_attempts`` times."""
    sampler = SAMPLERS[kind]
    validator = VALIDATORS[kind]
    last_reason = ""

    for attempt in range(1, max_attempts + 1):
        params = sampler(rng, difficulty, legacy_reserved_subnets)
        solution = solve(kind, params)
        if isinstance(solution, CalculationError):
            reason = solution.message
        else:
            reason = validator(params, solution)

        if reason is None:
            return ExerciseProblem(kind, difficulty, params, solution, trace_for(kind, params))

        logger.debug(f"Rejected {kind.value}/{difficulty.value} attempt {attempt}: {reason}")
        last_reason = reason

    return ExhaustedAttempts(kind, difficulty, max_attempts, last_reason)


def generate_exercise(kind: Union[ExerciseKind, str],
                      difficulty: Union[Difficulty, str] = Difficulty.EASY,
                      rng: RandomSource = None,
                      max_attempts: Optional[int] = None,
                      legacy_reserved_subnets: Optional[bool] = None) -> ExerciseProblem:
    """
    Generate a validated exercise of the given kind.

    Args:
        kind: One of the ExerciseKind values (e.g. "vlsm-scenario")
        difficulty: "easy", "medium" or "hard"
        rng: random.Random instance or integer seed for reproducible problems
        max_attempts: Retry ceiling per difficulty level
        legacy_reserved_subnets: Whether subnet zero and all-ones are unusable

    Returns:
        ExerciseProblem: parameters, canonical solution and feedback trace.
        After ``max_attempts`` rejections the easy level is used instead.
    """
    kind = ExerciseKind(kind)
    difficulty = Difficulty(difficulty)
    rng = make_random(rng)
    if max_attempts is None:
        max_attempts = config.MAX_GENERATION_ATTEMPTS
    if legacy_reserved_subnets is None:
        legacy_reserved_subnets = config.LEGACY_RESERVED_SUBNETS

    result = try_generate(kind, difficulty, rng, max_attempts, legacy_reserved_subnets)
    if isinstance(result, ExerciseProblem):
        return result

    logger.warning(
        f"No valid {kind.value} problem at {difficulty.value} after {result.attempts} "
        f"attempts ({result.last_reason}); falling back to easy"
    )
    result = try_generate(kind, Difficulty.EASY, rng, max_attempts, legacy_reserved_subnets)
    if isinstance(result, ExerciseProblem):
        return result
    raise GenerationError(f"Could not generate a {kind.value} problem: {result.last_reason}")
