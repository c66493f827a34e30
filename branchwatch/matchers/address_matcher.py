from rapidfuzz import fuzz, utils
from typing import Callable, List, Optional, Sequence, Tuple
from loguru import logger

from branchwatch.config import STRICT_THRESHOLD, WEAK_THRESHOLD
from branchwatch.models import AddressCandidate, MatchResult, NormalizedAddress

Scorer = Callable[[str, str], float]


def address_similarity(left: str, right: str) -> float:
    """
    Similarity of two normalized addresses in [0, 1].

    Token order is ignored because the two feeds place the street type on
    opposite sides of the name ("улица тестовая" vs "тестовая улица").
    """
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return fuzz.token_sort_ratio(left, right, processor=utils.default_process) / 100.0


def structural_match(left: NormalizedAddress, right: NormalizedAddress) -> bool:
    """Street names contain one another and house numbers agree exactly."""
    street_ok = bool(left.street and right.street) and (
        left.street in right.street or right.street in left.street
    )
    house_ok = bool(left.house and right.house) and left.house == right.house
    return street_ok and house_ok


def _best_candidate(
    canonical: NormalizedAddress,
    candidates: Sequence[AddressCandidate],
    scorer: Scorer,
) -> Optional[Tuple[AddressCandidate, float]]:
    best: Optional[AddressCandidate] = None
    best_score = -1.0
    for candidate in candidates:
        score = scorer(canonical.normalized, candidate.address.normalized)
        # Equal scores resolve to the smallest record id, whatever the input order
        if score > best_score or (
            score == best_score and best is not None and candidate.record_id < best.record_id
        ):
            best = candidate
            best_score = score
    if best is None:
        return None
    return best, best_score


def match_address(
    canonical_id: str,
    canonical: NormalizedAddress,
    candidates: Sequence[AddressCandidate],
    scorer: Scorer = address_similarity,
    strict_threshold: float = STRICT_THRESHOLD,
    weak_threshold: float = WEAK_THRESHOLD,
) -> MatchResult:
    """
    Pair one canonical address with its best external candidate.

    Args:
        canonical_id (str): Id of the canonical record being matched.
        canonical (NormalizedAddress): Its normalized address.
        candidates (Sequence[AddressCandidate]): Normalized external addresses.
        scorer (Scorer): Similarity function returning a value in [0, 1].
        strict_threshold (float): Score accepted on similarity alone.
        weak_threshold (float): Lowest score accepted with a structural agreement.

    Returns:
        MatchResult: "strict", "weak-structural" or "none"; at most one match.
    """
    if not isinstance(candidates, (list, tuple)):
        raise TypeError(f"candidates must be a list or tuple, got {type(candidates).__name__}")
    if weak_threshold > strict_threshold:
        raise ValueError("weak_threshold must not exceed strict_threshold")

    found = _best_candidate(canonical, candidates, scorer)
    if found is None:
        return MatchResult(canonical_id=canonical_id)

    best, score = found
    if score >= strict_threshold:
        method = "strict"
    elif score >= weak_threshold and structural_match(canonical, best.address):
        method = "weak-structural"
    else:
        logger.debug(f"✗ {canonical_id}: best '{best.address.normalized}' scored {score:.3f}, rejected")
        return MatchResult(canonical_id=canonical_id, score=score)

    logger.debug(f"✓ {canonical_id} → {best.record_id} [{method}, {score:.3f}]")
    return MatchResult(canonical_id=canonical_id, matched_id=best.record_id, score=score, method=method)


def match_all(
    canonical: Sequence[AddressCandidate],
    candidates: Sequence[AddressCandidate],
    **kwargs,
) -> List[MatchResult]:
    """Match every canonical address against the same candidate list."""
    return [match_address(c.record_id, c.address, candidates, **kwargs) for c in canonical]
