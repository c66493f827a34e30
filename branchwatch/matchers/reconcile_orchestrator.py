# branchwatch/matchers/reconcile_orchestrator.py

from typing import Dict, List, Optional, Sequence
from loguru import logger

from branchwatch.config import SCHEDULE_MATCH_MODE, SCHEDULE_TOLERANCE_MINUTES
from branchwatch.models import (
    AddressCandidate,
    BranchRecord,
    CompanyRecord,
    Discrepancy,
    MatchResult,
    ReconcileResult,
)
from branchwatch.normalizers.address_normalizer import normalize_address
from branchwatch.normalizers.schedule_normalizer import normalize_xml_working_time
from branchwatch.matchers.address_matcher import match_address
from branchwatch.matchers.schedule_comparator import compare_schedules
from branchwatch.changes.snapshot_differ import is_published

IdMapping = Dict[str, str]  # company_id -> external branch id

NOT_FOUND_EXPECTED = "Найден на Яндекс.Картах"
NOT_FOUND_ACTUAL = "Не найден"
NO_HOURS_ACTUAL = "(не указано)"
# Canonical feed placeholders meaning "no working time given"
EMPTY_WORKING_TIME = ("", "—", "-")
PUBLISHED_EXPECTED = "Опубликовано"
NO_NAME = "(без названия)"
NO_ADDRESS = "(без адреса)"


def build_candidates(branches: Sequence[BranchRecord]) -> List[AddressCandidate]:
    """Normalize every external branch that has both an id and an address."""
    return [
        AddressCandidate(record_id=b.id, address=normalize_address(b.address))
        for b in branches
        if b.id and b.address
    ]


def status_discrepancies(branches: Sequence[BranchRecord]) -> List[Discrepancy]:
    """
    Report every branch whose listing status is set but not published.

    Used instead of `reconcile` when the canonical feed is empty and there is
    nothing to match against.
    """
    discrepancies = [
        Discrepancy(
            company_id=b.id or "unknown",
            name=b.name or NO_NAME,
            address=b.address or NO_ADDRESS,
            expected=PUBLISHED_EXPECTED,
            actual=b.status,
            url=b.url,
        )
        for b in branches
        if not is_published(b)
    ]
    logger.debug(f"Status check: {len(discrepancies)}/{len(branches)} branches not published")
    return discrepancies


def _resolve_match(
    company: CompanyRecord,
    candidates: List[AddressCandidate],
    branches_by_id: Dict[str, BranchRecord],
    mapping: IdMapping,
    **match_kwargs,
) -> MatchResult:
    cached_id = mapping.get(company.company_id)
    if cached_id and cached_id in branches_by_id:
        return MatchResult(canonical_id=company.company_id, matched_id=cached_id, score=1.0, method="cached")
    return match_address(company.company_id, normalize_address(company.address), candidates, **match_kwargs)


def reconcile(
    companies: Sequence[CompanyRecord],
    branches: Sequence[BranchRecord],
    mapping: Optional[IdMapping] = None,
    schedule_mode: str = SCHEDULE_MATCH_MODE,
    tolerance_minutes: int = SCHEDULE_TOLERANCE_MINUTES,
    **match_kwargs,
) -> ReconcileResult:
    """
    Pair canonical records with external branches and check their opening hours.

    A cached pairing from `mapping` is reused while its branch still exists;
    otherwise the address matcher decides. Each matched pair's schedules are
    compared; a canonical schedule that cannot be parsed marks the record as
    unverified instead of producing a discrepancy.

    Args:
        companies (Sequence[CompanyRecord]): Canonical feed records.
        branches (Sequence[BranchRecord]): Externally-scraped branches.
        mapping (Optional[IdMapping]): Known company_id -> branch id pairings.
            Not modified; entries whose branch is gone are dropped from the result.
        schedule_mode (str): "exact" or "tolerant", see `compare_schedules`.
        tolerance_minutes (int): Used only in "tolerant" mode.
        **match_kwargs: Forwarded to `match_address` (scorer, thresholds).

    Returns:
        ReconcileResult: Match results, discrepancies, unverified records and
                         the updated mapping.
    """
    branches_by_id = {b.id: b for b in branches if b.id}
    mapping = {k: v for k, v in (mapping or {}).items() if v in branches_by_id}
    candidates = build_candidates(branches)
    result = ReconcileResult()

    for company in companies:
        match = _resolve_match(company, candidates, branches_by_id, mapping, **match_kwargs)
        result.matches.append(match)

        if not match.is_match:
            mapping.pop(company.company_id, None)
            result.discrepancies.append(
                Discrepancy(
                    company_id=company.company_id,
                    name=company.name,
                    address=company.address,
                    expected=NOT_FOUND_EXPECTED,
                    actual=NOT_FOUND_ACTUAL,
                )
            )
            continue

        mapping[company.company_id] = match.matched_id
        branch = branches_by_id[match.matched_id]

        if (company.working_time or "").strip() in EMPTY_WORKING_TIME:
            result.unverified.append(company)
            continue

        schedule = normalize_xml_working_time(company.working_time)
        if not schedule.is_recognized:
            logger.debug(f"⚠️ {company.company_id}: working time not recognized: {company.working_time!r}")
            result.unverified.append(company)
            continue

        verdict = compare_schedules(schedule, branch.hours_text, schedule_mode, tolerance_minutes)
        if not verdict.ok:
            result.discrepancies.append(
                Discrepancy(
                    company_id=company.company_id,
                    name=company.name,
                    address=company.address,
                    expected=verdict.expected_text,
                    actual=branch.hours_text or NO_HOURS_ACTUAL,
                    url=branch.url,
                )
            )

    result.mapping = mapping
    logger.debug(
        f"Reconciled {len(companies)} records: "
        f"{sum(m.is_match for m in result.matches)} matched, "
        f"{len(result.discrepancies)} discrepancies, {len(result.unverified)} unverified"
    )
    return result
