"""
Round-by-round KCET seat allotment simulation.

For each counseling round the candidate's preferences are scanned in priority
order and the first one whose cutoff rank is worse than the candidate's rank
is allotted. Everything here is a pure function of its arguments.
"""

import logging
import re
from typing import List, Optional, Sequence

from .config import DEFAULT_ROUNDS, MODERATE_MARGIN_PERCENT, SAFE_MARGIN_PERCENT
from .course_normalizer import clean_course_text, get_canonical_course_key, normalize_course
from .models import (
    BestOutcome,
    CutoffEntry,
    EligibilityDetail,
    InputDetails,
    PreferenceOption,
    RoundResult,
    SafetyLevel,
    SimulationInput,
    SimulationResult,
    SimulationSummary,
)

logger = logging.getLogger(__name__)

NO_CUTOFF_REASON = "No cutoff data available for this college-branch combination"

_COURSE_CODE_PREFIX = re.compile(r"^([A-Z]{2})[\s-]")
_COURSE_CODE_ONLY = re.compile(r"^[A-Z]{2}$")
_NON_DIGITS = re.compile(r"\D")


def extract_course_code(course: Optional[str]) -> Optional[str]:
    """Two-letter course code from "CS Computer Science..." or a bare "CS"."""
    if not course:
        return None
    cleaned = clean_course_text(course)
    code_match = _COURSE_CODE_PREFIX.match(cleaned)
    if code_match:
        return code_match.group(1)
    if _COURSE_CODE_ONLY.match(cleaned):
        return cleaned
    return None


def find_cutoff(
    cutoffs: Sequence[CutoffEntry],
    preference: PreferenceOption
) -> Optional[CutoffEntry]:
    """
    Find the cutoff entry for a college-branch preference

    Matching is attempted in order, returning on the first hit:
    college code, then course code, then canonical course key, then
    substring containment of the normalized names in either direction.

    Args:
        cutoffs (Sequence[CutoffEntry]): Candidate cutoff entries
        preference (PreferenceOption): College-branch choice to resolve

    Returns:
        Optional[CutoffEntry]: Matching entry, or None
    """
    college_code = (preference.college_code or "").upper()
    college_cutoffs = [c for c in cutoffs if (c.institute_code or "").upper() == college_code]

    if not college_cutoffs:
        return None

    pref_course_code = (
        extract_course_code(preference.branch_code)
        or extract_course_code(preference.branch_name)
    )
    if pref_course_code:
        for cutoff in college_cutoffs:
            if extract_course_code(cutoff.course) == pref_course_code:
                return cutoff

    pref_key = get_canonical_course_key(preference.branch_name)
    for cutoff in college_cutoffs:
        if get_canonical_course_key(cutoff.course) == pref_key:
            return cutoff

    pref_normalized = (normalize_course(preference.branch_name) or "").lower()
    for cutoff in college_cutoffs:
        cutoff_normalized = (normalize_course(cutoff.course) or "").lower()
        if pref_normalized in cutoff_normalized or cutoff_normalized in pref_normalized:
            return cutoff

    return None


def check_eligibility(
    user_rank: int,
    preference: PreferenceOption,
    preference_number: int,
    cutoffs: Sequence[CutoffEntry]
) -> EligibilityDetail:
    """
    Check eligibility for a single preference against one round's cutoffs

    The candidate is eligible only when the cutoff rank is strictly worse
    (numerically greater) than their rank.
    """
    cutoff = find_cutoff(cutoffs, preference)

    if cutoff is None:
        return EligibilityDetail(
            preference=preference,
            preference_number=preference_number,
            cutoff_rank=None,
            is_eligible=False,
            reason=NO_CUTOFF_REASON,
        )

    is_eligible = cutoff.cutoff_rank > user_rank
    if is_eligible:
        reason = (
            f"Eligible! Your rank ({user_rank:,}) is better than "
            f"cutoff ({cutoff.cutoff_rank:,})"
        )
    else:
        reason = (
            f"Not eligible. Cutoff rank ({cutoff.cutoff_rank:,}) is better than "
            f"your rank ({user_rank:,})"
        )

    return EligibilityDetail(
        preference=preference,
        preference_number=preference_number,
        cutoff_rank=cutoff.cutoff_rank,
        is_eligible=is_eligible,
        reason=reason,
    )


def order_preferences(preferences: Sequence[PreferenceOption]) -> List[PreferenceOption]:
    """Preferences in ascending priority; equal priorities keep list order."""
    return sorted(preferences, key=lambda p: p.priority)


def simulate_round(
    user_rank: int,
    preferences: Sequence[PreferenceOption],
    cutoffs: Sequence[CutoffEntry],
    round_label: str
) -> RoundResult:
    """
    Simulate allotment for a single round

    Every preference gets an EligibilityDetail, but only the first eligible
    one is allotted.

    Args:
        user_rank (int): Candidate's rank
        preferences (Sequence[PreferenceOption]): Candidate's choice list
        cutoffs (Sequence[CutoffEntry]): Cutoffs for this round and category
        round_label (str): Round being simulated

    Returns:
        RoundResult: Allotment and per-preference details
    """
    eligibility_details = []
    allotted = None

    for number, preference in enumerate(order_preferences(preferences), start=1):
        eligibility = check_eligibility(user_rank, preference, number, cutoffs)
        eligibility_details.append(eligibility)

        if eligibility.is_eligible and allotted is None:
            allotted = eligibility

    logger.debug(
        f"{round_label}: {len(eligibility_details)} preferences checked, "
        f"allotted #{allotted.preference_number if allotted else None}"
    )

    return RoundResult(
        round=round_label,
        allotted_college=allotted.preference if allotted else None,
        allotted_preference_number=allotted.preference_number if allotted else None,
        cutoff_rank=allotted.cutoff_rank if allotted else None,
        eligibility_details=eligibility_details,
    )


def _round_number(round_label: str) -> int:
    digits = _NON_DIGITS.sub("", round_label or "")
    return int(digits) if digits else 0


def get_available_rounds(cutoffs: Sequence[CutoffEntry], year: str) -> List[str]:
    """Distinct round labels for a year, sorted by the number in each label."""
    rounds = []
    for cutoff in cutoffs:
        if cutoff.year == year and cutoff.round not in rounds:
            rounds.append(cutoff.round)
    return sorted(rounds, key=_round_number)


def generate_summary(round_results: Sequence[RoundResult]) -> SimulationSummary:
    """
    Roll round results up into a summary

    The best outcome is the allotment with the lowest preference number; the
    earliest round wins ties.
    """
    rounds_with_allotment = [r for r in round_results if r.allotted_college is not None]

    if not rounds_with_allotment:
        return SimulationSummary()

    best_round = rounds_with_allotment[0]
    for current in rounds_with_allotment[1:]:
        if current.allotted_preference_number < best_round.allotted_preference_number:
            best_round = current

    first_id = rounds_with_allotment[0].allotted_college.id
    consistent = all(r.allotted_college.id == first_id for r in rounds_with_allotment)

    return SimulationSummary(
        best_outcome=BestOutcome(
            round=best_round.round,
            college=best_round.allotted_college,
            preference_number=best_round.allotted_preference_number,
        ),
        total_rounds_with_allotment=len(rounds_with_allotment),
        consistent_allotment=consistent,
        recommended_round=best_round.round,
    )


def simulate_allotment(
    simulation_input: SimulationInput,
    cutoffs: Sequence[CutoffEntry]
) -> SimulationResult:
    """
    Simulate KCET seat allotment across every round of a year

    Args:
        simulation_input (SimulationInput): Rank, category, year and preferences
        cutoffs (Sequence[CutoffEntry]): Full cutoff collection

    Returns:
        SimulationResult: Per-round results, summary and echoed input
    """
    user_rank = simulation_input.user_rank
    category = simulation_input.category
    year = simulation_input.year
    preferences = simulation_input.preferences

    rounds = get_available_rounds(cutoffs, year)
    if not rounds:
        logger.debug(f"No rounds found for year {year}, using defaults")
        rounds = list(DEFAULT_ROUNDS)

    round_results = []
    for round_label in rounds:
        round_cutoffs = [
            c for c in cutoffs
            if c.year == year and c.round == round_label and c.category == category
        ]
        round_results.append(simulate_round(user_rank, preferences, round_cutoffs, round_label))

    return SimulationResult(
        round_results=round_results,
        summary=generate_summary(round_results),
        input_details=InputDetails(
            user_rank=user_rank,
            category=category,
            year=year,
            total_preferences=len(preferences),
        ),
    )


def get_preference_safety_level(
    user_rank: int,
    preference: PreferenceOption,
    cutoffs: Sequence[CutoffEntry],
    year: str,
    category: str
) -> SafetyLevel:
    """
    Classify how safe a preference is for the candidate's rank

    Uses the first matching cutoff for the year and category across all
    rounds. The margin is the cutoff minus the rank, as a percentage of the
    rank: above 20% is safe, above 5% moderate, anything else risky.
    """
    if user_rank <= 0:
        return "unknown"

    relevant = [c for c in cutoffs if c.year == year and c.category == category]
    cutoff = find_cutoff(relevant, preference)

    if cutoff is None:
        return "unknown"

    margin = cutoff.cutoff_rank - user_rank
    margin_percent = margin / user_rank * 100

    if margin <= 0:
        return "risky"
    if margin_percent > SAFE_MARGIN_PERCENT:
        return "safe"
    if margin_percent > MODERATE_MARGIN_PERCENT:
        return "moderate"
    return "risky"
