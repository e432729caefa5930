"""KCET mock seat allotment simulator."""

__version__ = "1.0.0"

from .course_normalizer import (
    get_canonical_course_key,
    get_unique_courses,
    is_same_course,
    normalize_course,
)
from .simulator import (
    check_eligibility,
    find_cutoff,
    generate_summary,
    get_available_rounds,
    get_preference_safety_level,
    simulate_allotment,
    simulate_round,
)

__all__ = [
    "__version__",
    "normalize_course",
    "get_canonical_course_key",
    "is_same_course",
    "get_unique_courses",
    "find_cutoff",
    "check_eligibility",
    "simulate_round",
    "get_available_rounds",
    "simulate_allotment",
    "generate_summary",
    "get_preference_safety_level",
]
