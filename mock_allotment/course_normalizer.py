"""
Course name normalization across cutoff years.

The same branch is published differently from one year to the next:

    "Computer Science And Engineering"      (2023)
    "COMPUTER SCIENCE AND ENGINEERING"      (2024)
    "CS Computer Science And Engineering"   (2025)

normalize_course() maps every such variant to one canonical display name, and
get_canonical_course_key() turns that name into a comparison key. Both accept
any string and never raise.
"""

import logging
import re
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

# Canonical display names for each branch family
CANONICAL_COURSES = {
    # Core engineering
    "CSE": "Computer Science and Engineering",
    "ECE": "Electronics and Communication Engineering",
    "EEE": "Electrical and Electronics Engineering",
    "ME": "Mechanical Engineering",
    "CE": "Civil Engineering",
    "CH": "Chemical Engineering",
    # Computer science specializations
    "CSE_AI": "Computer Science (Artificial Intelligence)",
    "CSE_ML": "Computer Science (Machine Learning)",
    "CSE_AIML": "Computer Science (AI & ML)",
    "CSE_DS": "Computer Science (Data Science)",
    "CSE_CYBER": "Computer Science (Cyber Security)",
    "CSE_IOT": "Computer Science (IoT)",
    "CSE_BLOCKCHAIN": "Computer Science (Blockchain)",
    "CSE_CLOUD": "Computer Science (Cloud Computing)",
    # Information science
    "ISE": "Information Science and Engineering",
    "IT": "Information Technology",
    # Allied engineering
    "BT": "Biotechnology",
    "BME": "Biomedical Engineering",
    "AE": "Aeronautical Engineering",
    "ASE": "Aerospace Engineering",
    "AUTO": "Automobile Engineering",
    "MECH": "Mechatronics",
    "ROBOTICS": "Robotics and Automation",
    # Others
    "ARCH": "Architecture",
    "PLAN": "Planning",
}


def _rule(pattern: str, key: str):
    return re.compile(pattern, re.IGNORECASE), CANONICAL_COURSES[key]


# Evaluated top to bottom, first match wins. Specializations must stay ahead
# of the generic branch they would otherwise fall into.
COURSE_RULES = [
    # Computer Science and Engineering
    _rule(r"^(CS\s+)?COMPUTER\s+SCIENCE\s+(AND|&)?\s*ENGINEERING$", "CSE"),
    _rule(r"^(CS\s+)?COMPUTER\s+SCIENCE\s+AND\s+ENGG?$", "CSE"),
    # AI / ML
    _rule(r"COMPUTER\s+SCIENCE.*(AI|ARTIFICIAL\s+INTELLIGENCE).*(ML|MACHINE\s+LEARNING)", "CSE_AIML"),
    _rule(r"ARTIFICIAL\s+INTELLIGENCE\s+(AND|&)\s+MACHINE\s+LEARNING", "CSE_AIML"),
    _rule(r"^(AI|AD)\s+.*ARTIFICIAL\s+INTELLIGENCE", "CSE_AIML"),
    # Data science
    _rule(r"COMPUTER\s+SCIENCE.*DATA\s+SCIENCE", "CSE_DS"),
    _rule(r"^(DS|DC)\s+.*DATA\s+SCIENCE", "CSE_DS"),
    _rule(r"^DATA\s+SCIENCE", "CSE_DS"),
    # Cyber security
    _rule(r"COMPUTER\s+SCIENCE.*CYBER\s+SECURITY", "CSE_CYBER"),
    _rule(r"^(CY)\s+.*CYBER", "CSE_CYBER"),
    _rule(r"^CYBER\s+SECURITY$", "CSE_CYBER"),
    # IoT
    _rule(r"COMPUTER\s+SCIENCE.*(IOT|INTERNET\s+OF\s+THINGS)", "CSE_IOT"),
    _rule(r"^(IO|IC)\s+.*IOT|INTERNET", "CSE_IOT"),
    # Blockchain
    _rule(r"COMPUTER\s+SCIENCE.*BLOCK\s*CHAIN", "CSE_BLOCKCHAIN"),
    # Electronics and Communication
    _rule(r"^(EC\s+)?ELECTRONICS\s+(AND|&)?\s*COMMUNICATION\s+(ENGINEERING|ENGG?)?$", "ECE"),
    _rule(r"^(EC\s+)?ELECTRONICS\s+(AND|&)\s+COMM", "ECE"),
    # Electrical and Electronics
    _rule(r"^(EE\s+)?ELECTRICAL\s+(AND|&)?\s*ELECTRONICS\s+(ENGINEERING|ENGG?)?$", "EEE"),
    # Mechanical
    _rule(r"^(ME\s+)?MECHANICAL\s+(ENGINEERING|ENGG?)?$", "ME"),
    # Civil
    _rule(r"^(CE\s+)?CIVIL\s+(ENGINEERING|ENGG?)?$", "CE"),
    # Information Science
    _rule(r"^(IS|IE)\s+.*INFORMATION\s+SCIENCE", "ISE"),
    _rule(r"^INFORMATION\s+SCIENCE\s+(AND|&)?\s*ENGINEERING$", "ISE"),
    # Information Technology
    _rule(r"^(IT|IG)\s+.*INFORMATION\s+TECHNOLOGY", "IT"),
    _rule(r"^INFORMATION\s+TECHNOLOGY$", "IT"),
    # Biotechnology
    _rule(r"^(BT\s+)?BIO[\s-]?TECHNOLOGY$", "BT"),
    # Biomedical
    _rule(r"^(BM\s+)?BIO[\s-]?MEDICAL\s+(ENGINEERING|ENGG?)?$", "BME"),
    # Aeronautical
    _rule(r"^(AE\s+)?AERONAUTICAL\s+(ENGINEERING|ENGG?)?$", "AE"),
    # Aerospace
    _rule(r"^(SE\s+)?AEROSPACE\s+(ENGINEERING|ENGG?)?$", "ASE"),
    # Automobile
    _rule(r"^(AU|AT)\s+.*AUTOMOBILE|AUTOMOTIVE", "AUTO"),
    _rule(r"^AUTOMOBILE\s+(ENGINEERING|ENGG?)?$", "AUTO"),
    # Mechatronics
    _rule(r"^(MT\s+)?MECHATRONICS$", "MECH"),
    # Robotics
    _rule(r"ROBOTICS\s+(AND|&)\s+(AUTOMATION|AI)", "ROBOTICS"),
    _rule(r"^(RA|RO|RI)\s+.*ROBOTICS", "ROBOTICS"),
    # Architecture
    _rule(r"^(AR\s+)?ARCHITECTURE$", "ARCH"),
    # Planning
    _rule(r"^(UP|UR|LA)\s+.*PLANNING|B\.?\s*PLAN$", "PLAN"),
]

# Connector words kept lowercase by the title-case fallback
CONNECTOR_WORDS = {"and", "of", "in", "the", "&"}

_WHITESPACE = re.compile(r"\s+")
# Case-sensitive on purpose: department codes are published in capitals
_CODE_PREFIX = re.compile(r"^([A-Z]{2})\s+")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9]")


def clean_course_text(raw: str) -> str:
    """Collapse line breaks and runs of whitespace into single spaces and trim."""
    return _WHITESPACE.sub(" ", raw.replace("\r", " ").replace("\n", " ")).strip()


def _match_rules(text: str) -> Optional[str]:
    for pattern, canonical in COURSE_RULES:
        if pattern.search(text):
            return canonical
    return None


def _title_case(text: str) -> str:
    words = []
    for index, word in enumerate(text.split(" ")):
        lower_word = word.lower()
        if index > 0 and lower_word in CONNECTOR_WORDS:
            words.append(lower_word)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def normalize_course(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a raw course name to its canonical display name.

    Args:
        raw (str): Course name as published in the cutoff data

    Returns:
        str: Canonical name when a rule matches, otherwise a title-cased
        version of the cleaned text. Empty input is returned unchanged.
    """
    if not raw:
        return raw

    cleaned = clean_course_text(raw)
    if not cleaned:
        return raw

    canonical = _match_rules(cleaned)
    if canonical:
        return canonical

    # Retry without a leading department code ("CS ...", "EC ...")
    code_match = _CODE_PREFIX.match(cleaned)
    if code_match:
        canonical = _match_rules(cleaned[len(code_match.group(1)):].strip())
        if canonical:
            return canonical

    logger.debug(f"No course rule matched {cleaned!r}, using title case")
    return _title_case(cleaned)


def get_canonical_course_key(raw: Optional[str]) -> str:
    """Comparison key: canonical name lowercased with everything but [a-z0-9] removed."""
    normalized = normalize_course(raw) or ""
    return _NON_KEY_CHARS.sub("", normalized.lower())


def is_same_course(course_a: Optional[str], course_b: Optional[str]) -> bool:
    """Check if two course names refer to the same branch."""
    return get_canonical_course_key(course_a) == get_canonical_course_key(course_b)


def get_unique_courses(raw_courses: Iterable[str]) -> List[str]:
    """
    Canonical names for a list of raw course names, de-duplicated by key.

    The first display name seen for a key is kept; the result is sorted.
    """
    seen = set()
    result = []

    for raw in raw_courses:
        canonical = normalize_course(raw) or ""
        key = get_canonical_course_key(canonical)
        if key not in seen:
            seen.add(key)
            result.append(canonical)

    return sorted(result)
