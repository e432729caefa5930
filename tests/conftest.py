import pytest

from mock_allotment.models import CutoffEntry, PreferenceOption

RVCE = "R V College of Engineering"
MSRIT = "M S Ramaiah Institute of Technology"
BMS = "B M S College of Engineering"
CSE = "Computer Science And Engineering"


def make_cutoff(code, institute, cutoff_rank, round_label, category="GM", course=CSE, year="2024"):
    return CutoffEntry(
        institute=institute,
        institute_code=code,
        course=course,
        category=category,
        cutoff_rank=cutoff_rank,
        year=year,
        round=round_label,
    )


def make_preference(pref_id, college_code, branch_code, college_name, branch_name, priority):
    return PreferenceOption(
        id=pref_id,
        college_code=college_code,
        branch_code=branch_code,
        college_name=college_name,
        branch_name=branch_name,
        priority=priority,
    )


@pytest.fixture
def mock_cutoffs():
    return [
        make_cutoff("E001", RVCE, 500, "Round 1"),
        make_cutoff("E001", RVCE, 600, "Round 2"),
        make_cutoff("E001", RVCE, 700, "Round 3"),
        make_cutoff("E002", MSRIT, 1500, "Round 1"),
        make_cutoff("E002", MSRIT, 1800, "Round 2"),
        make_cutoff("E002", MSRIT, 2000, "Round 3"),
        make_cutoff("E003", BMS, 3000, "Round 1"),
        make_cutoff("E003", BMS, 3500, "Round 2"),
        make_cutoff("E003", BMS, 4000, "Round 3"),
        # Category-specific cutoffs
        make_cutoff("E001", RVCE, 2000, "Round 1", category="2A"),
        make_cutoff("E002", MSRIT, 5000, "Round 1", category="2A"),
    ]


@pytest.fixture
def rvce_cs():
    return make_preference("1", "E001", "CS", RVCE, "Computer Science", 1)


@pytest.fixture
def msrit_cs():
    return make_preference("2", "E002", "CS", MSRIT, "Computer Science", 2)


@pytest.fixture
def bms_cs():
    return make_preference("3", "E003", "CS", BMS, "Computer Science", 3)


@pytest.fixture
def unknown_college():
    return make_preference("9", "E999", "XX", "Unknown College", "Unknown Branch", 1)
