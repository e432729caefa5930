"""
Configuration constants for the allotment simulator.

Paths and server settings can be overridden through environment variables;
everything else is a fixed constant used by the simulator and the API.
"""

import os
from pathlib import Path

# =============================================================================
# FILE PATHS
# =============================================================================

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("CUTOFF_DATA_DIR", BASE_DIR / "data"))

# Candidate cutoff files, tried in order until one loads
CUTOFF_SOURCES = [
    DATA_DIR / "kcet_cutoffs_consolidated.json",
    BASE_DIR / "kcet_cutoffs.json",
    BASE_DIR / "kcet_cutoffs_round3_2025.json",
    BASE_DIR / "kcet_cutoffs.csv",
]

if os.getenv("CUTOFF_DATA_PATH"):
    CUTOFF_SOURCES.insert(0, Path(os.environ["CUTOFF_DATA_PATH"]))


# =============================================================================
# SIMULATION
# =============================================================================

# Used when the dataset has no rounds for the requested year
DEFAULT_ROUNDS = ("Round 1", "Round 2", "Round 3")

# Safety classification thresholds, as a percentage of the candidate's rank
SAFE_MARGIN_PERCENT = 20
MODERATE_MARGIN_PERCENT = 5

# Maximum colleges returned by a name or code search
COLLEGE_SEARCH_LIMIT = 20


# =============================================================================
# SERVER
# =============================================================================

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
