import json
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd
import plotly.express as px
import plotly.graph_objs as go

from .config import COLLEGE_SEARCH_LIMIT, LOG_FORMAT, LOG_LEVEL
from .course_normalizer import get_unique_courses
from .models import CollegeInfo, CutoffEntry, DatasetMetadata, SimulationResult

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

CUTOFF_COLUMNS = ["institute", "institute_code", "course", "category", "cutoff_rank", "year", "round"]
TEXT_COLUMNS = ["institute", "institute_code", "course", "category", "year", "round"]


def _to_text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _read_records(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()

    if suffix == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)

    if suffix == ".json":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        # Either {"metadata": ..., "cutoffs": [...]} or a bare list
        records = data.get("cutoffs", []) if isinstance(data, dict) else data
        # object dtype keeps 2024 from becoming 2024.0 when a record lacks the field
        return pd.DataFrame(records, dtype=object)

    raise ValueError(f"Unsupported cutoff file type: {path.suffix}")


def normalize_cutoff_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean a raw cutoff DataFrame

    Args:
        df (pd.DataFrame): Records as read from disk

    Returns:
        pd.DataFrame: Frame with every cutoff column, stripped strings,
        upper-case institute codes and positive integer cutoff ranks
    """
    df = df.reindex(columns=CUTOFF_COLUMNS)

    for column in TEXT_COLUMNS:
        df[column] = df[column].map(_to_text).astype(str).str.strip()
    df["institute_code"] = df["institute_code"].str.upper()

    df["cutoff_rank"] = pd.to_numeric(df["cutoff_rank"], errors="coerce")
    positive = df["cutoff_rank"].notna() & (df["cutoff_rank"] > 0)
    dropped = int((~positive).sum())
    if dropped:
        logger.warning(f"Dropping {dropped} rows without a positive cutoff rank")

    fractional = positive & (df["cutoff_rank"] % 1 != 0)
    if fractional.any():
        logger.warning(f"Dropping {int(fractional.sum())} rows with a fractional cutoff rank")

    df = df[positive & ~fractional].copy()
    df["cutoff_rank"] = df["cutoff_rank"].astype(int)
    return df


def load_cutoffs(path: Union[str, Path]) -> List[CutoffEntry]:
    """
    Load KCET cutoff records from a JSON or CSV file

    Args:
        path (str | Path): Cutoff file

    Returns:
        List[CutoffEntry]: Cleaned cutoff entries
    """
    path = Path(path)
    logger.info(f"Attempting to load cutoffs from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Cutoff file not found at: {path}")

    df = normalize_cutoff_frame(_read_records(path))

    cutoffs = [
        CutoffEntry(
            institute=row["institute"],
            institute_code=row["institute_code"],
            course=row["course"],
            category=row["category"],
            cutoff_rank=int(row["cutoff_rank"]),
            year=row["year"],
            round=row["round"],
        )
        for row in df.to_dict(orient="records")
    ]

    logger.info(f"Cutoffs loaded successfully. Total records: {len(cutoffs)}")
    return cutoffs


class StoreState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    POPULATED = "populated"
    FAILED = "failed"


class CutoffStore:
    """
    Lazily loaded, shared cutoff collection.

    Tries each source in order and keeps the first one that loads. If none
    loads the store stays FAILED, and get() returns an empty list without
    retrying, until reset(). The simulator never sees this object, only the
    list it returns.

    Usage:
        store = CutoffStore([Path("data/kcet_cutoffs_consolidated.json")])
        cutoffs = store.get()   # loads on first call
    """

    def __init__(self, sources: Optional[Sequence[Union[str, Path]]] = None):
        self.sources = [Path(s) for s in (sources or [])]
        self.state = StoreState.EMPTY
        self.source: Optional[Path] = None
        self._cutoffs: List[CutoffEntry] = []
        self._lock = threading.Lock()

    @classmethod
    def from_records(cls, cutoffs: Iterable[CutoffEntry]) -> "CutoffStore":
        store = cls()
        store._cutoffs = list(cutoffs)
        store.state = StoreState.POPULATED
        return store

    @property
    def is_loaded(self) -> bool:
        return self.state == StoreState.POPULATED

    def load(self) -> List[CutoffEntry]:
        """Load from the first usable source; an empty list if none loads."""
        with self._lock:
            if self.state == StoreState.POPULATED:
                return self._cutoffs

            self.state = StoreState.LOADING
            for source in self.sources:
                try:
                    cutoffs = load_cutoffs(source)
                except FileNotFoundError:
                    logger.debug(f"Cutoff source not present: {source}")
                    continue
                except Exception as e:
                    logger.error(f"Error loading cutoffs from {source}: {e}")
                    continue

                self._cutoffs = cutoffs
                self.source = source
                self.state = StoreState.POPULATED
                return self._cutoffs

            logger.error(f"Failed to load cutoff data from any of {len(self.sources)} sources")
            self.state = StoreState.FAILED
            return []

    def get(self) -> List[CutoffEntry]:
        if self.state in (StoreState.POPULATED, StoreState.FAILED):
            return self._cutoffs
        return self.load()

    def reset(self) -> None:
        with self._lock:
            self._cutoffs = []
            self.source = None
            self.state = StoreState.EMPTY


def get_dataset_metadata(cutoffs: Sequence[CutoffEntry]) -> DatasetMetadata:
    """
    Summarize the values available in a cutoff collection

    Args:
        cutoffs (Sequence[CutoffEntry]): Loaded cutoff entries

    Returns:
        DatasetMetadata: Years (latest first), categories, colleges by code,
        raw branch names and their canonical courses
    """
    colleges = {}
    for cutoff in cutoffs:
        if cutoff.institute_code and cutoff.institute:
            colleges[cutoff.institute_code] = cutoff.institute

    branches = sorted({c.course for c in cutoffs})

    return DatasetMetadata(
        years=sorted({c.year for c in cutoffs}, reverse=True),
        categories=sorted({c.category for c in cutoffs}),
        colleges=[CollegeInfo(code=code, name=colleges[code]) for code in sorted(colleges)],
        branches=branches,
        courses=get_unique_courses(branches),
        total_records=len(cutoffs),
    )


def get_college_branches(cutoffs: Sequence[CutoffEntry], college_code: str) -> List[str]:
    """Raw course names offered by one college, de-duplicated and sorted."""
    code = (college_code or "").strip().upper()
    return sorted({c.course for c in cutoffs if c.institute_code.upper() == code and c.course})


def search_colleges(
    cutoffs: Sequence[CutoffEntry],
    query: str = "",
    limit: int = COLLEGE_SEARCH_LIMIT
) -> List[CollegeInfo]:
    """
    Colleges whose name or code contains the query

    Args:
        cutoffs (Sequence[CutoffEntry]): Loaded cutoff entries
        query (str): Case-insensitive search text; empty matches every college
        limit (int): Maximum number of colleges returned

    Returns:
        List[CollegeInfo]: Matches sorted by code
    """
    needle = (query or "").strip().lower()
    matches = [
        college
        for college in get_dataset_metadata(cutoffs).colleges
        if needle in college.name.lower() or needle in college.code.lower()
    ]
    return matches[:limit]


def build_round_chart(result: SimulationResult) -> Optional[go.Figure]:
    """
    Bar chart of the allotted preference number in each round

    Returns:
        Optional[go.Figure]: None when no round has an allotment
    """
    rows = [
        {
            "Round": r.round,
            "Preference": r.allotted_preference_number,
            "College": r.allotted_college.college_name or r.allotted_college.college_code,
            "Branch": r.allotted_college.branch_name,
            "Cutoff Rank": r.cutoff_rank,
        }
        for r in result.round_results
        if r.allotted_college is not None
    ]
    if not rows:
        return None

    fig = px.bar(
        pd.DataFrame(rows),
        x="Round",
        y="Preference",
        hover_data=["College", "Branch", "Cutoff Rank"],
        title="Allotted Preference by Round",
    )
    fig.update_layout(
        showlegend=False,
        xaxis_title="Round",
        yaxis_title="Preference Number (lower is better)",
        yaxis_autorange="reversed",
    )
    return fig
