import json
import logging

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import CUTOFF_SOURCES, HOST, LOG_FORMAT, LOG_LEVEL, PORT
from .course_normalizer import get_unique_courses
from .models import PreferenceSafety, SafetyRequest, SimulationInput
from .simulator import (
    get_available_rounds,
    get_preference_safety_level,
    order_preferences,
    simulate_allotment,
)
from .utils import (
    CutoffStore,
    build_round_chart,
    get_college_branches,
    get_dataset_metadata,
    search_colleges,
)

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# FastAPI Application
app = FastAPI(
    title="KCET Mock Allotment Simulator",
    description="Round-wise seat allotment simulation from historical cutoffs",
    version="1.0.0"
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

cutoff_store = CutoffStore(CUTOFF_SOURCES)


def get_store() -> CutoffStore:
    return cutoff_store


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize data on startup"""
    cutoffs = cutoff_store.load()
    if cutoff_store.is_loaded:
        logger.info(f"Loaded {len(cutoffs)} cutoff records from {cutoff_store.source}")
    else:
        logger.error("No cutoff data available on startup")


@app.get("/api/metadata")
async def metadata(store: CutoffStore = Depends(get_store)):
    """Years, categories, colleges and courses present in the cutoff data"""
    try:
        return get_dataset_metadata(store.get()).model_dump(by_alias=True)
    except Exception as e:
        logger.error(f"Error in metadata endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/rounds")
async def rounds(year: str, store: CutoffStore = Depends(get_store)):
    """Round labels available for a year, in round order"""
    try:
        return {"year": year, "rounds": get_available_rounds(store.get(), year)}
    except Exception as e:
        logger.error(f"Error in rounds endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/courses")
async def courses(store: CutoffStore = Depends(get_store)):
    """Canonical course names across every year"""
    try:
        return {"courses": get_unique_courses(c.course for c in store.get())}
    except Exception as e:
        logger.error(f"Error in courses endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/colleges")
async def colleges(q: str = "", store: CutoffStore = Depends(get_store)):
    """Search colleges by name or code"""
    try:
        matches = search_colleges(store.get(), q)
        return {"colleges": [c.model_dump(by_alias=True) for c in matches]}
    except Exception as e:
        logger.error(f"Error in colleges endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/colleges/{code}/branches")
async def college_branches(code: str, store: CutoffStore = Depends(get_store)):
    """
    Branches offered by a college

    Args:
        code (str): Institute code

    Returns:
        Dict containing raw branch names and their canonical courses
    """
    try:
        branches = get_college_branches(store.get(), code)
    except Exception as e:
        logger.error(f"Error in college branches endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not branches:
        raise HTTPException(status_code=404, detail=f"College not found: {code}")

    return {
        "code": code.upper(),
        "branches": branches,
        "courses": get_unique_courses(branches)
    }


@app.post("/api/simulate")
async def simulate(input: SimulationInput, store: CutoffStore = Depends(get_store)):
    """
    Simulate round-wise allotment for a candidate

    Args:
        input (SimulationInput): Rank, category, year and preference list

    Returns:
        Dict containing the simulation result and chart data
    """
    try:
        result = simulate_allotment(input, store.get())
        plot = build_round_chart(result)

        logger.info(
            f"Simulated {len(result.round_results)} rounds for rank {input.user_rank} "
            f"({input.category}, {input.year}): "
            f"{result.summary.total_rounds_with_allotment} with allotment"
        )

        return {
            "result": result.model_dump(by_alias=True),
            "plot_data": json.loads(plot.to_json()) if plot else None
        }
    except Exception as e:
        logger.error(f"Error in simulate endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/safety")
async def safety(input: SafetyRequest, store: CutoffStore = Depends(get_store)):
    """Safety level of each preference for the candidate's rank"""
    try:
        cutoffs = store.get()
        levels = [
            PreferenceSafety(
                preference_id=preference.id,
                preference_number=number,
                level=get_preference_safety_level(
                    input.user_rank, preference, cutoffs, input.year, input.category
                ),
            ).model_dump(by_alias=True)
            for number, preference in enumerate(order_preferences(input.preferences), start=1)
        ]
        return {"safety": levels}
    except Exception as e:
        logger.error(f"Error in safety endpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "mock_allotment.main:app",
        host=HOST,
        port=PORT,
        reload=True
    )
