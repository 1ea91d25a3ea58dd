import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from dream_planner import settings
from dream_planner.budget import allocate_budget
from dream_planner.orchestrator import RoadmapOrchestrator
from dream_planner.storage import RoadmapStore, create_session_factory

logger = logging.getLogger("dream_planner")

app = FastAPI()

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for dev
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store: Optional[RoadmapStore] = None
_orchestrator: Optional[RoadmapOrchestrator] = None


def get_store() -> Optional[RoadmapStore]:
    global _store
    if _store is None and settings.DATABASE_URL:
        _store = RoadmapStore(create_session_factory(settings.DATABASE_URL))
    return _store


def get_orchestrator() -> RoadmapOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = RoadmapOrchestrator()
    return _orchestrator


class RoadmapRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_context: Optional[Any] = Field(default=None, alias="userContext")
    goal_type: Optional[str] = Field(default=None, alias="goalType")
    goal_description: Optional[str] = Field(default=None, alias="goalDescription")
    options: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class BudgetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    milestones: List[Dict[str, Any]] = Field(default_factory=list)
    total_budget: Optional[float] = Field(default=None, alias="totalBudget")


@app.post("/roadmaps")
async def create_roadmap(
    request: RoadmapRequest,
    store: Optional[RoadmapStore] = Depends(get_store),
    orchestrator: RoadmapOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.generate_roadmap(
        request.user_context,
        request.goal_type,
        request.goal_description,
        request.options,
    )
    response = result.to_dict()

    if store is not None:
        try:
            response["roadmapId"] = await asyncio.to_thread(store.create_roadmap, result, user_id=request.user_id)
        except SQLAlchemyError as e:
            # the roadmap is still useful without being stored
            logger.error(f"[STORE] could not persist roadmap: {e}")

    return response


@app.get("/roadmaps/{roadmap_id}")
async def get_roadmap(roadmap_id: str, store: Optional[RoadmapStore] = Depends(get_store)):
    if store is None:
        raise HTTPException(status_code=503, detail="Roadmap storage is not configured")

    roadmap = await asyncio.to_thread(store.get_roadmap, roadmap_id)
    if roadmap is None:
        raise HTTPException(status_code=404, detail=f"Roadmap not found: {roadmap_id}")
    return roadmap


@app.post("/budget/allocate")
async def budget_allocate(request: BudgetRequest):
    return allocate_budget(request.milestones, request.total_budget).to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
