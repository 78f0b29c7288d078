"""Activity log endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from backend.app.dependencies.services import ActivityLog, get_activity_log
from backend.app.schemas.activity import ActivityCreate, ActivityRead, ActivityStats
from backend.app.schemas.common import ApiResponse

router = APIRouter(prefix="/activity", tags=["activity"])


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def log_activity(activity_in: ActivityCreate, activity: ActivityLog = Depends(get_activity_log)):
    activity.append(activity_in.event, activity_in.payload)
    return {"message": "Activity logged"}


@router.get("/stats", response_model=ApiResponse[ActivityStats])
async def get_activity_stats(activity: ActivityLog = Depends(get_activity_log)):
    return {"data": ActivityStats.model_validate(activity.statistics())}


@router.get("/recent", response_model=ApiResponse[List[ActivityRead]])
async def get_recent_activity(
    limit: int = Query(default=20, ge=1, le=1000),
    activity: ActivityLog = Depends(get_activity_log),
):
    return {"data": [ActivityRead.model_validate(entry) for entry in activity.recent(limit)]}
