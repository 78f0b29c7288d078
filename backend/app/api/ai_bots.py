"""AI support bot endpoints: configuration, training, chat and feedback."""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backend.app.core.errors import BotInactiveError
from backend.app.db.session import get_db
from backend.app.dependencies.services import ActivityLog, get_activity_log, get_chat_client
from backend.app.schemas.ai_bot import (
    AIBotCreate,
    AIBotPage,
    AIBotRead,
    AIBotTrain,
    AIBotUpdate,
    BotStatus,
    BotType,
    ChatReplyRead,
    ChatRequest,
    FeedbackCreate,
    FeedbackResult,
    PerformanceRead,
    TrainingResult,
)
from backend.app.schemas.common import ApiResponse, Pagination
from backend.app.services import ai_bots as bot_service
from backend.app.services.chat import ChatCompletionClient

router = APIRouter(prefix="/ai-bots", tags=["ai-bots"])


@router.post("", response_model=ApiResponse[AIBotRead], status_code=status.HTTP_201_CREATED)
async def create_bot(
    bot_in: AIBotCreate,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    bot = bot_service.create_bot(db, bot_in)
    activity.append("ai_bot_created", {"botId": bot.id, "botType": bot.type, "channels": bot.channels})
    return {"message": "AI Bot created successfully", "data": AIBotRead.model_validate(bot)}


@router.get("", response_model=ApiResponse[AIBotPage])
async def list_bots(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[BotStatus] = None,
    bot_type: Optional[BotType] = Query(default=None, alias="type"),
    business_id: Optional[str] = Query(default=None, alias="businessId"),
    search: Optional[str] = Query(default=None, max_length=100),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    bots, pagination = bot_service.list_bots(
        db,
        page=page,
        limit=limit,
        status=status,
        bot_type=bot_type,
        business_id=business_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "data": AIBotPage(
            ai_bots=[AIBotRead.model_validate(bot) for bot in bots],
            pagination=Pagination(**pagination),
        )
    }


@router.get("/{bot_id}", response_model=ApiResponse[AIBotRead])
async def get_bot(bot_id: str, db: Session = Depends(get_db)):
    return {"data": AIBotRead.model_validate(bot_service.get_bot(db, bot_id))}


@router.put("/{bot_id}", response_model=ApiResponse[AIBotRead])
async def update_bot(
    bot_id: str,
    bot_in: AIBotUpdate,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    bot, updated_fields = bot_service.update_bot(db, bot_id, bot_in)
    activity.append("ai_bot_updated", {"botId": bot.id, "updatedFields": updated_fields})
    return {"message": "AI Bot updated successfully", "data": AIBotRead.model_validate(bot)}


@router.post("/{bot_id}/train", response_model=ApiResponse[TrainingResult])
async def train_bot(
    bot_id: str,
    train_in: AIBotTrain,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    bot = bot_service.train_bot(db, bot_id, train_in)
    activity.append(
        "ai_bot_training_started",
        {
            "botId": bot.id,
            "newFaqs": len(train_in.faqs or []),
            "newResponses": len(train_in.custom_responses or []),
        },
    )
    return {
        "message": "AI Bot training started",
        "data": TrainingResult(
            id=bot.id,
            status=bot.status,
            total_faqs=len(bot.training_data.get("faqs", [])),
            total_responses=len(bot.training_data.get("custom_responses", [])),
        ),
    }


@router.post("/{bot_id}/chat", response_model=ApiResponse[ChatReplyRead])
async def chat_with_bot(
    bot_id: str,
    chat_in: ChatRequest,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
    chat_client: ChatCompletionClient = Depends(get_chat_client),
):
    bot = bot_service.get_bot(db, bot_id)
    if not bot.is_active:
        raise BotInactiveError()

    started = time.perf_counter()
    reply = await chat_client.respond(chat_in.message, bot, chat_in.context)
    response_time = int((time.perf_counter() - started) * 1000)

    bot_service.record_conversation(db, bot, resolved=reply.resolved, response_time_ms=response_time)
    activity.append(
        "ai_bot_chat",
        {
            "botId": bot.id,
            "messageLength": len(chat_in.message),
            "responseTime": response_time,
            "resolved": reply.resolved,
            "channel": chat_in.channel or "unknown",
        },
    )
    return {
        "data": ChatReplyRead(
            response=reply.text,
            confidence=reply.confidence,
            resolved=reply.resolved,
            response_time=response_time,
            suggestions=reply.suggestions,
            escalation=reply.escalation_requested,
        )
    }


@router.get("/{bot_id}/performance", response_model=ApiResponse[PerformanceRead])
async def get_bot_performance(bot_id: str, db: Session = Depends(get_db)):
    bot = bot_service.get_bot(db, bot_id)
    return {"data": PerformanceRead(**bot_service.get_performance(bot))}


@router.post("/{bot_id}/feedback", response_model=ApiResponse[FeedbackResult])
async def submit_feedback(
    bot_id: str,
    feedback_in: FeedbackCreate,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    average, total = bot_service.add_feedback(db, bot_id, feedback_in.rating, feedback_in.comment)
    activity.append(
        "ai_bot_feedback_submitted",
        {"botId": bot_id, "rating": feedback_in.rating, "hasComment": bool(feedback_in.comment)},
    )
    return {
        "message": "Feedback submitted successfully",
        "data": FeedbackResult(average_rating=average, total_feedback=total),
    }


@router.delete("/{bot_id}", response_model=ApiResponse)
async def archive_bot(
    bot_id: str,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    bot = bot_service.archive_bot(db, bot_id)
    activity.append("ai_bot_archived", {"botId": bot.id})
    return {"message": "AI Bot archived successfully"}
