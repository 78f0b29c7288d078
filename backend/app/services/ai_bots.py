"""AI bot configuration, training data and performance bookkeeping."""

import logging
import math
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.core.time import utc_now
from backend.app.db.search import LIKE_ESCAPE, contains_pattern
from backend.app.models.ai_bot import AIBot
from backend.app.schemas.ai_bot import (
    AIBotCreate,
    AIBotTrain,
    AIBotUpdate,
    BotAnalytics,
    BusinessInfo,
    BotPerformance,
    TrainingData,
    UserFeedback,
)

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "createdAt": AIBot.created_at,
    "updatedAt": AIBot.updated_at,
    "name": AIBot.name,
    "status": AIBot.status,
    "type": AIBot.type,
}


def get_bot(db: Session, bot_id: str) -> AIBot:
    bot = db.query(AIBot).filter(AIBot.id == bot_id).first()
    if not bot:
        raise NotFoundError("AI Bot not found")
    return bot


def create_bot(db: Session, bot_in: AIBotCreate) -> AIBot:
    configuration = bot_in.configuration
    if bot_in.language:
        configuration = configuration.model_copy(update={"language": bot_in.language})
    bot = AIBot(
        business_id=bot_in.business_id,
        name=bot_in.name,
        description=bot_in.description,
        status="draft",
        type=bot_in.type,
        channels=list(bot_in.channels),
        configuration=configuration.model_dump(mode="json"),
        training_data=bot_in.training_data.model_dump(mode="json"),
        ai_model=bot_in.ai_model.model_dump(mode="json"),
        performance=BotPerformance(last_updated=utc_now()).model_dump(mode="json"),
        analytics=BotAnalytics().model_dump(mode="json"),
        settings=bot_in.settings.model_dump(mode="json"),
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    logger.info("AI bot %s created", bot.id)
    return bot


def list_bots(
    db: Session,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    bot_type: Optional[str] = None,
    business_id: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> Tuple[List[AIBot], Dict[str, int]]:
    query = db.query(AIBot)
    if status:
        query = query.filter(AIBot.status == status)
    if bot_type:
        query = query.filter(AIBot.type == bot_type)
    if business_id:
        query = query.filter(AIBot.business_id == business_id)
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(
            AIBot.name.ilike(pattern, escape=LIKE_ESCAPE) | AIBot.description.ilike(pattern, escape=LIKE_ESCAPE)
        )

    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError([{"field": "sortBy", "reason": f"Unsupported sort field '{sort_by}'"}])
    sort_column = SORTABLE_FIELDS[sort_by]
    order = sort_column.asc() if sort_order.lower() == "asc" else sort_column.desc()

    total = query.count()
    bots = query.order_by(order, AIBot.id).offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total_items": total,
        "items_per_page": limit,
    }
    return bots, pagination


def update_bot(db: Session, bot_id: str, bot_in: AIBotUpdate) -> Tuple[AIBot, List[str]]:
    bot = get_bot(db, bot_id)
    changes = bot_in.model_dump(mode="json", exclude_unset=True)
    for field_name, value in changes.items():
        if value is not None:
            setattr(bot, field_name, value)
    bot.updated_at = utc_now()
    db.commit()
    db.refresh(bot)
    return bot, sorted(changes)


def train_bot(db: Session, bot_id: str, train_in: AIBotTrain) -> AIBot:
    """Append FAQs and custom responses, merge business info, and mark the bot as training."""
    bot = get_bot(db, bot_id)
    training = TrainingData.model_validate(bot.training_data or {})
    if train_in.faqs:
        training.faqs = [*training.faqs, *train_in.faqs]
    if train_in.business_info:
        merged = {**training.business_info.model_dump(), **train_in.business_info.model_dump(exclude_unset=True)}
        training.business_info = BusinessInfo.model_validate(merged)
    if train_in.custom_responses:
        training.custom_responses = [*training.custom_responses, *train_in.custom_responses]

    bot.training_data = training.model_dump(mode="json")
    bot.status = "training"
    bot.updated_at = utc_now()
    db.commit()
    db.refresh(bot)
    return bot


def record_conversation(db: Session, bot: AIBot, *, resolved: bool, response_time_ms: int) -> BotPerformance:
    performance = BotPerformance.model_validate(bot.performance or {})
    performance.total_conversations += 1
    if resolved:
        performance.successful_resolutions += 1
    if response_time_ms:
        previous_total = performance.average_response_time * (performance.total_conversations - 1)
        performance.average_response_time = (previous_total + response_time_ms) / performance.total_conversations
    unresolved = performance.total_conversations - performance.successful_resolutions
    performance.escalation_rate = round(unresolved / performance.total_conversations * 100, 2)
    performance.last_updated = utc_now()

    bot.performance = performance.model_dump(mode="json")
    db.commit()
    db.refresh(bot)
    return performance


def add_feedback(db: Session, bot_id: str, rating: int, comment: Optional[str]) -> Tuple[float, int]:
    bot = get_bot(db, bot_id)
    analytics = BotAnalytics.model_validate(bot.analytics or {})
    analytics.user_feedback.append(UserFeedback(rating=rating, comment=comment or "", timestamp=utc_now()))
    average = sum(f.rating for f in analytics.user_feedback) / len(analytics.user_feedback)

    performance = BotPerformance.model_validate(bot.performance or {})
    performance.customer_satisfaction = average

    bot.analytics = analytics.model_dump(mode="json")
    bot.performance = performance.model_dump(mode="json")
    db.commit()
    db.refresh(bot)
    return round(average, 2), len(analytics.user_feedback)


def get_performance(bot: AIBot) -> Dict:
    performance = BotPerformance.model_validate(bot.performance or {})
    analytics = BotAnalytics.model_validate(bot.analytics or {})
    resolution_rate = 0.0
    if performance.total_conversations:
        resolution_rate = round(performance.successful_resolutions / performance.total_conversations * 100, 2)
    return {
        **performance.model_dump(),
        "resolution_rate": resolution_rate,
        "daily_stats": analytics.daily_stats[-30:],
        "top_questions": analytics.top_questions[:10],
        "recent_feedback": analytics.user_feedback[-5:],
    }


def archive_bot(db: Session, bot_id: str) -> AIBot:
    bot = get_bot(db, bot_id)
    bot.status = "archived"
    bot.updated_at = utc_now()
    db.commit()
    db.refresh(bot)
    return bot
