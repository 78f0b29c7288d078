"""AI bot schemas. Nested documents are typed here and stored as JSON columns."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import ConfigDict, Field

from backend.app.schemas.common import CamelModel, Pagination, RequestModel


BotStatus = Literal["draft", "training", "active", "paused", "archived"]
BotType = Literal["customer-support", "sales", "appointment", "general", "custom"]
BotChannel = Literal["whatsapp", "website", "email", "instagram", "facebook", "telegram"]
BotLanguage = Literal["en", "hi", "gu", "ta", "te", "kn", "ml", "bn", "pa"]
ModelProvider = Literal["openai", "claude", "custom", "local"]


class Faq(CamelModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    category: Optional[str] = None
    tags: List[str] = []
    confidence: float = Field(default=0.8, ge=0, le=1)


class PricingItem(CamelModel):
    service: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None


class ContactInfo(CamelModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class BusinessInfo(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    services: List[str] = []
    products: List[str] = []
    pricing: List[PricingItem] = []
    operating_hours: Optional[str] = None
    location: Optional[str] = None
    contact_info: Optional[ContactInfo] = None


class CustomResponse(CamelModel):
    trigger: str = Field(min_length=1)
    response: str = Field(min_length=1)
    context: Optional[str] = None


class TrainingData(CamelModel):
    faqs: List[Faq] = []
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    custom_responses: List[CustomResponse] = []


class BotBusinessHours(CamelModel):
    start: str = "09:00"
    end: str = "18:00"
    timezone: str = "Asia/Kolkata"


class AutoReply(CamelModel):
    enabled: bool = True
    message: str = "Thank you for your message. Our AI assistant will help you shortly."


class Escalation(CamelModel):
    enabled: bool = True
    threshold: int = 3
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


class BotConfiguration(CamelModel):
    language: BotLanguage = "en"
    timezone: str = "Asia/Kolkata"
    business_hours: BotBusinessHours = Field(default_factory=BotBusinessHours)
    auto_reply: AutoReply = Field(default_factory=AutoReply)
    escalation: Escalation = Field(default_factory=Escalation)


class AIModelConfig(CamelModel):
    provider: ModelProvider = "openai"
    model: str = "gpt-3.5-turbo"
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=150, ge=1)


class BotPerformance(CamelModel):
    total_conversations: int = 0
    successful_resolutions: int = 0
    escalation_rate: float = 0
    average_response_time: float = 0
    customer_satisfaction: float = 0
    last_updated: Optional[datetime] = None


class DailyStat(CamelModel):
    date: datetime
    conversations: int = 0
    resolutions: int = 0
    escalations: int = 0
    avg_response_time: float = 0


class TopQuestion(CamelModel):
    question: str
    count: int = 0
    category: Optional[str] = None


class UserFeedback(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    timestamp: datetime


class BotAnalytics(CamelModel):
    daily_stats: List[DailyStat] = []
    top_questions: List[TopQuestion] = []
    user_feedback: List[UserFeedback] = []


class BotSettings(CamelModel):
    is_public: bool = False
    allow_learning: bool = True
    max_daily_conversations: int = 1000
    backup_frequency: Literal["daily", "weekly", "monthly"] = "daily"


class AIBotCreate(RequestModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    business_id: str = "demo-business"
    type: BotType = "customer-support"
    channels: List[BotChannel] = Field(min_length=1)
    language: Optional[BotLanguage] = None
    configuration: BotConfiguration = Field(default_factory=BotConfiguration)
    training_data: TrainingData = Field(default_factory=TrainingData)
    ai_model: AIModelConfig = Field(default_factory=AIModelConfig)
    settings: BotSettings = Field(default_factory=BotSettings)


class AIBotUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[BotStatus] = None
    configuration: Optional[BotConfiguration] = None
    training_data: Optional[TrainingData] = None
    ai_model: Optional[AIModelConfig] = None
    settings: Optional[BotSettings] = None


class AIBotTrain(RequestModel):
    faqs: Optional[List[Faq]] = None
    business_info: Optional[BusinessInfo] = None
    custom_responses: Optional[List[CustomResponse]] = None


class AIBotRead(CamelModel):
    id: str
    business_id: str
    name: str
    description: Optional[str] = None
    status: str
    type: str
    channels: List[str]
    is_active: bool
    configuration: BotConfiguration
    training_data: TrainingData
    ai_model: AIModelConfig
    performance: BotPerformance
    analytics: BotAnalytics
    settings: BotSettings
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AIBotPage(CamelModel):
    ai_bots: List[AIBotRead]
    pagination: Pagination


class TrainingResult(CamelModel):
    id: str
    status: str
    total_faqs: int
    total_responses: int


class ChatRequest(RequestModel):
    message: str = Field(min_length=1)
    user_id: Optional[str] = None
    channel: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class ChatReplyRead(CamelModel):
    response: str
    confidence: float
    resolved: bool
    response_time: int
    suggestions: List[str] = []
    escalation: bool = False


class PerformanceRead(BotPerformance):
    resolution_rate: float
    daily_stats: List[DailyStat] = []
    top_questions: List[TopQuestion] = []
    recent_feedback: List[UserFeedback] = []


class FeedbackCreate(RequestModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)
    conversation_id: Optional[str] = None


class FeedbackResult(CamelModel):
    average_rating: float
    total_feedback: int
