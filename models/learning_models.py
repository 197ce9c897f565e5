"""
Pydantic models for LearnFlow generation.
Simple, clear models with validation.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Literal
from enum import Enum


# Enums for type safety and validation
class FeatureType(str, Enum):
    CONTENT_GENERATION = "content-generation"
    QUICK_INSIGHTS = "quick-insights"
    DEEP_ANALYSIS = "deep-analysis"
    STRUCTURED_EXTRACTION = "structured-extraction"
    RELATED_TOPICS = "related-topics"
    CHAT_TUTOR = "chat-tutor"
    TOPIC_RECOMMENDATIONS = "topic-recommendations"


class ProviderName(str, Enum):
    OPENROUTER = "openrouter"
    OPENAI = "openai"


class ResponseFormat(str, Enum):
    JSON = "json_object"
    TEXT = "text"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RecommendationCategory(str, Enum):
    GETTING_STARTED = "getting_started"
    CONTINUE_LEARNING = "continue_learning"
    NEXT_STEPS = "next_steps"
    COMPLEMENTARY = "complementary"


# Model Configuration
class ModelConfig(BaseModel):
    """Per-feature model selection. Frozen once loaded."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: ProviderName = ProviderName.OPENROUTER
    model: str
    max_tokens: int = Field(..., ge=1)
    fallback_model: str
    temperature: Optional[float] = None


# Chat Models
class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """One logical chat call, built fresh per invocation"""
    feature_type: FeatureType
    messages: List[ChatMessage] = Field(..., min_length=1)
    response_format: ResponseFormat = ResponseFormat.TEXT
    max_tokens: Optional[int] = Field(default=None, ge=1)
    temperature: Optional[float] = None


class ProviderRequest(BaseModel):
    """What a single provider attempt receives"""
    model: str
    messages: List[ChatMessage]
    max_tokens: int
    temperature: Optional[float] = None
    response_format: ResponseFormat = ResponseFormat.TEXT


class ChatResult(BaseModel):
    content: str
    model: str
    provider: ProviderName
    tokens_used: Optional[int] = None
    attempt: int = 1


# Presentation
class SlideContent(BaseModel):
    type: Literal["text", "code"]
    content: str
    language: Optional[str] = None
    preview: Optional[str] = None


# Feature payloads
class PlanStep(BaseModel):
    title: str
    description: str


class MarginNote(BaseModel):
    id: str
    paragraph: str
    insight: str


class RecommendedTopic(BaseModel):
    topic: str
    reason: str
    category: RecommendationCategory


class RelatedTopic(BaseModel):
    id: str
    title: str
    description: str
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    relevance: float = Field(default=0.8, ge=0.0, le=1.0)


class FeatureResult(BaseModel):
    """Envelope every feature handler returns"""
    data: Any
    used_fallback: bool = False
    error: Optional[str] = None
    model: Optional[str] = None
    provider: Optional[ProviderName] = None


# Request Models
class PlanRequest(BaseModel):
    topic: str = ""


class StepContentRequest(BaseModel):
    step_id: str = ""
    topic: str = ""
    title: str = ""
    step_number: Optional[int] = None
    total_steps: Optional[int] = None


class QuestionsRequest(BaseModel):
    content: str = ""
    topic: str = ""
    title: str = ""


class InsightRequest(BaseModel):
    topic: str = ""
    selected_text: Optional[str] = None
    question: Optional[str] = None


class MarginNotesRequest(BaseModel):
    paragraphs: List[str] = Field(default_factory=list)
    topic: str = ""


class NuggetsRequest(BaseModel):
    topic: str = ""


class RelatedTopicsRequest(BaseModel):
    title: str = ""
    description: Optional[str] = None


class RecommendationsRequest(BaseModel):
    user_id: Optional[str] = None


class TitleRequest(BaseModel):
    topic: str = ""
    path_id: Optional[str] = None


class SlidesRequest(BaseModel):
    content: str = ""


class LearningMode(str, Enum):
    MENTAL_MODELS = "mental_models"
    SOCRATIC = "socratic"
    WORKED_EXAMPLES = "worked_examples"
    VISUAL_SUMMARY = "visual_summary"
    ACTIVE_PRACTICE = "active_practice"
    STORY_MODE = "story_mode"


class TutorChatRequest(BaseModel):
    message: str = ""
    topic: str = ""
    content: Optional[str] = None
    conversation_history: List[ChatMessage] = Field(default_factory=list)


class TutorPromptsRequest(BaseModel):
    topic: str = ""
    content: Optional[str] = None


class TransformRequest(BaseModel):
    """Unknown modes are accepted and get a generic transformation"""
    mode: str = ""
    content: str = ""
    topic: Optional[str] = None
    title: Optional[str] = None
    selection: Optional[str] = None
