"""
FastAPI routes for LearnFlow learning features.
Every generation endpoint answers with its payload plus a used_fallback flag.
"""

from fastapi import APIRouter
import logging

from services.learning_service import LearningService
from models.learning_models import (
    PlanRequest,
    StepContentRequest,
    QuestionsRequest,
    InsightRequest,
    MarginNotesRequest,
    NuggetsRequest,
    RelatedTopicsRequest,
    RecommendationsRequest,
    TitleRequest,
    SlidesRequest,
    TutorChatRequest,
    TutorPromptsRequest,
    TransformRequest,
)
from utils.content_utils import match_notes_to_paragraphs
from utils.slide_formatter import split_into_slides

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/learning", tags=["learning"])

# Initialize services
learning_service = LearningService()


def _envelope(key: str, result) -> dict:
    body = {key: result.data, "used_fallback": result.used_fallback}
    if result.error:
        body["error"] = result.error
    if result.model:
        body["model"] = result.model
    return body


@router.post("/plan")
async def generate_plan(request: PlanRequest):
    """Generate a 10-step learning plan for a topic"""
    result = await learning_service.generate_plan(request)
    return _envelope("steps", result)


@router.post("/content")
async def generate_step_content(request: StepContentRequest):
    """
    Return detailed content for a step.
    Previously generated content is served from the step row without a model call.
    """
    result = await learning_service.generate_step_content(request)
    return _envelope("content", result)


@router.post("/questions")
async def generate_questions(request: QuestionsRequest):
    result = await learning_service.generate_questions(request)
    return _envelope("questions", result)


@router.post("/insight")
async def generate_insight(request: InsightRequest):
    """Explain highlighted text, or answer a question about it"""
    result = await learning_service.generate_insight(request)
    return _envelope("insight", result)


@router.post("/margin-notes")
async def generate_margin_notes(request: MarginNotesRequest):
    """
    Notes for up to 3 paragraphs, plus paragraphNotes mapping each
    paragraph index to the id of the note displayed beside it.
    """
    result = await learning_service.generate_margin_notes(request)
    body = _envelope("marginNotes", result)
    matched = match_notes_to_paragraphs(result.data, request.paragraphs)
    body["paragraphNotes"] = {str(index): note.id for index, note in matched.items()}
    return body


@router.post("/nuggets")
async def generate_nuggets(request: NuggetsRequest):
    result = await learning_service.generate_nuggets(request)
    return _envelope("nuggets", result)


@router.post("/related-topics")
async def generate_related_topics(request: RelatedTopicsRequest):
    result = await learning_service.generate_related_topics(request)
    return _envelope("topics", result)


@router.post("/recommendations")
async def get_recommendations(request: RecommendationsRequest):
    """Personalized topic suggestions; anonymous callers get starter topics"""
    result = await learning_service.get_recommendations(request)
    return _envelope("recommendations", result)


@router.post("/title")
async def generate_title(request: TitleRequest):
    result = await learning_service.generate_title(request)
    return _envelope("title", result)


@router.post("/slides")
async def split_slides(request: SlidesRequest):
    """Split markdown content into presentation slides (no model call)"""
    slides = split_into_slides(request.content)
    return {"slides": [s.model_dump() for s in slides], "count": len(slides)}


@router.post("/chat-tutor")
async def chat_with_tutor(request: TutorChatRequest):
    """One tutor reply given the conversation so far"""
    result = await learning_service.chat_with_tutor(request)
    return _envelope("response", result)


@router.post("/chat-tutor/prompts")
async def generate_tutor_prompts(request: TutorPromptsRequest):
    result = await learning_service.generate_tutor_prompts(request)
    return _envelope("suggestedPrompts", result)


@router.post("/transform")
async def transform_content(request: TransformRequest):
    """Re-present content as mental models, Socratic questions, worked examples and so on"""
    result = await learning_service.transform_content(request)
    body = _envelope("content", result)
    body["mode"] = request.mode
    return body
