"""
LearnFlow feature handlers and the service that wires them together.
"""

import re
import uuid
import logging
from typing import Any, Dict, List, Optional

import clients.supabase_client as supabase_store
from clients.openai_client import OpenAIProvider
from clients.openrouter_client import OpenRouterProvider
from models.learning_models import (
    ChatMessage,
    Difficulty,
    FeatureResult,
    FeatureType,
    InsightRequest,
    MarginNote,
    MarginNotesRequest,
    NuggetsRequest,
    PlanRequest,
    PlanStep,
    QuestionsRequest,
    RecommendationCategory,
    RecommendationsRequest,
    RecommendedTopic,
    RelatedTopic,
    RelatedTopicsRequest,
    ResponseFormat,
    StepContentRequest,
    TitleRequest,
    TransformRequest,
    TutorChatRequest,
    TutorPromptsRequest,
)
from prompts.learning_prompts import (
    CONTENT_SYSTEM_PROMPT,
    GENERIC_MODE_PROMPT,
    LEARNING_MODE_PROMPTS,
    NUGGETS_SYSTEM_PROMPT,
    PLAN_SYSTEM_PROMPT,
    QUESTIONS_SYSTEM_PROMPT,
    RECOMMENDATIONS_SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
    TUTOR_PROMPTS_USER_MESSAGE,
    build_insight_prompt,
    build_insight_system_prompt,
    build_margin_notes_prompt,
    build_margin_notes_system_prompt,
    build_nuggets_prompt,
    build_plan_prompt,
    build_questions_prompt,
    build_recommendations_prompt,
    build_related_topics_prompt,
    build_step_content_prompt,
    build_title_prompt,
    build_transform_prompt,
    build_tutor_prompts_system_prompt,
    build_tutor_system_prompt,
)
from services.ai_client import AIClient
from services.feature_handler import FeatureHandler, json_list, load_json
from services.model_config_service import ModelConfigService
from utils.content_utils import clean_meta_commentary
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

PLAN_STEP_COUNT = 10
PLAN_MIN_STEPS = 5
QUESTION_COUNT = 5
NUGGET_COUNT = 5
MAX_MARGIN_NOTES = 3
MARGIN_NOTE_PARAGRAPH_CHARS = 100
MAX_RELATED_TOPICS = 10
MAX_RECOMMENDATIONS = 5
MIN_STEP_CONTENT_CHARS = 200


def _messages(system: str, user: str) -> List[ChatMessage]:
    return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)]


def _clean_strings(items: list) -> List[str]:
    return [str(item).strip() for item in items if isinstance(item, str) and item.strip()]


# ─── Learning plan ───────────────────────────────────────────────────────────

class LearningPlanHandler(FeatureHandler):
    name = "learning-plan"
    feature_type = FeatureType.STRUCTURED_EXTRACTION
    response_format = ResponseFormat.JSON
    required_fields = ["topic"]

    def build_messages(self, request: PlanRequest, context):
        return _messages(PLAN_SYSTEM_PROMPT, build_plan_prompt(request.topic))

    def parse(self, content, request: PlanRequest, context) -> List[PlanStep]:
        data = load_json(content)
        if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
            raise ValueError("Invalid response format: steps is not an array")

        steps = [PlanStep(**step) for step in data["steps"] if isinstance(step, dict)]
        if len(steps) < PLAN_MIN_STEPS:
            raise ValueError(f"Insufficient learning plan generated ({len(steps)} steps)")
        return steps[:PLAN_STEP_COUNT]

    def fallback(self, request: PlanRequest, context) -> List[PlanStep]:
        topic = request.topic
        outline = [
            (f"Introduction to {topic}", f"Understand what {topic} is and why it matters."),
            (f"Core Concepts of {topic}", f"Learn the essential ideas that everything else in {topic} builds on."),
            (f"Key Terminology in {topic}", f"Get comfortable with the vocabulary used throughout {topic}."),
            (f"Foundational Principles of {topic}", f"See how the basic principles of {topic} fit together."),
            (f"Tools and Techniques for {topic}", f"Explore the common tools and methods used in {topic}."),
            (f"Practical Applications of {topic}", f"Apply {topic} to realistic, everyday problems."),
            (f"Intermediate {topic} Patterns", f"Recognize recurring patterns and approaches in {topic}."),
            (f"Common Challenges in {topic}", f"Identify typical pitfalls in {topic} and how to avoid them."),
            (f"Advanced Topics in {topic}", f"Dig into the more advanced areas of {topic}."),
            (f"Putting {topic} into Practice", f"Combine everything you have learned about {topic} in a final review."),
        ]
        return [PlanStep(title=title, description=description) for title, description in outline]


# ─── Step content ────────────────────────────────────────────────────────────

class StepContentHandler(FeatureHandler):
    """Long-form content for one step, cached on the step row once generated"""
    name = "step-content"
    feature_type = FeatureType.CONTENT_GENERATION
    response_format = ResponseFormat.TEXT
    required_fields = ["step_id", "topic", "title"]

    def __init__(self, ai_client: AIClient, store=supabase_store):
        super().__init__(ai_client)
        self.store = store

    async def run(self, request: StepContentRequest) -> FeatureResult:
        self.validate(request)

        cached = self._cached_content(request.step_id)
        if cached:
            logger.info(f"Content already exists for step {request.step_id}, returning cached content")
            return FeatureResult(data=cached)

        logger.info(
            f"Generating content for step: {request.title} "
            f"({request.step_number or '?'}/{request.total_steps or '?'})"
        )
        result = await self.generate(request, {})
        if not result.used_fallback:
            self.store.save_step_detailed_content(request.step_id, result.data)
        return result

    def _cached_content(self, step_id: str) -> Optional[str]:
        try:
            return self.store.get_step_detailed_content(step_id)
        except Exception as e:
            logger.warning(f"Could not check existing content for step {step_id}: {e}")
            return None

    def build_messages(self, request: StepContentRequest, context):
        prompt = build_step_content_prompt(
            request.topic, request.title, request.step_number, request.total_steps
        )
        return _messages(CONTENT_SYSTEM_PROMPT, prompt)

    def parse(self, content, request, context) -> str:
        cleaned = clean_meta_commentary(content or "")
        if len(cleaned) < MIN_STEP_CONTENT_CHARS:
            raise ValueError("Generated content is too short or incomplete")
        if cleaned.endswith("...") or cleaned.endswith("…"):
            raise ValueError("Generated content appears to be truncated")
        return cleaned

    def fallback(self, request: StepContentRequest, context) -> str:
        return (
            f"## {request.title}\n\n"
            f"This step covers {request.title} as part of learning {request.topic}. "
            f"Detailed content could not be generated right now, so here is a short guide to get started.\n\n"
            f"Begin by identifying the main ideas behind {request.title} and how they relate to the "
            f"broader subject of {request.topic}. Look for a simple example that shows the idea in action, "
            f"then try explaining it in your own words.\n\n"
            f"Finally, note any questions that come up. They make a good starting point for the next step "
            f"and for revisiting this section later."
        )


# ─── Related questions ───────────────────────────────────────────────────────

class RelatedQuestionsHandler(FeatureHandler):
    name = "related-questions"
    feature_type = FeatureType.QUICK_INSIGHTS
    response_format = ResponseFormat.JSON
    required_fields = ["content", "topic"]

    def build_messages(self, request: QuestionsRequest, context):
        prompt = build_questions_prompt(request.content, request.topic, request.title or request.topic)
        return _messages(QUESTIONS_SYSTEM_PROMPT, prompt)

    def parse(self, content, request, context) -> List[str]:
        questions = _clean_strings(json_list(content, "questions"))
        if len(questions) < QUESTION_COUNT:
            raise ValueError(f"Expected {QUESTION_COUNT} questions, got {len(questions)}")
        return questions[:QUESTION_COUNT]

    def fallback(self, request: QuestionsRequest, context) -> List[str]:
        title = request.title or request.topic
        topic = request.topic
        return [
            f"What are the key concepts of {title} as presented in this content?",
            f"How does {title} relate to real-world applications?",
            f"What challenges might arise when implementing {title}?",
            f"How could the concepts in {title} be expanded upon or improved?",
            f"What connections exist between {title} and other areas of {topic}?",
        ]


# ─── AI insight ──────────────────────────────────────────────────────────────

class InsightHandler(FeatureHandler):
    name = "ai-insight"
    feature_type = FeatureType.QUICK_INSIGHTS
    response_format = ResponseFormat.TEXT
    required_fields = ["topic"]

    def validate(self, request: InsightRequest) -> None:
        super().validate(request)
        if not (request.selected_text or "").strip() and not (request.question or "").strip():
            raise ValidationError(
                "Either selected_text or question is required",
                context={"feature": self.name},
            )

    def build_messages(self, request: InsightRequest, context):
        prompt = build_insight_prompt(request.topic, request.selected_text, request.question)
        return _messages(build_insight_system_prompt(request.topic), prompt)

    def parse(self, content, request, context) -> str:
        insight = (content or "").strip()
        if not insight:
            raise ValueError("Empty insight")
        return insight

    def fallback(self, request: InsightRequest, context) -> str:
        return (
            f"This idea is an important part of {request.topic}. Try restating it in your own words, "
            f"connect it to what you already know about {request.topic}, and look for a concrete "
            f"example where it applies."
        )


# ─── Margin notes ────────────────────────────────────────────────────────────

class MarginNotesHandler(FeatureHandler):
    name = "margin-notes"
    feature_type = FeatureType.QUICK_INSIGHTS
    response_format = ResponseFormat.JSON
    required_fields = ["paragraphs", "topic"]

    def prepare(self, request: MarginNotesRequest) -> Dict[str, Any]:
        selected = [p for p in request.paragraphs if isinstance(p, str) and p.strip()][:MAX_MARGIN_NOTES]
        if not selected:
            raise ValidationError("Missing or invalid paragraphs parameter", context={"feature": self.name})
        return {"paragraphs": selected}

    def build_messages(self, request: MarginNotesRequest, context):
        prompt = build_margin_notes_prompt(context["paragraphs"], request.topic)
        return _messages(build_margin_notes_system_prompt(request.topic), prompt)

    def parse(self, content, request, context) -> List[MarginNote]:
        paragraphs = context["paragraphs"]
        notes: List[MarginNote] = []
        used = set()

        for item in json_list(content, "notes", "marginNotes"):
            if not isinstance(item, dict) or not str(item.get("insight") or "").strip():
                continue
            try:
                index = int(item.get("paragraph_index", len(notes) + 1)) - 1
            except (TypeError, ValueError):
                continue
            if index < 0 or index >= len(paragraphs) or index in used:
                continue
            used.add(index)
            notes.append(MarginNote(
                id=f"note-{index + 1}",
                paragraph=paragraphs[index][:MARGIN_NOTE_PARAGRAPH_CHARS],
                insight=str(item["insight"]).strip(),
            ))

        if not notes:
            raise ValueError("No usable margin notes in response")
        return sorted(notes, key=lambda n: n.id)

    def fallback(self, request: MarginNotesRequest, context) -> List[MarginNote]:
        return [
            MarginNote(
                id=f"note-{i + 1}",
                paragraph=paragraph[:MARGIN_NOTE_PARAGRAPH_CHARS],
                insight=(
                    f"Consider how this idea connects to the broader principles of {request.topic}. "
                    f"Try to find a real-world example that illustrates it."
                ),
            )
            for i, paragraph in enumerate(context["paragraphs"])
        ]


# ─── Knowledge nuggets ───────────────────────────────────────────────────────

class KnowledgeNuggetsHandler(FeatureHandler):
    name = "knowledge-nuggets"
    feature_type = FeatureType.QUICK_INSIGHTS
    response_format = ResponseFormat.JSON
    temperature = 0.7
    required_fields = ["topic"]

    def build_messages(self, request: NuggetsRequest, context):
        return _messages(NUGGETS_SYSTEM_PROMPT, build_nuggets_prompt(request.topic))

    def parse(self, content, request, context) -> List[str]:
        nuggets = _clean_strings(json_list(content, "nuggets"))
        if len(nuggets) < NUGGET_COUNT:
            raise ValueError(f"Expected {NUGGET_COUNT} nuggets, got {len(nuggets)}")
        return nuggets[:NUGGET_COUNT]

    def fallback(self, request: NuggetsRequest, context) -> List[str]:
        topic = request.topic
        return [
            f"{topic} builds on ideas refined by many people over time.",
            f"Most experts in {topic} started with the same fundamentals you will learn.",
            f"{topic} connects to other fields in surprising ways.",
            f"Regular practice is the fastest way to build intuition for {topic}.",
            f"Short, consistent study sessions help {topic} stick.",
        ]


# ─── Related topics ──────────────────────────────────────────────────────────

class RelatedTopicsHandler(FeatureHandler):
    name = "related-topics"
    feature_type = FeatureType.RELATED_TOPICS
    response_format = ResponseFormat.JSON
    required_fields = ["title"]

    def build_messages(self, request: RelatedTopicsRequest, context):
        prompt = build_related_topics_prompt(request.title, request.description)
        return [ChatMessage(role="user", content=prompt)]

    def parse(self, content, request, context) -> List[RelatedTopic]:
        topics: List[RelatedTopic] = []
        for item in json_list(content, "topics"):
            if not isinstance(item, dict):
                continue
            try:
                topics.append(RelatedTopic(**{**item, "id": str(item.get("id") or uuid.uuid4())}))
            except ValueError as e:
                logger.warning(f"Skipping malformed related topic {item.get('title')}: {e}")

        if not topics:
            raise ValueError("No usable related topics in response")
        return topics[:MAX_RELATED_TOPICS]

    def fallback(self, request: RelatedTopicsRequest, context) -> List[RelatedTopic]:
        title = request.title
        templates = [
            (f"Advanced {title}", "Explore deeper concepts and advanced techniques.", Difficulty.ADVANCED, 0.9),
            (f"{title} Fundamentals", "Master the core principles and foundational concepts.", Difficulty.BEGINNER, 0.95),
            (f"Practical {title}", "Apply concepts through hands-on projects and exercises.", Difficulty.INTERMEDIATE, 0.85),
            (f"{title} Best Practices", "Learn industry standards and proven methodologies.", Difficulty.INTERMEDIATE, 0.8),
            (f"{title} Case Studies", "Analyze real-world applications and success stories.", Difficulty.INTERMEDIATE, 0.75),
        ]
        return [
            RelatedTopic(id=str(uuid.uuid4()), title=t, description=d, difficulty=diff, relevance=rel)
            for t, d, diff, rel in templates
        ]


# ─── Recommendations ─────────────────────────────────────────────────────────

BEGINNER_RECOMMENDATIONS = [
    ("JavaScript Fundamentals", "Great starting point for web development"),
    ("React Basics", "Popular framework for building user interfaces"),
    ("Python for Beginners", "Versatile language perfect for beginners"),
    ("Git & Version Control", "Essential skill for all developers"),
]

NEXT_TOPIC_MAP: Dict[str, List[str]] = {
    "javascript": ["TypeScript", "Node.js", "React Advanced Patterns"],
    "typescript": ["Advanced TypeScript", "Type-Safe APIs", "React with TypeScript"],
    "react": ["Next.js", "React Query", "State Management with Redux"],
    "python": ["Django", "FastAPI", "Data Science with Python"],
    "machine learning": ["Deep Learning", "Neural Networks", "TensorFlow"],
    "system design": ["Microservices Architecture", "Database Design", "Cloud Architecture"],
    "css": ["Tailwind CSS", "CSS Grid & Flexbox", "Responsive Design"],
    "rest api": ["GraphQL", "API Security", "Microservices"],
}


def build_user_summary(paths: List[Dict[str, Any]], steps: List[Dict[str, Any]]) -> str:
    """One line per recent path with step completion counts"""
    if not paths:
        return "No prior learning history."

    lines = []
    for path in paths[:5]:
        path_steps = [s for s in steps if s.get("path_id") == path.get("id")]
        completed = sum(1 for s in path_steps if s.get("completed"))
        title = f" ({path['title']})" if path.get("title") else ""
        lines.append(f"- {path.get('topic', '')}{title}: {completed}/{len(path_steps)} steps completed")
    return "\n".join(lines)


def generate_rules_based_recommendations(
    paths: List[Dict[str, Any]],
    steps: List[Dict[str, Any]]
) -> List[RecommendedTopic]:
    """Deterministic recommendations from learning history"""
    if not paths:
        return [
            RecommendedTopic(topic=t, reason=r, category=RecommendationCategory.GETTING_STARTED)
            for t, r in BEGINNER_RECOMMENDATIONS
        ]

    recommendations: List[RecommendedTopic] = []
    user_topics = [str(p.get("topic", "")).lower() for p in paths]
    recent_topics = user_topics[:5]

    for topic in recent_topics:
        key = next((k for k in NEXT_TOPIC_MAP if k in topic), None)
        if key is None:
            continue
        source = next((p["topic"] for p in paths if key in str(p.get("topic", "")).lower()), key)
        for next_topic in NEXT_TOPIC_MAP[key]:
            if any(next_topic.lower() in t for t in user_topics):
                continue
            recommendations.append(RecommendedTopic(
                topic=next_topic,
                reason=f"Next step after {source}",
                category=RecommendationCategory.NEXT_STEPS,
            ))

    in_progress = [p for p in paths if not p.get("is_completed")]
    if in_progress:
        latest = in_progress[0]
        path_steps = [s for s in steps if s.get("path_id") == latest.get("id")]
        completed = sum(1 for s in path_steps if s.get("completed"))
        if 0 < completed < len(path_steps):
            recommendations.insert(0, RecommendedTopic(
                topic=latest["topic"],
                reason=f"Continue your progress ({completed}/{len(path_steps)} steps completed)",
                category=RecommendationCategory.CONTINUE_LEARNING,
            ))

    has_web = any("react" in t or "javascript" in t or "css" in t for t in user_topics)
    has_backend = any("node" in t or "api" in t or "python" in t for t in user_topics)
    if has_web and not has_backend:
        recommendations.append(RecommendedTopic(
            topic="Building REST APIs",
            reason="Complement your frontend skills with backend knowledge",
            category=RecommendationCategory.COMPLEMENTARY,
        ))
    if has_backend and not has_web:
        recommendations.append(RecommendedTopic(
            topic="React Fundamentals",
            reason="Add frontend development to your skill set",
            category=RecommendationCategory.COMPLEMENTARY,
        ))

    return recommendations[:MAX_RECOMMENDATIONS]


class RecommendationsHandler(FeatureHandler):
    name = "recommendations"
    feature_type = FeatureType.TOPIC_RECOMMENDATIONS
    response_format = ResponseFormat.JSON
    max_tokens = 800
    temperature = 0.7

    def __init__(self, ai_client: AIClient, store=supabase_store):
        super().__init__(ai_client)
        self.store = store

    def prepare(self, request: RecommendationsRequest) -> Dict[str, Any]:
        paths: List[Dict[str, Any]] = []
        steps: List[Dict[str, Any]] = []
        if request.user_id:
            try:
                paths = self.store.list_paths_by_user(request.user_id)
                steps = self.store.get_steps_for_paths([p["id"] for p in paths if p.get("id")])
            except Exception as e:
                logger.warning(f"Could not load learning history for {request.user_id}: {e}")
        return {"paths": paths, "steps": steps}

    def build_messages(self, request, context):
        summary = build_user_summary(context["paths"], context["steps"])
        return _messages(RECOMMENDATIONS_SYSTEM_PROMPT, build_recommendations_prompt(summary))

    def parse(self, content, request, context) -> List[RecommendedTopic]:
        categories = {c.value for c in RecommendationCategory}
        cleaned: List[RecommendedTopic] = []
        for item in json_list(content, "recommendations", "topics"):
            if not isinstance(item, dict):
                continue
            topic = str(item.get("topic") or "").strip()
            reason = str(item.get("reason") or "").strip()
            category = str(item.get("category") or "").strip()
            if not topic or not reason:
                continue
            if category not in categories:
                category = RecommendationCategory.NEXT_STEPS.value
            cleaned.append(RecommendedTopic(topic=topic, reason=reason, category=category))

        if not cleaned:
            raise ValueError("AI returned no usable recommendations")
        return cleaned[:MAX_RECOMMENDATIONS]

    def fallback(self, request, context) -> List[RecommendedTopic]:
        return generate_rules_based_recommendations(context["paths"], context["steps"])


# ─── Learning title ──────────────────────────────────────────────────────────

WRAPPING_QUOTES_PATTERN = re.compile(r"""^["'](.+)["']$""", re.DOTALL)


class LearningTitleHandler(FeatureHandler):
    name = "learning-title"
    feature_type = FeatureType.QUICK_INSIGHTS
    response_format = ResponseFormat.TEXT
    required_fields = ["topic"]

    def __init__(self, ai_client: AIClient, store=supabase_store):
        super().__init__(ai_client)
        self.store = store

    async def run(self, request: TitleRequest) -> FeatureResult:
        result = await super().run(request)
        if request.path_id and not result.used_fallback:
            try:
                self.store.update_path_title(request.path_id, result.data)
                logger.info(f"Updated title for path {request.path_id}")
            except Exception as e:
                logger.error(f"Error updating path title for {request.path_id}: {e}")
        return result

    def build_messages(self, request: TitleRequest, context):
        return _messages(TITLE_SYSTEM_PROMPT, build_title_prompt(request.topic))

    def parse(self, content, request, context) -> str:
        title = WRAPPING_QUOTES_PATTERN.sub(r"\1", (content or "").strip()).strip()
        if not title:
            raise ValueError("Empty title")
        return title

    def fallback(self, request: TitleRequest, context) -> str:
        return f"{request.topic} Essentials"


# ─── Chat tutor ──────────────────────────────────────────────────────────────

TUTOR_PROMPT_COUNT = 4
TUTOR_APOLOGY = "I apologize, but I'm having trouble responding right now. Please try again in a moment."


class ChatTutorHandler(FeatureHandler):
    """One conversational tutor turn: system prompt, prior turns, then the new message"""
    name = "chat-tutor"
    feature_type = FeatureType.CHAT_TUTOR
    response_format = ResponseFormat.TEXT
    required_fields = ["message"]

    def build_messages(self, request: TutorChatRequest, context):
        return [
            ChatMessage(role="system", content=build_tutor_system_prompt(request.topic, request.content)),
            *request.conversation_history,
            ChatMessage(role="user", content=request.message),
        ]

    def parse(self, content, request, context) -> str:
        reply = (content or "").strip()
        if not reply:
            raise ValueError("No response from AI")
        return reply

    def fallback(self, request, context) -> str:
        return TUTOR_APOLOGY


class TutorPromptsHandler(FeatureHandler):
    name = "chat-tutor-prompts"
    feature_type = FeatureType.CHAT_TUTOR
    response_format = ResponseFormat.JSON

    def build_messages(self, request: TutorPromptsRequest, context):
        system = build_tutor_prompts_system_prompt(request.topic, request.content)
        return _messages(system, TUTOR_PROMPTS_USER_MESSAGE)

    def parse(self, content, request, context) -> List[str]:
        prompts = _clean_strings(json_list(content, "prompts", "questions"))
        if len(prompts) < TUTOR_PROMPT_COUNT:
            raise ValueError(f"Expected {TUTOR_PROMPT_COUNT} prompts, got {len(prompts)}")
        return prompts[:TUTOR_PROMPT_COUNT]

    def fallback(self, request: TutorPromptsRequest, context) -> List[str]:
        return [
            f"What are the key concepts in {request.topic or 'this topic'}?",
            "Can you give me a practical example of how this applies?",
            "How does this connect to what we've learned so far?",
            "What's the most important thing to remember here?",
        ]


# ─── Learning modes ──────────────────────────────────────────────────────────

class LearningModeTransformHandler(FeatureHandler):
    """Re-present step content in one of the learning modes"""
    name = "learning-mode-transform"
    feature_type = FeatureType.DEEP_ANALYSIS
    response_format = ResponseFormat.TEXT
    required_fields = ["mode", "content"]

    def _mode_prompt(self, request: TransformRequest):
        return LEARNING_MODE_PROMPTS.get(request.mode, GENERIC_MODE_PROMPT)

    def chat_options(self, request: TransformRequest) -> Dict[str, Any]:
        _, _, max_tokens, temperature = self._mode_prompt(request)
        return {"max_tokens": max_tokens, "temperature": temperature}

    def build_messages(self, request: TransformRequest, context):
        system = self._mode_prompt(request)[0]
        prompt = build_transform_prompt(
            request.mode, request.content, request.topic, request.title, request.selection
        )
        return _messages(system, prompt)

    def parse(self, content, request, context) -> str:
        transformed = (content or "").strip()
        if not transformed:
            raise ValueError("Empty transformation")
        return transformed

    def fallback(self, request: TransformRequest, context) -> str:
        return (
            f"This view of {request.title or 'this section'} could not be generated right now. "
            f"Re-read the section, pick out its two or three central ideas, and try explaining each "
            f"one with an example of your own."
        )


# ─── Service ─────────────────────────────────────────────────────────────────

class LearningService:
    """Entry point for every learning feature"""

    def __init__(self, ai_client: Optional[AIClient] = None, store=supabase_store):
        self.ai_client = ai_client or AIClient(
            config_service=ModelConfigService(),
            primary=OpenRouterProvider(),
            secondary=OpenAIProvider(),
        )
        self.plan_handler = LearningPlanHandler(self.ai_client)
        self.content_handler = StepContentHandler(self.ai_client, store=store)
        self.questions_handler = RelatedQuestionsHandler(self.ai_client)
        self.insight_handler = InsightHandler(self.ai_client)
        self.margin_notes_handler = MarginNotesHandler(self.ai_client)
        self.nuggets_handler = KnowledgeNuggetsHandler(self.ai_client)
        self.related_topics_handler = RelatedTopicsHandler(self.ai_client)
        self.recommendations_handler = RecommendationsHandler(self.ai_client, store=store)
        self.title_handler = LearningTitleHandler(self.ai_client, store=store)
        self.tutor_handler = ChatTutorHandler(self.ai_client)
        self.tutor_prompts_handler = TutorPromptsHandler(self.ai_client)
        self.transform_handler = LearningModeTransformHandler(self.ai_client)

    async def generate_plan(self, request: PlanRequest) -> FeatureResult:
        return await self.plan_handler.run(request)

    async def generate_step_content(self, request: StepContentRequest) -> FeatureResult:
        return await self.content_handler.run(request)

    async def generate_questions(self, request: QuestionsRequest) -> FeatureResult:
        return await self.questions_handler.run(request)

    async def generate_insight(self, request: InsightRequest) -> FeatureResult:
        return await self.insight_handler.run(request)

    async def generate_margin_notes(self, request: MarginNotesRequest) -> FeatureResult:
        return await self.margin_notes_handler.run(request)

    async def generate_nuggets(self, request: NuggetsRequest) -> FeatureResult:
        return await self.nuggets_handler.run(request)

    async def generate_related_topics(self, request: RelatedTopicsRequest) -> FeatureResult:
        return await self.related_topics_handler.run(request)

    async def get_recommendations(self, request: RecommendationsRequest) -> FeatureResult:
        return await self.recommendations_handler.run(request)

    async def generate_title(self, request: TitleRequest) -> FeatureResult:
        return await self.title_handler.run(request)

    async def chat_with_tutor(self, request: TutorChatRequest) -> FeatureResult:
        return await self.tutor_handler.run(request)

    async def generate_tutor_prompts(self, request: TutorPromptsRequest) -> FeatureResult:
        return await self.tutor_prompts_handler.run(request)

    async def transform_content(self, request: TransformRequest) -> FeatureResult:
        return await self.transform_handler.run(request)
