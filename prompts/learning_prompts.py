"""
Prompt templates for LearnFlow generation features.
Each builder returns the user prompt; system messages are module constants.
"""

from typing import Optional

from models.learning_models import LearningMode


PLAN_SYSTEM_PROMPT = (
    "You are an expert educator creating highly focused learning plans. "
    "Your plans should always be extremely specific to the requested topic "
    "without introducing unrelated concepts. YOU MUST RETURN VALID JSON."
)

CONTENT_SYSTEM_PROMPT = (
    "You are an expert educator creating engaging, comprehensive learning content "
    "with well-structured paragraphs and examples. Your writing is informative yet "
    "conversational, with clear organization and practical applications."
)

QUESTIONS_SYSTEM_PROMPT = (
    "You are an expert educator creating thoughtful questions to explore topics in depth "
    "based on specific content. YOU MUST RETURN VALID JSON WITHOUT TRAILING COMMAS OR "
    "OTHER SYNTAX ERRORS."
)

TITLE_SYSTEM_PROMPT = "You are an expert educator creating concise, professional titles for learning content."

NUGGETS_SYSTEM_PROMPT = (
    "You are an AI assistant that generates interesting knowledge nuggets about educational topics. "
    "Generate 5 short, engaging facts or insights about the given topic that would be interesting "
    "to someone who is about to learn about it in depth. Each nugget should be concise "
    "(under 100 characters) and provide a unique insight or perspective. "
    'Return JSON of the form {"nuggets": ["...", "..."]}.'
)

RECOMMENDATIONS_SYSTEM_PROMPT = """You are a learning recommendations engine for a product called LearnFlow.
Generate up to 5 actionable learning topic suggestions tailored to the user's recent activity and skill gaps.
Each suggestion MUST be a JSON object with fields: topic (short title), reason (one sentence), category (one of getting_started, continue_learning, next_steps, complementary).
Respond ONLY with a valid JSON array of objects."""

QUESTION_CONTENT_LIMIT = 4000


def build_plan_prompt(topic: str) -> str:
    """Build prompt for a 10-step learning plan"""
    return f"""You are an expert educator creating a highly focused and specialized learning plan for the topic: "{topic}".

Create a comprehensive 10-step learning plan that will guide someone from beginner to advanced level SPECIFICALLY on the topic of {topic}.
The plan should be laser-focused on {topic} without including tangential or loosely related topics.

For each step, provide:
1. A clear, concise title (5-7 words max) that directly relates to {topic}
2. A brief one-sentence description of what the learner will understand about {topic} after completing this step

Each step should build logically on the previous one, from fundamentals to advanced concepts,
all while staying strictly within the boundaries of {topic}.

OUTPUT FORMAT (JSON - no markdown formatting):
{{
  "steps": [
    {{
      "title": "Introduction to [Specific Aspect of {topic}]",
      "description": "Understand the core principles of {topic} and essential terminology."
    }}
  ]
}}

Make sure to include exactly 10 steps."""


def build_step_content_prompt(
    topic: str,
    title: str,
    step_number: Optional[int] = None,
    total_steps: Optional[int] = None
) -> str:
    """Build prompt for one step's long-form content"""
    position = f"part {step_number or '?'} of {total_steps or '?'}"

    return f"""You are an expert educator creating in-depth, engaging educational content about "{topic}".

This is {position} of a learning path about {topic}, titled: "{title}"

Create rich, informative educational content that deeply explores this topic. Your content should be:
1. COMPREHENSIVE: Cover the subject thoroughly with clear explanations
2. ENGAGING: Use a conversational tone that draws the reader in
3. WELL-STRUCTURED: Organize with clear sections, paragraphs, and transitions
4. PRACTICAL: Include real-world examples and applications where relevant

Content structure:
- Begin with an engaging introduction that clearly states what this section covers
- Develop 4-6 distinct points or concepts, each in its own paragraph(s)
- For each major concept explain the core idea, give an example or analogy, and connect it to {topic}
- Address common misconceptions or challenges
- End with a concise summary of key takeaways

Formatting requirements:
- Markdown with blank lines between paragraphs
- Aim for ~800-1000 words
- Do NOT mention word counts or describe the content itself

Stay precisely focused on "{title}" as it relates to {topic}."""


def build_questions_prompt(content: str, topic: str, title: str) -> str:
    """Build prompt for 5 follow-up questions grounded in step content"""
    return f"""You are an expert educator helping students explore a topic in more depth.

Below is content about "{topic}" with the title "{title}".

CONTENT:
{content[:QUESTION_CONTENT_LIMIT]}

Based on this specific content, generate exactly 5 thought-provoking questions that would help a learner explore this topic more deeply.

Requirements:
1. Each question addresses an important concept from THIS content
2. Questions encourage critical thinking, not just recall
3. Concise but specific (15-30 words each), ending with a question mark
4. Each question explores a different aspect of the content

OUTPUT FORMAT (JSON):
{{
  "questions": ["First question?", "Second question?", "Third question?", "Fourth question?", "Fifth question?"]
}}"""


def build_insight_system_prompt(topic: str) -> str:
    return f"You are an expert educator creating concise and insightful explanations about topics related to {topic}."


def build_insight_prompt(topic: str, selected_text: Optional[str] = None, question: Optional[str] = None) -> str:
    """Question mode when a question is given, otherwise explain the highlighted text"""
    if question:
        related = (
            f'This question relates to the following text:\n"""\n{selected_text}\n"""'
            if selected_text else
            "Answer this question in the context of the broader topic."
        )
        return f"""You are an expert educator specialized in the topic of "{topic}".

A learner has a specific question about the content they're studying:
"{question}"

{related}

Provide a clear, educational response (150-250 words maximum).
Focus on answering their question while providing context from the broader topic of {topic}.
Include a concrete example or application if relevant."""

    return f"""You are an expert educator specialized in the topic of "{topic}".

A learner has highlighted the following text while studying:
\"\"\"
{selected_text}
\"\"\"

Provide a concise but insightful explanation (100-150 words maximum) that:
1. Clarifies any complex concepts mentioned
2. Adds context if needed
3. Explains why this matters in the broader context of {topic}
4. Gives a concrete example if applicable"""


def build_margin_notes_system_prompt(topic: str) -> str:
    return f"You are an expert educator creating concise and insightful margin notes about topics related to {topic}."


def build_margin_notes_prompt(paragraphs: list, topic: str) -> str:
    """Build one prompt covering up to 3 paragraphs"""
    numbered = "\n\n".join(
        f'PARAGRAPH {i + 1}:\n"""\n{p}\n"""' for i, p in enumerate(paragraphs)
    )

    return f"""You are an expert educator creating insightful margin notes for learning content about "{topic}".

{numbered}

For EACH paragraph, write a short note (50-80 words) that provides ONE of:
1. An interesting fact that extends the paragraph
2. A practical application of the concept
3. A clarification of a potentially confusing aspect
4. A "did you know" insight that is relevant but not mentioned
5. A connection to another important concept in this field

Do not summarize the paragraph - add new information or perspective.

OUTPUT FORMAT (JSON):
{{
  "notes": [
    {{"paragraph_index": 1, "insight": "..."}}
  ]
}}"""


def build_nuggets_prompt(topic: str) -> str:
    return f"Topic: {topic}"


def build_related_topics_prompt(title: str, description: Optional[str] = None) -> str:
    """Build prompt for related follow-on project topics"""
    description_part = f' and description: "{description}"' if description else ""

    return f"""You are an expert learning assistant. Based on the following project title: "{title}"{description_part},
suggest exactly 10 related topics that someone interested in this subject might want to explore as separate learning projects.

These should be:
- Related but distinct topics that expand knowledge in the domain
- Specific enough to be actionable project titles
- Varied in scope and difficulty

For each topic, provide:
1. A concise, engaging title (3-8 words)
2. A brief description of what the project would cover (1-2 sentences)
3. A difficulty level (beginner, intermediate, advanced)
4. A relevance score between 0.7 and 1.0

OUTPUT FORMAT (JSON):
{{
  "topics": [
    {{
      "id": "unique-id",
      "title": "Topic Title",
      "description": "What this project would cover and why it's valuable",
      "difficulty": "intermediate",
      "relevance": 0.9
    }}
  ]
}}"""


def build_recommendations_prompt(user_summary: str) -> str:
    return f"User learning summary:\n\n{user_summary}\n\nReturn JSON array now."


def build_title_prompt(topic: str) -> str:
    """Build prompt for a short learning path title"""
    return f"""You are an expert educator creating a catchy, professional title for a learning path.

The learning path is about: "{topic}"

The title should be:
1. Professional and educational
2. No more than 5-7 words
3. Clearly related to {topic}
4. NOT contain words like "mastering" or "journey" or "introduction"
5. NOT contain the phrase "Learning Path"

Respond with ONLY the title text, nothing else."""


# Chat tutor
TUTOR_PROMPTS_USER_MESSAGE = "Generate 4 conversation starters now."
TUTOR_SNIPPET_CHARS = 500


def build_tutor_system_prompt(topic: str, content: Optional[str] = None) -> str:
    """Short conversational replies, grounded in the step content when given"""
    prompt = f"""You are a friendly AI tutor helping a student learn about "{topic or 'various topics'}".

CRITICAL RULES:
- Keep responses SHORT (2-4 sentences max)
- Be conversational and encouraging
- Use simple, clear language
- One concept at a time
- Ask ONE follow-up question

Approach:
1. Answer the student's question directly
2. Add one short example or analogy if it helps
3. Check understanding with a follow-up question

Never:
- Write long explanations or lists
- Introduce several new concepts at once
- Repeat what the student already said

Remember: You're having a conversation, not giving a lecture. Be helpful but concise."""

    if content:
        prompt += f"\n\nCurrent learning content:\n{content}"
    return prompt


def build_tutor_prompts_system_prompt(topic: str, content: Optional[str] = None) -> str:
    snippet = (content or "")[:TUTOR_SNIPPET_CHARS] or "No content provided"
    return f"""You are an expert tutor. Based on the following learning content, generate exactly 4 specific, engaging conversation starter questions.

Topic: "{topic or 'this topic'}"
Content snippet: "{snippet}"

Requirements:
1. Questions must be specific to THIS content, not generic
2. Each question should explore a different aspect (understanding, examples, connections, practical application)
3. Keep questions concise but thought-provoking
4. Make them conversational and engaging

Respond with ONLY a JSON array of 4 question strings"""


# Learning modes: mode -> (system prompt, instructions, max_tokens, temperature)
LEARNING_MODE_PROMPTS = {
    LearningMode.MENTAL_MODELS: (
        "Extract 2-3 key mental models. Be extremely concise.",
        "Extract 2-3 mental models. For each: **Name** - What it is (1 sentence) - How it works (1 sentence).\n"
        "Maximum 200 words total.",
        300,
        0.5,
    ),
    LearningMode.SOCRATIC: (
        "Create 4-5 thought-provoking questions. Be concise.",
        "Create 4-5 questions that help learners discover insights. Questions should be open-ended "
        "and reference specific concepts from the content.\nMaximum 150 words total.",
        250,
        0.6,
    ),
    LearningMode.WORKED_EXAMPLES: (
        "Create 1-2 practical examples. Be brief.",
        "Create 1-2 examples showing how to apply concepts. For each: **Example: [Title]** - "
        "Scenario (1-2 sentences) - Solution (2-3 steps) - Takeaway (1 sentence).\nMaximum 200 words total.",
        300,
        0.6,
    ),
    LearningMode.VISUAL_SUMMARY: (
        "Create a brief visual summary with clear structure.",
        "Create a visual summary: **Key Concepts** (2-3 with 1-sentence definitions) - **Process Flow** "
        "(if applicable, steps with →) - **Relationships** (how concepts connect).\nMaximum 200 words total.",
        300,
        0.5,
    ),
    LearningMode.ACTIVE_PRACTICE: (
        "Create 1-2 practical exercises. Be brief.",
        "Create 1-2 exercises. For each: **Exercise: [Name]** - Task (1 sentence) - Steps (1-2-3) - "
        "Success check (1 sentence).\nMaximum 200 words total.",
        300,
        0.6,
    ),
    LearningMode.STORY_MODE: (
        "Tell a brief story that illustrates the concepts.",
        "Create a short story: **Story: [Title]** - Situation (1-2 sentences) - What happens "
        "(2-3 sentences showing concepts) - Lesson (1 sentence).\nMaximum 200 words total.",
        300,
        0.7,
    ),
}

GENERIC_MODE_PROMPT = (
    "You are an expert educator helping learners understand content.",
    "Transform this content into a helpful learning format.",
    2000,
    0.6,
)


def build_transform_context(
    content: str,
    topic: Optional[str] = None,
    title: Optional[str] = None,
    selection: Optional[str] = None
) -> str:
    """Shared preamble: topic, title, the markdown and an optional focus excerpt"""
    context = (
        f"Topic: {topic or 'General'}\n"
        f"Title: {title or 'Section'}\n\n"
        f'Learning content (markdown):\n"""\n{content}\n"""\n\n'
    )
    if selection:
        context += f'Focus on this selected excerpt when relevant:\n"""\n{selection}\n"""\n\n'
    return context


def build_transform_prompt(mode: str, content: str, topic=None, title=None, selection=None) -> str:
    instructions = LEARNING_MODE_PROMPTS.get(mode, GENERIC_MODE_PROMPT)[1]
    return build_transform_context(content, topic, title, selection) + instructions
