# Prompts module initialization

# Learning feature prompts
from .learning_prompts import (
    build_plan_prompt,
    build_step_content_prompt,
    build_questions_prompt,
    build_insight_prompt,
    build_margin_notes_prompt,
    build_related_topics_prompt,
    build_title_prompt,
    build_tutor_system_prompt,
    build_tutor_prompts_system_prompt,
    build_transform_prompt
)

__all__ = [
    'build_plan_prompt',
    'build_step_content_prompt',
    'build_questions_prompt',
    'build_insight_prompt',
    'build_margin_notes_prompt',
    'build_related_topics_prompt',
    'build_title_prompt',
    'build_tutor_system_prompt',
    'build_tutor_prompts_system_prompt',
    'build_transform_prompt'
]
