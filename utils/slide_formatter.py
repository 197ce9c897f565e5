"""
Split generated markdown into presentation slides.

Fenced code blocks are atomic: each becomes exactly one code slide.
Text is split on blank lines, and paragraphs over the character budget
are packed sentence by sentence into slides under the budget.
"""

import re
from typing import List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from models.learning_models import SlideContent

SLIDE_CHAR_LIMIT = 600
PREVIEW_LINES = 2

CODE_FENCE_PATTERN = re.compile(r"```([^\n`]*)\n([\s\S]*?)```")
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n\s*\n")

# Sentence ends first, then words, then characters for unbroken tokens
SLIDE_SEPARATORS = [r"(?<=[.!?]) ", " ", ""]


def build_slide_splitter(limit: int = SLIDE_CHAR_LIMIT) -> RecursiveCharacterTextSplitter:
    """Splitter whose chunks are strictly shorter than limit"""
    return RecursiveCharacterTextSplitter(
        chunk_size=limit - 1,
        chunk_overlap=0,
        separators=SLIDE_SEPARATORS,
        is_separator_regex=True,
        keep_separator="end",
    )


def split_into_slides(markdown_text: str, limit: int = SLIDE_CHAR_LIMIT) -> List[SlideContent]:
    """
    Args:
        markdown_text: Generated step content (markdown).
        limit: Character budget per text slide; every text slide is shorter.
    Returns:
        Slides in source order. Never empty: input that yields no slides
        comes back as a single text slide holding the original text.
    """
    text = markdown_text or ""
    splitter = build_slide_splitter(limit)
    slides: List[SlideContent] = []
    cursor = 0

    for match in CODE_FENCE_PATTERN.finditer(text):
        slides.extend(_text_slides(text[cursor:match.start()], limit, splitter))
        slides.append(_code_slide(match.group(1), match.group(2)))
        cursor = match.end()

    slides.extend(_text_slides(text[cursor:], limit, splitter))

    if not slides:
        return [SlideContent(type="text", content=text)]
    return slides


def _code_slide(language_tag: str, body: str) -> SlideContent:
    code = body.rstrip("\n")
    language: Optional[str] = language_tag.strip() or None
    preview = "\n".join(code.strip("\n").split("\n")[:PREVIEW_LINES])
    return SlideContent(type="code", content=code, language=language, preview=preview)


def _text_slides(segment: str, limit: int, splitter: RecursiveCharacterTextSplitter) -> List[SlideContent]:
    slides = []
    for paragraph in PARAGRAPH_BREAK_PATTERN.split(segment):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if len(paragraph) < limit:
            slides.append(SlideContent(type="text", content=paragraph))
            continue
        for chunk in splitter.split_text(paragraph):
            if chunk.strip():
                slides.append(SlideContent(type="text", content=chunk.strip()))
    return slides
