import re
from typing import Dict, List

from models.learning_models import MarginNote

NOTE_MATCH_PREFIX = 50

# Whole-line markers first, then inline "(Word count: N)"
WORD_COUNT_PATTERNS = [
    re.compile(r"^#{1,6}\s*word\s+count.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^word\s+count\s*:\s*\d+.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\(?\s*word\s+count\s*:\s*\d+\s*\)?", re.IGNORECASE),
]

META_LINE_PATTERNS = [
    re.compile(r"^This\s+content\s+is.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^In\s+summary.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Note\s*:\s*This\s+content.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^This\s+section\s+contains.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^The\s+above\s+content.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Content\s+generated\s+for.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Word\s+count\s+target.*$", re.IGNORECASE | re.MULTILINE),
]


def clean_meta_commentary(content: str) -> str:
    """
    Strip word-count markers and model meta-commentary lines from generated content.
    """
    if not content:
        return content

    cleaned = content
    for pattern in WORD_COUNT_PATTERNS + META_LINE_PATTERNS:
        cleaned = pattern.sub("", cleaned)

    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def match_notes_to_paragraphs(notes: List[MarginNote], paragraphs: List[str]) -> Dict[int, MarginNote]:
    """
    Attach each note to the first paragraph containing the start of the
    note's paragraph fragment (case-insensitive).

    Returns:
        Dict of paragraph index -> note. A paragraph holds at most one note;
        notes with no free matching paragraph are dropped.
    """
    lowered = [p.lower() for p in paragraphs]
    matched: Dict[int, MarginNote] = {}

    for note in notes:
        fragment = note.paragraph[:NOTE_MATCH_PREFIX].lower()
        for index, text in enumerate(lowered):
            if index in matched:
                continue
            if fragment in text:
                matched[index] = note
                break

    return matched
