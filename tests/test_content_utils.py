import unittest

from models.learning_models import MarginNote
from utils.content_utils import clean_meta_commentary, match_notes_to_paragraphs


class TestCleanMetaCommentary(unittest.TestCase):
    def test_removes_word_count_markers(self):
        text = "Intro text.\n\n(Word count: 812)\n\n### Word Count: 812\nBody text."
        cleaned = clean_meta_commentary(text)

        self.assertNotIn("812", cleaned)
        self.assertIn("Intro text.", cleaned)
        self.assertIn("Body text.", cleaned)

    def test_removes_meta_lines_and_collapses_newlines(self):
        text = "Real content.\n\n\n\nThis content is designed for beginners.\nMore content."
        cleaned = clean_meta_commentary(text)

        self.assertNotIn("designed for beginners", cleaned)
        self.assertNotIn("\n\n\n", cleaned)
        self.assertTrue(cleaned.startswith("Real content."))

    def test_empty_passthrough(self):
        self.assertEqual(clean_meta_commentary(""), "")


class TestMatchNotesToParagraphs(unittest.TestCase):
    def test_matches_first_containing_paragraph(self):
        paragraphs = [
            "Variables hold values that a program can change over time.",
            "Functions group instructions so they can be reused.",
        ]
        note = MarginNote(id="note-1", paragraph="FUNCTIONS group instructions", insight="...")

        matched = match_notes_to_paragraphs([note], paragraphs)

        self.assertEqual(matched, {1: note})

    def test_paragraph_holds_at_most_one_note(self):
        paragraphs = ["Shared opening words here.", "Shared opening words here, again."]
        first = MarginNote(id="note-1", paragraph="Shared opening words", insight="a")
        second = MarginNote(id="note-2", paragraph="Shared opening words", insight="b")

        matched = match_notes_to_paragraphs([first, second], paragraphs)

        self.assertEqual(matched[0], first)
        self.assertEqual(matched[1], second)

    def test_unmatched_note_is_dropped(self):
        matched = match_notes_to_paragraphs(
            [MarginNote(id="note-1", paragraph="Nothing like this", insight="x")],
            ["Completely different text."],
        )
        self.assertEqual(matched, {})

    def test_uses_first_fifty_characters(self):
        long_fragment = "a" * 50 + "DIFFERENT TAIL"
        paragraphs = ["a" * 60 + " original tail"]

        matched = match_notes_to_paragraphs(
            [MarginNote(id="note-1", paragraph=long_fragment, insight="x")], paragraphs
        )

        self.assertIn(0, matched)


if __name__ == "__main__":
    unittest.main()
