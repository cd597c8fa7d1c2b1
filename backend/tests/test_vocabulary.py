"""Tests for conversation filtering and strict vocabulary parsing."""

import json

import pytest

from polyglot.errors import DataFormatError
from polyglot.models import Role, Turn, VocabularyItem
from polyglot.vocabulary import (
    dump_vocabulary,
    parse_vocabulary,
    qualifying_turns,
    render_conversation,
    split_conversation_text,
)


def _turns(*pairs):
    return [Turn(role=role, text=text) for role, text in pairs]


class TestConversation:

    def test_error_replies_are_excluded(self):
        turns = _turns(
            ("user", "I goed to the market"),
            ("model", "Sorry, I couldn't process that. Please try again."),
            ("model", "You went to the market! What did you buy? [?]"),
        )

        kept = qualifying_turns(turns)

        assert [t.text for t in kept] == ["I goed to the market", "You went to the market! What did you buy? [?]"]

    def test_user_turns_starting_with_sorry_are_kept(self):
        turns = _turns(("user", "Sorry, I am late"))

        assert qualifying_turns(turns) == turns

    def test_render(self):
        turns = _turns(("user", "Hello"), ("model", "Hi there"))

        assert render_conversation(turns) == "user: Hello\nmodel: Hi there"

    def test_turn_accepts_content_shape(self):
        turn = Turn.model_validate({"role": "model", "parts": [{"text": "Hello "}, {"text": "again"}]})

        assert turn.role == Role.MODEL
        assert turn.text == "Hello again"


class TestSplitConversationText:

    def test_continuation_lines_join_previous_turn(self):
        turns = split_conversation_text("user: Hello\nhow are you today\nmodel: Fine, thanks!")

        assert turns == _turns(("user", "Hello\nhow are you today"), ("model", "Fine, thanks!"))

    def test_leading_text_without_role_is_a_user_turn(self):
        turns = split_conversation_text("Good morning\nmodel: Good morning to you")

        assert [t.role for t in turns] == [Role.USER, Role.MODEL]

    def test_blank_lines_and_empty_turns_are_skipped(self):
        turns = split_conversation_text("\n\nuser:\n\nmodel: Hi\n\n")

        assert turns == _turns(("model", "Hi"))

    def test_role_prefix_must_start_the_line(self):
        turns = split_conversation_text("user: I said model: yes")

        assert turns == _turns(("user", "I said model: yes"))


class TestParseVocabulary:

    def test_valid_array(self):
        raw = json.dumps([
            {"word": "market", "synonyms": ["bazaar", "fair"], "arabicMeanings": ["سوق"]},
        ])

        items = parse_vocabulary(raw)

        assert items == [VocabularyItem(word="market", synonyms=["bazaar", "fair"], arabicMeanings=["سوق"])]

    def test_code_fence_is_tolerated(self):
        raw = '```json\n[{"word": "run", "synonyms": [], "arabicMeanings": ["يركض"]}]\n```'

        assert parse_vocabulary(raw)[0].word == "run"

    def test_empty_array(self):
        assert parse_vocabulary(" [] ") == []

    @pytest.mark.parametrize("raw", [
        "",
        "not json at all",
        '[{"word": "run", "synonyms": [}]',
    ])
    def test_invalid_json_raises(self, raw):
        with pytest.raises(DataFormatError):
            parse_vocabulary(raw)

    @pytest.mark.parametrize("raw", [
        '{"word": "run", "synonyms": [], "arabicMeanings": []}',
        '[{"word": "run", "synonyms": []}]',
        '[{"word": "run", "synonyms": "jog", "arabicMeanings": []}]',
        '[{"word": 7, "synonyms": [], "arabicMeanings": []}]',
        '["run", "walk"]',
    ])
    def test_wrong_shape_raises(self, raw):
        with pytest.raises(DataFormatError):
            parse_vocabulary(raw)

    def test_error_keeps_detail_out_of_user_message(self):
        with pytest.raises(DataFormatError) as excinfo:
            parse_vocabulary("oops")

        assert "JSON" in excinfo.value.detail
        assert "JSON" not in excinfo.value.user_message

    def test_dump_keeps_arabic_unescaped(self):
        text = dump_vocabulary([VocabularyItem(word="book", synonyms=["volume"], arabicMeanings=["كتاب"])])

        assert "كتاب" in text
        assert json.loads(text) == [{"word": "book", "synonyms": ["volume"], "arabicMeanings": ["كتاب"]}]
