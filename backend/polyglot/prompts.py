from __future__ import annotations
from typing import Any, Dict, Optional

from .models import Difficulty

# Inline token the tutor appends to a reply that contains a correction
CORRECTION_MARKER = "[?]"

MAX_VOCABULARY_WORDS = 10


_DIFFICULTY_GUIDANCE: Dict[Difficulty, str] = {
	Difficulty.BEGINNER: "Use short, simple sentences and very common words. Speak slowly and kindly.",
	Difficulty.INTERMEDIATE: "Use everyday vocabulary with some idioms and a mix of simple and complex sentences.",
	Difficulty.ADVANCED: "Use natural, rich language, including idioms, nuanced vocabulary and complex structures.",
}


def strip_marker(text: str) -> str:
	return text.replace(CORRECTION_MARKER, "").strip()


def build_system_instruction(
	language: str,
	difficulty: Difficulty,
	context_text: Optional[str] = None,
	scenario_prompt: Optional[str] = None,
) -> str:
	if context_text:
		return (
			f"You are Poly, a friendly {language} tutor. The learner has shared a text and wants to discuss it in {language}.\n"
			"Answer questions about the text, ask the learner simple comprehension questions, and explain difficult words.\n"
			f"Learner level: {difficulty.value}. {_DIFFICULTY_GUIDANCE[difficulty]}\n"
			f"If the learner makes a grammar mistake, gently correct it and end that reply with {CORRECTION_MARKER}.\n"
			"Keep every reply under 80 words.\n\n"
			f"Here is the text:\n---\n{context_text}\n---"
		)
	instruction = (
		f"You are Poly, a friendly and patient {language} conversation partner for a language learner.\n"
		f"Always reply in {language}. Keep replies short (2-4 sentences) and end with a question that keeps the conversation going.\n"
		f"Learner level: {difficulty.value}. {_DIFFICULTY_GUIDANCE[difficulty]}\n"
		"If the learner makes a grammar or vocabulary mistake, first give the corrected sentence with a one-line explanation, "
		f"then continue the conversation, and end that reply with {CORRECTION_MARKER}."
	)
	if scenario_prompt:
		instruction += (
			"\n\nRole-play scenario: stay in character for the whole conversation.\n"
			f"{scenario_prompt}"
		)
	return instruction


VOCABULARY_SCHEMA: Dict[str, Any] = {
	"type": "ARRAY",
	"items": {
		"type": "OBJECT",
		"properties": {
			"word": {"type": "STRING"},
			"synonyms": {"type": "ARRAY", "items": {"type": "STRING"}},
			"arabicMeanings": {"type": "ARRAY", "items": {"type": "STRING"}},
		},
		"required": ["word", "synonyms", "arabicMeanings"],
	},
}


def vocabulary_prompt(conversation_text: str) -> str:
	return (
		f"From the following conversation, extract up to {MAX_VOCABULARY_WORDS} key English vocabulary words. "
		"For each word, provide the word, up to 3 English synonyms, and all corresponding Arabic meanings. "
		"Focus on non-trivial words.\n\n"
		"Return ONLY a JSON array of objects with keys: word (string), synonyms (array of strings), arabicMeanings (array of strings).\n\n"
		f"Conversation:\n{conversation_text}"
	)


def grammar_prompt(user_sentence: str, ai_correction: str) -> str:
	return (
		f'A language learner wrote: "{user_sentence}". '
		f'The AI tutor provided a correction and a brief explanation: "{strip_marker(ai_correction)}". '
		"Please provide a more detailed but easy-to-understand explanation of the specific grammar rule involved. "
		"Use simple language, give 2-3 clear example sentences, and keep it concise. Format the response with markdown."
	)


def challenge_prompt(word: str, sentence: str) -> str:
	return (
		f'A language learner was challenged to use the word "{word}" in a sentence. They wrote: "{sentence}".\n'
		"Please provide feedback. Is the word used correctly? Is the sentence grammatically correct? "
		"If there are mistakes, give the corrected sentence and a short explanation. "
		"Be encouraging and keep the feedback brief. Format the response with markdown."
	)


def word_analysis_prompt(word: str) -> str:
	return (
		f'Provide a simple analysis for the English word "{word}". '
		"For each part of speech the word can take (noun, verb, adjective, adverb, ...), give:\n"
		"- the part of speech as a heading\n"
		"- a short, learner-friendly definition\n"
		"- one example sentence\n"
		"Skip parts of speech the word does not have. Format the response with markdown."
	)


def word_family_prompt(word: str) -> str:
	return (
		f'List words belonging to the same word family as "{word}" '
		"(for example its noun, verb, adjective and adverb forms, and common prefixed forms). "
		"For each word give the part of speech and one short example sentence. "
		"Only include real, commonly used English words. Format the response as a markdown list."
	)
