"""Prompts for the resolution oracle.

The conservative rule ("when in doubt, VOID") is part of the resolution
contract: a wrong YES/NO moves user funds, a VOID refunds everyone.
"""

PROMPT_SOURCE_CHARS = 30_000

SYSTEM_PROMPT = """You are the resolution oracle for a prediction market platform called DegenBets. Your job is to determine whether a prediction market question has resolved YES, NO, or should be VOIDED.

Rules:
1. Analyze the provided source text carefully.
2. Only resolve YES or NO if the source text provides clear, definitive evidence.
3. If the source text is ambiguous, unavailable, or the event hasn't clearly occurred/not occurred, resolve VOID.
4. Be conservative - when in doubt, VOID.
5. Provide a confidence score from 0.0 to 1.0.

Respond ONLY with valid JSON in this exact format:
{"decision": "yes" | "no" | "void", "confidence": 0.0-1.0, "reasoning": "brief explanation"}"""

_USER_TEMPLATE = """Market Question: {question}

Resolution Source URL: {source_url}

Extracted Source Text (may be truncated):
---
{source_text}
---

Based on the source text above, has the market question resolved YES, NO, or should it be VOIDED? Respond with JSON only."""


def build_user_prompt(question: str, source_url: str, source_text: str) -> str:
    return _USER_TEMPLATE.format(
        question=question,
        source_url=source_url,
        source_text=source_text[:PROMPT_SOURCE_CHARS],
    )
