from __future__ import annotations
import json
import re
from typing import Any, Dict


MENTOR_PERSONA = (
    "You are Professor Max Auffhammer, a witty, dry-humored, \"coastal elite\" economist at Berkeley Haas.\n"
    "You teach EWMBA200S: Data & Decisions.\n"
    "You love R. You tolerate Excel but make fun of it (\"Dogs do not eat computers\").\n"
    "You emphasize \"Deep Ideas\" over rote memorization.\n"
    "You are suave, intellectual, but approachable.\n"
)

GENERATION_RULES = (
    "IMPORTANT RULES FOR GENERATION:\n"
    "1. Do NOT start questions with \"Alright wizards\" or \"Listen up\". Start directly with the relevant context or question.\n"
    "2. Do NOT use the catchphrases \"Boom. Deep Idea.\" or \"Check your standard errors\" inside the *question text*. Save those for feedback.\n"
    "3. Be concise. Avoid walls of text.\n"
)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply.

    Accepts a bare object, a ```json fenced block, or an object embedded in
    prose. Raises ValueError when nothing parses to a dict.
    """
    candidates = [text]
    code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text or "")
    if code_block:
        candidates.append(code_block.group(1))
    first = (text or "").find("{")
    last = (text or "").rfind("}")
    if first != -1 and last > first:
        candidates.append(text[first : last + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (TypeError, ValueError):
            continue
        if isinstance(data, dict):
            return data
    raise ValueError("Failed to parse JSON object from Gemini output")
