"""Output guards for LLM responses.

These guards enforce the absolute rules:
- JSON output is a bare object or array, no markdown or prose around it
- Empty responses are reported, never parsed into an empty record
- Output truncated at max_tokens is repaired when a clean cut point exists
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Tuple

from .base import LLMEmptyResponseError, LLMJSONError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON Output Guard
# ---------------------------------------------------------------------------

class JSONOutputGuard:
    """Ensure LLM output is valid JSON starting with '{' or '['."""

    @staticmethod
    def system_prompt_suffix() -> str:
        return (
            "\n\nOUTPUT FORMAT: Return JSON only. "
            "Do not wrap it in ```json or any other markdown. "
            "No explanations or comments. The first character must be { or [."
        )

    @staticmethod
    def strip_code_fence(text: str) -> str:
        """Remove a surrounding ```lang ... ``` wrapper if present."""
        text = text.strip()
        if text.startswith("```"):
            first_nl = text.find("\n")
            if first_nl > 0:
                text = text[first_nl + 1:]
            else:
                text = text[3:]
            if text.rstrip().endswith("```"):
                text = text.rstrip()[:-3].rstrip()
        return text

    @staticmethod
    def enforce(raw_text: Optional[str], stop_reason: str = "") -> Any:
        """Parse raw LLM text into JSON, with repair for truncated output."""
        if raw_text is None or not raw_text.strip():
            raise LLMEmptyResponseError("LLM returned an empty response")

        text = JSONOutputGuard.strip_code_fence(raw_text)

        # Find the first '{' or '['
        positions = [p for p in (text.find("{"), text.find("[")) if p >= 0]
        if not positions:
            raise LLMJSONError(
                "LLM response does not contain a JSON object or array",
                raw_text=raw_text,
            )
        text = text[min(positions):]

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            if stop_reason in ("max_tokens", "length", "MAX_TOKENS"):
                logger.warning(
                    "Response truncated at max_tokens (%d chars). Attempting repair.",
                    len(text),
                )
                repaired = JSONOutputGuard._repair_truncated(text)
                if repaired is not None:
                    return repaired

            # Fallback: try regex extraction
            return JSONOutputGuard._try_extract(raw_text)

    @staticmethod
    def _repair_truncated(text: str) -> Optional[Any]:
        """Repair JSON truncated at max_tokens by closing open brackets."""
        in_string = False
        escape = False
        stack: List[str] = []
        trim_points: List[Tuple[int, str, str]] = []

        for i, ch in enumerate(text):
            if escape:
                escape = False
                continue
            if ch == '\\' and in_string:
                escape = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue

            if ch in "{[":
                stack.append("}" if ch == "{" else "]")
            elif ch in "}]":
                if not stack:
                    break
                stack.pop()
                trim_points.append((i, ch, "".join(reversed(stack))))
            elif ch == ',':
                trim_points.append((i, ch, "".join(reversed(stack))))

        for pos, ch, suffix in reversed(trim_points[-30:]):
            sub = text[:pos] if ch == ',' else text[:pos + 1]
            try:
                result = json.loads(sub + suffix)
                logger.info("Repaired truncated JSON at pos %d", pos)
                return result
            except json.JSONDecodeError:
                continue
        return None

    @staticmethod
    def _try_extract(text: str) -> Any:
        """Last-resort extraction strategies."""
        patterns = [r'```json\s*(.*?)\s*```', r'```\s*(.*?)\s*```', r'\{.*\}', r'\[.*\]']
        for pattern in patterns:
            match = re.search(pattern, text, re.DOTALL)
            if match:
                try:
                    candidate = match.group(1) if '```' in pattern else match.group(0)
                    return json.loads(candidate)
                except (json.JSONDecodeError, IndexError):
                    continue

        raise LLMJSONError(
            f"Could not extract JSON from LLM response. First 200 chars: {text[:200]}",
            raw_text=text,
        )
