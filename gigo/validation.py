"""
Input Validation
================

Prompt size checks and log sanitization. Prompt text and API keys never reach
the logs unredacted.
"""

import re


class InputValidator:
    """Security-focused input validation"""

    MAX_PROMPT_LENGTH = 500000  # 500k chars max

    @classmethod
    def validate_prompt(cls, prompt: str) -> tuple[bool, str]:
        """Validate a prompt before it is sent to any provider"""
        if not prompt or not prompt.strip():
            return False, "Invalid prompt: must be a non-empty string"

        if len(prompt) > cls.MAX_PROMPT_LENGTH:
            return False, f"Prompt exceeds maximum length of {cls.MAX_PROMPT_LENGTH}"

        return True, ""

    @classmethod
    def sanitize_for_logging(cls, text: str, max_len: int = 100) -> str:
        """Sanitize text for safe logging (no sensitive data)"""
        if not text:
            return ""
        sanitized = text[:max_len]
        sanitized = re.sub(
            r"(sk-|sk-ant-|api[_-]?key|bearer\s+)[a-zA-Z0-9\-_=]{10,}",
            "[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )
        return sanitized + ("..." if len(text) > max_len else "")
