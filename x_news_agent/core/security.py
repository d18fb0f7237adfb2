"""
Security utilities: optional API key auth for control routes, rate limiting,
and prompt-injection scrubbing for untrusted post text.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from slowapi import Limiter
from slowapi.util import get_remote_address

from x_news_agent.core.config import Settings, get_settings

# ── Rate limiter (attached to FastAPI app in main.py) ───────
limiter = Limiter(key_func=get_remote_address)

# ── API Key authentication ──────────────────────────────────
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_control_key(
    api_key: Annotated[str | None, Security(_api_key_header)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Require X-API-Key only when CONTROL_API_KEY is configured."""
    if not settings.control_auth_enabled:
        return None
    if not api_key or not secrets.compare_digest(api_key, settings.control_api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing API key",
        )
    return api_key


# ── Content sanitisation (OWASP LLM01 - Prompt Injection) ───
def sanitize_for_display(text: str) -> str:
    """Strip potential prompt injection patterns from untrusted text."""
    dangerous_patterns = [
        "SYSTEM:", "ASSISTANT:", "USER:", "```system",
        "<|im_start|>", "<|im_end|>", "<<SYS>>", "<</SYS>>",
    ]
    sanitized = text
    for pattern in dangerous_patterns:
        sanitized = sanitized.replace(pattern, "[REDACTED]")
    return sanitized
