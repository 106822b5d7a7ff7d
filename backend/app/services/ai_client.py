"""
Unified AI client for celebration quotes.

Primary provider:
  Google Gemini generateContent REST endpoint, authenticated with an API key.

Optional fallback:
  Anthropic (only when Gemini is not configured).

When neither is configured, generation raises QuoteServiceUnavailable and
callers fall back to template text.
"""

import asyncio

import requests

from app.config import settings


class QuoteServiceUnavailable(RuntimeError):
    """No text-generation provider is configured."""


# ─────────────────────────────────────────────────────────────────────────────
# Prompt
# ─────────────────────────────────────────────────────────────────────────────

def build_quote_prompt(
    staff_name: str,
    department: str,
    favorite_things: list[str],
    actor_name: str,
) -> str:
    things = ", ".join(t for t in favorite_things if t)
    return (
        "Generate a heartfelt, blessing-style Teacher’s Day quote in one or two lines.\n\n"
        "Format:\n"
        f'- Start with "Dear, {staff_name}"\n'
        f"- Mention one of their favorite things: {things}\n"
        f"- Connect it with {actor_name} in a joyful and inspiring way\n"
        "- Use blessing/aim/destination style: wish them joy, guidance, light, inspiration\n"
        f"- Appreciate their contribution to the {department} department\n"
        '- End with "Happy Teacher’s Day 🎉"\n'
        "- Add positive emojis like 🌟🙏✨🌸🎉\n\n"
        "Example style:\n"
        '"Dear, Meena 🌸 Since you love Coffee ☕, Rajinikanth says your energy blesses '
        "every student’s journey towards success 🌟🙏 Thank you for guiding the Computer "
        'Science department. Happy Teacher’s Day 🎉"'
    )


# ─────────────────────────────────────────────────────────────────────────────
# Google Gemini: JSON over HTTPS with an API key
# ─────────────────────────────────────────────────────────────────────────────

def _gemini_url() -> str:
    base = settings.GEMINI_BASE_URL.rstrip("/")
    return f"{base}/models/{settings.GEMINI_MODEL}:generateContent"


def _build_gemini_body(prompt: str, max_tokens: int, temperature: float) -> dict:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        },
    }


def _extract_gemini_text(response_json: dict) -> str:
    """Pull plain text from a generateContent response; "" when absent."""
    candidates = response_json.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts:
        return ""
    text = parts[0].get("text", "")
    return text.strip() if isinstance(text, str) else ""


def _gemini_post(body: dict, timeout: tuple = (5.0, 30.0)) -> dict:
    """Blocking POST to Gemini; raises on HTTP errors.

    Args:
        timeout: (connect_timeout, read_timeout) in seconds.
    """
    response = requests.post(
        _gemini_url(),
        params={"key": settings.GEMINI_API_KEY},
        headers={"Content-Type": "application/json"},
        json=body,
        timeout=timeout,
    )
    response.raise_for_status()
    return response.json()


async def _gemini_generate(prompt: str, max_tokens: int, temperature: float) -> str:
    body = _build_gemini_body(prompt, max_tokens, temperature)
    data = await asyncio.to_thread(_gemini_post, body)
    return _extract_gemini_text(data)


# ─────────────────────────────────────────────────────────────────────────────
# Anthropic: only used when GEMINI_API_KEY is NOT set
# ─────────────────────────────────────────────────────────────────────────────

def _anthropic_call(prompt: str, max_tokens: int, temperature: float) -> str:
    import anthropic

    client = anthropic.Anthropic(api_key=settings.ANTHROPIC_API_KEY)
    response = client.messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=max_tokens,
        temperature=temperature,
        messages=[{"role": "user", "content": prompt}],
    )
    return response.content[0].text if response.content else ""


async def _anthropic_generate(prompt: str, max_tokens: int, temperature: float) -> str:
    try:
        return await asyncio.to_thread(_anthropic_call, prompt, max_tokens, temperature)
    except Exception as e:
        raise RuntimeError(f"Anthropic error: {e}") from e


# ─────────────────────────────────────────────────────────────────────────────
# Status helpers
# ─────────────────────────────────────────────────────────────────────────────

def _gemini_configured() -> bool:
    return bool(settings.GEMINI_API_KEY and settings.GEMINI_MODEL)


def _anthropic_configured() -> bool:
    return bool(settings.ANTHROPIC_API_KEY)


def ai_provider_name() -> str:
    if _gemini_configured():
        return f"Google Gemini ({settings.GEMINI_MODEL})"
    if _anthropic_configured():
        return f"Anthropic ({settings.ANTHROPIC_MODEL})"
    return "none"


async def ai_health_check() -> dict:
    """Live connectivity test — called by /api/health/ai."""
    provider = ai_provider_name()
    if provider == "none":
        return {
            "provider": "none",
            "status": "unconfigured",
            "message": "Set GEMINI_API_KEY (or ANTHROPIC_API_KEY) in backend/.env.",
        }

    try:
        reply = await generate_text("Reply with exactly: OK", max_tokens=10, temperature=0.0)
        return {"provider": provider, "status": "ok", "test_reply": reply.strip()}
    except Exception as e:
        return {"provider": provider, "status": "error", "error": str(e)}


# ─────────────────────────────────────────────────────────────────────────────
# Public entry points
# ─────────────────────────────────────────────────────────────────────────────

async def generate_text(prompt: str, max_tokens: int = 200, temperature: float = 0.9) -> str:
    """
    Send a single-prompt generation request.

    Provider priority:
      1. Google Gemini — when GEMINI_API_KEY is set
      2. Anthropic     — when ANTHROPIC_API_KEY is set (and Gemini is not)

    Anthropic is never used as a silent fallback when Gemini is configured.
    """
    if _gemini_configured():
        return await _gemini_generate(prompt, max_tokens, temperature)

    if _anthropic_configured():
        return await _anthropic_generate(prompt, max_tokens, temperature)

    raise QuoteServiceUnavailable("No AI provider configured")


async def generate_quote(
    staff_name: str,
    department: str,
    favorite_things: list[str],
    actor_name: str,
) -> str:
    """Generate the celebration quote for one staff member and actor."""
    prompt = build_quote_prompt(staff_name, department, favorite_things, actor_name)
    return await generate_text(
        prompt,
        max_tokens=settings.QUOTE_MAX_TOKENS,
        temperature=settings.QUOTE_TEMPERATURE,
    )
