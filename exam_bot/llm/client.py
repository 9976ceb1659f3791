import logging
from openai import AsyncOpenAI

from exam_bot.config import settings

logger = logging.getLogger(__name__)

_client = AsyncOpenAI(base_url=settings.LLM_BASE_URL, api_key=settings.LLM_API_KEY)


async def chat_completion(
    prompt: str,
    temperature: float = settings.LLM_TEMPERATURE,
    max_tokens: int = settings.LLM_MAX_TOKENS,
) -> str | None:
    """Send a prompt to the LLM endpoint and return the response text."""
    try:
        response = await _client.chat.completions.create(
            model=settings.LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content
    except Exception as e:
        logger.error(f"LLM request failed: {e}")
        return None
