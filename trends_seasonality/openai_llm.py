# trends_seasonality/openai_llm.py
import logging, os, time, random
from typing import Callable, Optional
from openai import OpenAI, APIConnectionError, APIError, InternalServerError, RateLimitError

from .errors import EnhancementServiceError
from .insights import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
MAX_ATTEMPTS = 4

def is_valid_api_key(key: Optional[str]) -> bool:
    return bool(key) and key.startswith("sk-")

_client: Optional[OpenAI] = None
def _get_client(api_key: Optional[str] = None) -> OpenAI:
    global _client
    if api_key:  # explicit key wins
        if not is_valid_api_key(api_key):
            raise EnhancementServiceError("OpenAI client not initialized: API key must start with 'sk-'.")
        return OpenAI(api_key=api_key)
    if _client is None:
        key = os.getenv("OPENAI_API_KEY")
        if not is_valid_api_key(key):
            raise EnhancementServiceError("OpenAI client not initialized: set OPENAI_API_KEY or pass api_key.")
        _client = OpenAI(api_key=key)
    return _client

def openai_insights_call(prompt: str, model: str = DEFAULT_MODEL, api_key: Optional[str] = None) -> str:
    """
    Chat Completions call for insight rewriting.
    Retries rate limits, connection failures and 5xx errors with backoff; other
    API errors (bad key, bad request) fail at once. Both end in EnhancementServiceError.
    Returns the raw reply text.
    """
    client = _get_client(api_key)

    for attempt in range(MAX_ATTEMPTS):
        try:
            resp = client.chat.completions.create(
                model=model,
                temperature=0.7,
                max_tokens=800,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
            content = resp.choices[0].message.content if resp.choices else None
            if not content:
                raise EnhancementServiceError("No response from OpenAI")
            return content
        except (RateLimitError, APIConnectionError, InternalServerError) as e:
            if attempt == MAX_ATTEMPTS - 1:
                raise EnhancementServiceError(
                    "Failed to generate AI insights. Please check your API key and try again.", e) from e
            delay = 1.2 * (2 ** attempt) + random.random() * 0.4
            logger.warning("OpenAI call failed (%s), retrying in %.1fs", e.__class__.__name__, delay)
            time.sleep(delay)
        except APIError as e:
            # auth / bad request / not found: retrying cannot help
            raise EnhancementServiceError(
                "Failed to generate AI insights. Please check your API key and try again.", e) from e

def make_llm_call_fn(model: str = DEFAULT_MODEL, api_key: Optional[str] = None) -> Callable[[str], str]:
    """Bind model/key so the result plugs into insights.enhance_insights()."""
    def _call(prompt: str) -> str:
        return openai_insights_call(prompt, model=model, api_key=api_key)
    return _call
