"""LLM API client wrapper with provider abstraction."""

from typing import Optional
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from ..config.settings import settings

logger = structlog.get_logger()


class LLMClient:
    """LLM client for OpenAI-compatible endpoints (OpenRouter by default) and Anthropic."""

    def __init__(
        self,
        provider: str = None,
        api_key: str = None,
        base_url: Optional[str] = None,
        model: str = None
    ):
        self.provider = provider or settings.llm_provider
        self.model = model or settings.llm_model
        self._api_key = api_key or settings.llm_api_key
        self._base_url = base_url or settings.llm_base_url
        self._client = None

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def _get_client(self):
        """Lazy initialization of the client."""
        if self._client is not None:
            return self._client

        if not self._api_key:
            raise ValueError("LLM API key not configured. Set ZEITUNG_LLM_API_KEY environment variable.")

        if self.provider == "openai":
            import openai
            self._client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)

        elif self.provider == "anthropic":
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

        else:
            raise ValueError(f"Unknown LLM provider: {self.provider}")

        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10)
    )
    async def complete(
        self,
        prompt: str,
        system: str = None,
        max_tokens: int = None,
        temperature: float = None
    ) -> str:
        """Generate a completion from the LLM."""
        client = self._get_client()
        max_tokens = max_tokens or settings.llm_max_tokens
        temperature = temperature if temperature is not None else settings.llm_temperature

        try:
            if self.provider == "anthropic":
                return await self._complete_anthropic(client, prompt, system, max_tokens, temperature)
            return await self._complete_openai(client, prompt, system, max_tokens, temperature)

        except Exception as e:
            logger.error("llm_call_failed", provider=self.provider, error=str(e))
            raise

    async def _complete_anthropic(self, client, prompt: str, system: str, max_tokens: int, temperature: float) -> str:
        """Call Anthropic API."""
        messages = [{"role": "user", "content": prompt}]
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages
        }
        if system:
            kwargs["system"] = system

        response = await client.messages.create(**kwargs)
        return response.content[0].text

    async def _complete_openai(self, client, prompt: str, system: str, max_tokens: int, temperature: float) -> str:
        """Call an OpenAI-compatible chat completions API."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=messages
        )
        return response.choices[0].message.content
