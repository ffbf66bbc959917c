"""LLM-backed tagging strategy."""

import json
from typing import List

import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from .interfaces import TaggingStrategyInterface, TaggingResult, TagWithConfidence
from .llm_client import LLMClient
from ..config.settings import settings
from ..ingestion.errors import ConfigurationError
from ..ingestion.interfaces import NormalizedArticle

logger = structlog.get_logger()


class LLMTaggingStrategy(TaggingStrategyInterface):
    """Asks an LLM for 5-10 tags, falling back to the article's categories."""

    SYSTEM_PROMPT = (
        "You are a precise tagging system that returns only valid JSON responses. "
        "The 'error' field should be null if successful, or a string describing any issue encountered."
    )

    TAGGING_PROMPT = """Extract 5-10 relevant tags from this article. Return ONLY a valid JSON object in this exact format:
{{
  "tags": [
    {{ "tag": "technology", "probability": 0.95 }},
    {{ "tag": "science", "probability": 0.87 }}
  ],
  "comment": "Brief explanation of tag selection (optional)",
  "error": null
}}

IMPORTANT RULES for tag creation:
1. Use only singular forms (e.g., "technology" not "technologies")
2. Use lowercase for tags
3. Prefer existing tags when relevant
4. Only include tags with high confidence (probability >= 0.7)
5. Be specific but not overly detailed
6. Avoid generic tags like "news" or "article"
{existing_tags}
Title: {title}
Description: {description}

Return only the JSON object, no additional text."""

    MAX_EXISTING_TAGS = 50

    def __init__(
        self,
        llm_client: LLMClient = None,
        api_key: str = None,
        tag_repository=None,
        include_existing_tags: bool = None,
        minimum_probability: float = None,
        max_attempts: int = 3
    ):
        if llm_client is None:
            llm_client = LLMClient(api_key=api_key)
        if not llm_client.has_api_key:
            raise ConfigurationError("LLM tagging requires an API key (ZEITUNG_LLM_API_KEY)")

        self.llm_client = llm_client
        self.tag_repository = tag_repository
        self.include_existing_tags = (
            include_existing_tags if include_existing_tags is not None
            else settings.llm_include_existing_tags
        )
        self.minimum_probability = (
            minimum_probability if minimum_probability is not None
            else settings.llm_minimum_tag_probability
        )
        self.max_attempts = max_attempts

    async def generate_tags(self, article: NormalizedArticle) -> List[str]:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                reraise=True,
            ):
                with attempt:
                    return await self._request_tags(article)
        except Exception as e:
            logger.error("llm_tagging_failed", title=article.title[:80], error=str(e))

        return list(article.categories)

    async def _request_tags(self, article: NormalizedArticle) -> List[str]:
        prompt = self.TAGGING_PROMPT.format(
            existing_tags=self._existing_tags_context(),
            title=article.title,
            description=article.description[:4000],
        )
        response = await self.llm_client.complete(prompt=prompt, system=self.SYSTEM_PROMPT)

        result = self.parse_response(response or "")
        if not result.tags:
            raise ValueError("LLM returned invalid format or no tags")

        if result.error:
            logger.warning("llm_reported_error", error=result.error)
        if result.comment:
            logger.info("llm_tagging_comment", comment=result.comment[:200])

        accepted = sorted(
            (t for t in result.tags if t.probability >= self.minimum_probability),
            key=lambda t: t.probability,
            reverse=True
        )
        if not accepted:
            raise ValueError(f"No tags met minimum probability threshold of {self.minimum_probability}")

        return [t.tag for t in accepted]

    def _existing_tags_context(self) -> str:
        if not self.include_existing_tags or self.tag_repository is None:
            return ""

        existing = self.tag_repository.get_all_tags()[:self.MAX_EXISTING_TAGS]
        if not existing:
            return ""
        return f"\nExisting tags in the system (prefer using these when relevant): {', '.join(existing)}\n"

    def parse_response(self, response: str) -> TaggingResult:
        """Parse the LLM reply.

        JSON replies follow the prompt's format. Anything else is read as a
        comma-separated tag list, each tag counting as fully confident.
        """
        # Handle markdown code blocks
        if "```" in response:
            start = response.find("```")
            newline = response.find("\n", start)
            end = response.find("```", start + 3)
            if newline > start and end > newline:
                response = response[newline + 1:end]

        start = response.find("{")
        if start >= 0:
            end = response.rfind("}") + 1
            try:
                data = json.loads(response[start:end])
            except json.JSONDecodeError:
                logger.warning("llm_json_parse_failed", response=response[:200])
                return TaggingResult()
            return self._result_from_json(data)

        tags = [
            TagWithConfidence(tag=part.strip().strip('"').lower(), probability=1.0)
            for part in response.split(",")
            if part.strip().strip('"')
        ]
        return TaggingResult(tags=tags)

    def _result_from_json(self, data) -> TaggingResult:
        if not isinstance(data, dict):
            return TaggingResult()

        tags = []
        for item in data.get("tags") or []:
            if isinstance(item, str):
                tags.append(TagWithConfidence(tag=item, probability=1.0))
            elif isinstance(item, dict) and item.get("tag"):
                try:
                    probability = float(item.get("probability", 0.0))
                except (TypeError, ValueError):
                    probability = 0.0
                tags.append(TagWithConfidence(tag=str(item["tag"]), probability=probability))

        return TaggingResult(tags=tags, comment=data.get("comment"), error=data.get("error"))
