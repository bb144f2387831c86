"""Partner questionnaire webhook client."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from core.cache import RedisCache
from core.config import settings

logger = logging.getLogger(__name__)

QUESTIONS_CACHE_KEY = "questionnaire:questions"


class QuestionnaireError(Exception):
    """Raised when the questionnaire webhook answers with an error."""


class PartnerQuestionnaireClient:
    """
    Client for the external questionnaire webhooks.

    ``GET partnerQuestions`` returns the question catalogue, ``POST
    partnerAnswer`` submits a partner's answers and ``GET
    getRegisteredPartners`` lists partners, eventually with a
    ``summary_score`` once the answers have been scored.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        poll_interval: Optional[float] = None,
        cache: Optional[RedisCache] = None,
        cache_ttl: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the questionnaire client.

        Args:
            base_url: Webhook base URL
            timeout: Per-request timeout in seconds
            max_retries: Number of score lookups before giving up
            poll_interval: Seconds to wait after each unsuccessful lookup
            cache: Optional Redis cache for the question catalogue
            cache_ttl: Catalogue cache TTL in seconds
            transport: Custom httpx transport (tests)
            sleep: Coroutine used to wait between lookups
        """
        self.base_url = (base_url or settings.partner_webhook_base_url).rstrip("/")
        self.timeout = timeout or settings.partner_http_timeout_seconds
        self.max_retries = (
            max_retries if max_retries is not None else settings.partner_poll_max_retries
        )
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else settings.partner_poll_interval_seconds
        )
        self.cache = cache
        self.cache_ttl = cache_ttl or settings.questions_cache_ttl_seconds
        self._transport = transport
        self._sleep = sleep

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_questions(self) -> Any:
        """Fetch the question catalogue, served from cache when available."""
        if self.cache is not None:
            cached = await self.cache.get(QUESTIONS_CACHE_KEY)
            if cached is not None:
                return cached

        async with self._client() as client:
            response = await client.get(f"{self.base_url}/partnerQuestions")

        if response.status_code != 200:
            raise QuestionnaireError(
                f"partnerQuestions returned {response.status_code}"
            )

        questions = response.json()
        if self.cache is not None:
            await self.cache.set(QUESTIONS_CACHE_KEY, questions, self.cache_ttl)
        return questions

    async def submit_answers(self, partner_id: str, answers: Any) -> bool:
        """Post answers; returns whether the webhook accepted them."""
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/partnerAnswer",
                json={"partner_id": partner_id, "answers": answers},
            )

        if not response.is_success:
            logger.warning(
                f"partnerAnswer rejected answers for {partner_id}: "
                f"status {response.status_code}"
            )
            return False
        return True

    async def poll_score(self, partner_id: str) -> Optional[Any]:
        """
        Look up the partner's score a bounded number of times.

        Each attempt lists registered partners and returns the first
        ``summary_score`` found for ``partner_id``; otherwise it waits
        ``poll_interval`` seconds. Returns ``None`` when attempts run out.
        """
        async with self._client() as client:
            for attempt in range(1, self.max_retries + 1):
                response = await client.get(f"{self.base_url}/getRegisteredPartners")
                partners = response.json() if response.is_success else []
                if not isinstance(partners, list):
                    partners = []

                for partner in partners:
                    if (
                        isinstance(partner, dict)
                        and partner.get("partner_id") == partner_id
                        and partner.get("summary_score")
                    ):
                        logger.info(
                            f"Score for partner {partner_id} found on attempt {attempt}"
                        )
                        return partner["summary_score"]

                logger.debug(
                    f"Score for partner {partner_id} not ready "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                await self._sleep(self.poll_interval)

        return None
