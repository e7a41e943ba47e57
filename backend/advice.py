from langchain_ollama import ChatOllama
from langchain_anthropic import ChatAnthropic
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.output_parsers import StrOutputParser
from typing import Callable, Optional
import logging
import time

from backend.config import settings
from backend.schemas import WeeklySchedule, DAYS

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "Mission Control is currently offline. Follow your standard protocols and stay consistent, Commander!"
EMPTY_SCHEDULE_MESSAGE = "Your mission board is empty. Head to the Blueprint tab to draft your first operations!"
EMPTY_RESPONSE_MESSAGE = "Optimal trajectory achieved. Proceed with mission."
FAILURE_MESSAGE = "Tactical link unstable. Rely on your core training for now!"


def get_advisor():
    """Factory function to return the appropriate advisor based on config"""
    if settings.ai_provider.lower() == "claude":
        if not settings.claude_api_key:
            logger.warning("CLAUDE_API_KEY not set, advice is in offline mode")
            return OfflineAdvisor()
        return ClaudeAdvisor()
    else:
        return OllamaAdvisor()


def summarize_schedule(schedule: WeeklySchedule) -> str:
    """One line per non-empty day: 'Monday: Math Session (STUDYING) at 08:30, ...'"""
    lines = []
    for day in DAYS:
        items = schedule.get(day) or []
        if not items:
            continue
        entries = ", ".join(f"{i.label} ({i.category.value}) at {i.start_time}" for i in items)
        lines.append(f"{day}: {entries}")
    return "\n".join(lines)


class BaseAdvisor:
    """Base class for AI-generated weekly schedule tips"""

    def __init__(self, retries: Optional[int] = None, backoff_seconds: Optional[float] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.llm = None
        self.parser = StrOutputParser()
        self.retries = settings.advice_retries if retries is None else retries
        self.backoff_seconds = settings.advice_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.sleep = sleep

    def get_advice(self, schedule: WeeklySchedule) -> str:
        """
        Short coaching tips for a weekly schedule.

        Never raises: after the configured retries (exponential backoff)
        a static fallback message is returned instead.
        """
        summary = summarize_schedule(schedule)
        if not summary:
            return EMPTY_SCHEDULE_MESSAGE

        prompt = ChatPromptTemplate.from_messages([
            ("system", self._build_system_prompt()),
            ("human", "Schedule:\n{schedule}")
        ])
        chain = prompt | self.llm | self.parser

        for attempt in range(self.retries + 1):
            try:
                text = chain.invoke({"schedule": summary})
                return (text or "").strip() or EMPTY_RESPONSE_MESSAGE
            except Exception as e:  # provider errors vary by backend
                if attempt == self.retries:
                    logger.error("Advice generation failed after %d attempts: %s", attempt + 1, e)
                    return FAILURE_MESSAGE
                delay = self.backoff_seconds * (2 ** attempt)
                logger.warning("Advice attempt %d failed (%s), retrying in %.1fs", attempt + 1, e, delay)
                self.sleep(delay)
        return FAILURE_MESSAGE

    def _build_system_prompt(self) -> str:
        """Build system prompt for LLM"""
        return """As an expert student coach, analyze the weekly schedule you are given and provide 3 concise, encouraging tips.

Make it punchy, student-friendly, and use space exploration metaphors. Max 150 characters."""


class OfflineAdvisor(BaseAdvisor):
    """Used when no provider is configured"""

    def get_advice(self, schedule: WeeklySchedule) -> str:
        if not summarize_schedule(schedule):
            return EMPTY_SCHEDULE_MESSAGE
        return OFFLINE_MESSAGE


class OllamaAdvisor(BaseAdvisor):
    """Advisor using local Ollama for development"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.llm = ChatOllama(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=0.7
        )


class ClaudeAdvisor(BaseAdvisor):
    """Advisor using Claude API for production"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not settings.claude_api_key:
            raise ValueError("CLAUDE_API_KEY not set in environment variables")

        self.llm = ChatAnthropic(
            model=settings.claude_model,
            api_key=settings.claude_api_key,
            temperature=0.7
        )


def get_advice(schedule: WeeklySchedule, advisor: Optional[BaseAdvisor] = None) -> str:
    return (advisor or get_advisor()).get_advice(schedule)
