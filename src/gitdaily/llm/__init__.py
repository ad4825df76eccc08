"""LLM integration for activity summaries."""

from gitdaily.llm.base import BaseLLMProvider
from gitdaily.llm.gemini_provider import GeminiProvider
from gitdaily.llm.prompts import PromptTemplates
from gitdaily.llm.summarizer import FALLBACK_SUMMARY, NO_COMMITS_MESSAGE, SummaryGenerator

__all__ = [
    "BaseLLMProvider",
    "GeminiProvider",
    "PromptTemplates",
    "SummaryGenerator",
    "NO_COMMITS_MESSAGE",
    "FALLBACK_SUMMARY",
]
