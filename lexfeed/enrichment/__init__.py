"""Classification and summarization of stored records."""

from .classifier import ArticleClassifier
from .llm_provider import (
    LLMProvider,
    MockLLMProvider,
    OpenAIProvider,
    UnavailableLLMProvider,
    create_llm_provider,
)
from .models import ClassificationResult, JudgmentSummaryResult
from .parsing import extract_json_object, find_balanced_object
from .summarizer import JudgmentSummarizer

__all__ = [
    "ArticleClassifier",
    "ClassificationResult",
    "JudgmentSummarizer",
    "JudgmentSummaryResult",
    "LLMProvider",
    "MockLLMProvider",
    "OpenAIProvider",
    "UnavailableLLMProvider",
    "create_llm_provider",
    "extract_json_object",
    "find_balanced_object",
]
