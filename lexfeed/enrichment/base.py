"""Shared plumbing for enrichment steps."""

from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from rich.console import Console

from ..config import EnrichmentConfig, LLMConfig
from ..db.articles import ArticleRepository
from ..exceptions import ResponseParseError
from .llm_provider import LLMProvider
from .parsing import extract_json_object

console = Console()

ResultT = TypeVar("ResultT", bound=BaseModel)


class BaseEnricher:
    """
    Base class for steps that send a record to the LLM and store the result.

    There are no retries here: a record whose call or parse fails keeps its
    status flag unset and is picked up again by a later run.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        llm_provider: LLMProvider,
        config: Optional[EnrichmentConfig] = None,
        llm_config: Optional[LLMConfig] = None,
    ) -> None:
        """
        Initialize enricher.

        Args:
            repository: Article store
            llm_provider: Text-generation provider
            config: Batch sizes and prompt excerpt caps
            llm_config: Token limits per call
        """
        self.repository = repository
        self.llm_provider = llm_provider
        self.config = config or EnrichmentConfig()
        self.llm_config = llm_config or LLMConfig()

    async def _call_for_json(self, prompt: str, max_tokens: int, model: Type[ResultT]) -> ResultT:
        """Call the provider and validate the embedded JSON object."""
        text = await self.llm_provider.complete(prompt, max_tokens)
        data = extract_json_object(text)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ResponseParseError(f"Unexpected response shape: {e}") from e

    @staticmethod
    def resolve_category_ids(labels: Sequence[str], category_map: Dict[str, int]) -> List[int]:
        """Exact-name lookup; unknown labels are dropped."""
        ids: List[int] = []
        for label in labels:
            category_id = category_map.get(label)
            if category_id is None:
                console.print(f"[yellow]Dropping unknown category label: {label!r}[/yellow]")
                continue
            if category_id not in ids:
                ids.append(category_id)
        return ids
