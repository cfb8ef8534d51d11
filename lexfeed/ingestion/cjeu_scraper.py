"""CJEU judgment fetcher: CELLAR SPARQL metadata plus EUR-Lex full text."""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx
import pendulum
from rich.console import Console

from ..config import HttpConfig, JudgmentsConfig
from ..exceptions import SourceFetchError
from .models import JudgmentDraft
from .normalizer import build_full_text_url, extract_judgment_text, merge_judgment_rows

console = Console()

SPARQL_SOURCE = "CELLAR SPARQL"


def build_recent_judgments_query(days_back: int = 30, limit: int = 100, today: Optional[date] = None) -> str:
    """
    Build the SPARQL query for recent Court of Justice and General Court documents.

    One row is returned per (work, optional value) combination, so a single
    ECLI can appear several times with different subject labels.
    """
    if today is None:
        today = pendulum.now("UTC").date()
    date_filter = (today - timedelta(days=days_back)).isoformat()

    return f"""
PREFIX cdm: <http://publications.europa.eu/ontology/cdm#>
PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>
PREFIX skos: <http://www.w3.org/2004/02/skos/core#>

SELECT DISTINCT
  ?work ?ecli ?date ?celex ?title ?courtLabel ?docTypeLabel ?subjectLabel
  ?procedureTypeLabel ?judgeRapporteur ?advocateGeneral ?formation ?origLanguage
WHERE {{
  ?work cdm:case-law_ecli ?ecli ;
        cdm:work_date_document ?date .

  FILTER(STRSTARTS(?ecli, 'ECLI:EU:C:') || STRSTARTS(?ecli, 'ECLI:EU:T:'))
  FILTER(?date >= '{date_filter}'^^xsd:date)

  OPTIONAL {{ ?work cdm:resource_legal_id_celex ?celex . }}

  OPTIONAL {{
    ?work cdm:work_has_expression ?expr .
    ?expr cdm:expression_uses_language <http://publications.europa.eu/resource/authority/language/ENG> .
    ?expr cdm:expression_title ?title .
  }}

  OPTIONAL {{
    ?work cdm:case-law_delivered_by_court ?court .
    ?court skos:prefLabel ?courtLabel .
    FILTER(LANG(?courtLabel) = 'en')
  }}

  OPTIONAL {{
    ?work cdm:case-law_has_type_procedure_document_type ?docType .
    ?docType skos:prefLabel ?docTypeLabel .
    FILTER(LANG(?docTypeLabel) = 'en')
  }}

  OPTIONAL {{
    ?work cdm:case-law_is_about_concept_directory-code ?subject .
    ?subject skos:prefLabel ?subjectLabel .
    FILTER(LANG(?subjectLabel) = 'en')
  }}

  OPTIONAL {{
    ?work cdm:case-law_has_type_procedure_concept_type_procedure ?procedureType .
    ?procedureType skos:prefLabel ?procedureTypeLabel .
    FILTER(LANG(?procedureTypeLabel) = 'en')
  }}

  OPTIONAL {{
    ?work cdm:case-law_delivered_by_judge ?jrx .
    ?jrx cdm:agent_name ?judgeRapporteur .
  }}

  OPTIONAL {{
    ?work cdm:case-law_delivered_by_advocate-general ?agx .
    ?agx cdm:agent_name ?advocateGeneral .
  }}

  OPTIONAL {{
    ?work cdm:case-law_delivered_by_court-formation ?cfx .
    ?cfx cdm:agent_name ?formation .
  }}

  OPTIONAL {{
    ?work cdm:resource_legal_uses_originally_language ?origLang .
    ?origLang skos:prefLabel ?origLanguage .
    FILTER(LANG(?origLanguage) = 'en')
  }}
}}
ORDER BY DESC(?date)
LIMIT {limit}"""


class JudgmentFetcher:
    """Query CELLAR for recent judgments and scrape their EUR-Lex text."""

    def __init__(
        self,
        config: Optional[JudgmentsConfig] = None,
        http_config: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize judgment fetcher.

        Args:
            config: Endpoint, limits and full-text cap
            http_config: Timeout and User-Agent settings
            transport: Custom httpx transport (for testing)
        """
        self.config = config or JudgmentsConfig()
        self.http_config = http_config or HttpConfig()
        self.transport = transport

    def _client(self, accept: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.http_config.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self.http_config.user_agent, "Accept": accept},
            transport=self.transport,
        )

    async def query_sparql(self, query: str) -> Dict[str, Any]:
        """POST a query and return the decoded SPARQL JSON results."""
        try:
            async with self._client("application/sparql-results+json") as client:
                response = await client.post(self.config.sparql_endpoint, data={"query": query})
        except httpx.TimeoutException as e:
            raise SourceFetchError(SPARQL_SOURCE, "query timed out") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(SPARQL_SOURCE, f"HTTP error: {e}") from e

        if response.is_error:
            raise SourceFetchError(
                SPARQL_SOURCE,
                f"query failed ({response.status_code}): {response.text[:200]}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceFetchError(SPARQL_SOURCE, f"invalid JSON response: {e}") from e

    async def fetch_recent_judgments(self, days_back: int) -> List[JudgmentDraft]:
        """
        Fetch judgments decided in the last `days_back` days.

        Rows sharing an ECLI are merged. Raises SourceFetchError when the
        endpoint cannot be queried.
        """
        query = build_recent_judgments_query(days_back, self.config.query_limit)
        result = await self.query_sparql(query)

        bindings = (result.get("results") or {}).get("bindings") or []
        console.print(f"[dim]SPARQL returned {len(bindings)} result rows[/dim]")

        judgments = merge_judgment_rows(bindings)
        console.print(f"[dim]{len(judgments)} unique judgments after merging[/dim]")
        return judgments

    async def fetch_full_text(self, celex: Optional[str]) -> Optional[str]:
        """Scrape the judgment text from EUR-Lex; any failure gives None."""
        if not celex:
            return None

        url = build_full_text_url(celex)
        try:
            async with self._client("text/html") as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            console.print(f"[yellow]Failed to fetch EUR-Lex text for {celex}: {e}[/yellow]")
            return None

        if not response.is_success:
            console.print(
                f"[yellow]EUR-Lex returned {response.status_code} for {celex}[/yellow]"
            )
            return None

        return extract_judgment_text(response.text, self.config.max_full_text_chars)
