"""Prompt templates for classification and judgment summarization."""

from ..models import Article, JudgmentWithArticle
from ..taxonomy import CATEGORY_NAMES

_CATEGORY_LIST = "\n".join(f"- {name}" for name in CATEGORY_NAMES)

CLASSIFICATION_PROMPT = f"""You are a legal content classifier. Analyze the following article and return a JSON object with:

1. "legal_areas": an array of 1-3 most relevant legal categories from this exact list:
{_CATEGORY_LIST}

2. "jurisdiction": the primary jurisdiction this article relates to (e.g., "EU", "US", "UK", "Portugal", "Brazil", "International", etc.). Use the country name or common abbreviation.

3. "language": the ISO 639-1 language code of the article (e.g., "en", "pt", "fr", "de", "es").

Return ONLY valid JSON, no other text. Example:
{{"legal_areas": ["Tax Law", "Corporate / Company Law"], "jurisdiction": "EU", "language": "en"}}"""

JUDGMENT_PROMPT = f"""You are an expert EU law analyst. Analyze the following CJEU judgment and produce a JSON response with:

1. "summary": A clear, professional summary of the judgment (3-5 paragraphs). Cover:
   - The parties and background of the dispute
   - The key legal questions referred or issues raised
   - The Court's reasoning and key legal principles established
   - The ruling/operative part and its practical implications

2. "legal_areas": An array of 1-3 most relevant legal categories from this exact list:
{_CATEGORY_LIST}

3. "jurisdiction": Always "EU" for CJEU cases.

4. "key_provisions": An array of key EU legal provisions cited (e.g., "Article 101 TFEU", "Regulation 2016/679 (GDPR) Art. 5").

5. "significance": A one-sentence assessment of the judgment's practical significance for legal practitioners.

Return ONLY valid JSON. Example:
{{
  "summary": "In this case, the Court of Justice...",
  "legal_areas": ["Competition / Antitrust Law"],
  "jurisdiction": "EU",
  "key_provisions": ["Article 101 TFEU", "Article 102 TFEU"],
  "significance": "This judgment clarifies the scope of..."
}}"""


def build_classification_prompt(article: Article, excerpt_chars: int = 1500) -> str:
    """Classification prompt over title and a capped body excerpt."""
    body = (article.description or article.content or "")[:excerpt_chars]
    return f"{CLASSIFICATION_PROMPT}\n\n---\n\nTitle: {article.title}\n\nContent: {body}"


def build_judgment_prompt(judgment: JudgmentWithArticle, excerpt_chars: int = 12000) -> str:
    """Summarization prompt over structured case fields and a capped full-text excerpt."""
    fields = [
        ("Case", judgment.parties or judgment.title),
        ("ECLI", judgment.ecli),
        ("Court", judgment.court),
        ("Formation", judgment.chamber),
        ("Document type", judgment.document_type),
        ("Procedure", judgment.procedure_type),
        ("Subject matter", judgment.subject_matter),
        ("Decision date", judgment.decision_date.isoformat() if judgment.decision_date else None),
    ]
    header = "\n".join(f"{label}: {value}" for label, value in fields if value)

    text = judgment.full_text[:excerpt_chars] if judgment.full_text else header

    return f"{JUDGMENT_PROMPT}\n\n---\n\n{header}\n\n---\n\nFull text (excerpt):\n{text}"
