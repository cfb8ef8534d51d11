"""Fixed legal category taxonomy."""

from typing import Dict, List, Tuple

# (name, slug); names are matched exactly against classifier output.
LEGAL_CATEGORIES: List[Tuple[str, str]] = [
    ("AI, Platforms and Data Protection Law", "ai-platforms-data-protection"),
    ("Administrative Law", "administrative"),
    ("Banking & Finance Law", "banking-finance"),
    ("Capital Markets / Securities Law", "capital-markets-securities"),
    ("Competition / Antitrust Law", "competition-antitrust"),
    ("Construction & Real Estate Law", "construction-real-estate"),
    ("Consumer Protection Law", "consumer-protection"),
    ("Corporate / Company Law", "corporate-company"),
    ("Criminal Law", "criminal"),
    ("Employment & Labour Law", "employment-labour"),
    ("Energy Law", "energy"),
    ("Environmental Law", "environmental"),
    ("Family Law", "family"),
    ("Life Sciences Law", "life-sciences"),
    ("Immigration Law", "immigration"),
    ("Infrastructure & Public Procurement Law", "infrastructure-procurement"),
    ("Media & Telecommunications Law", "media-telecom"),
    ("Insolvency & Restructuring Law", "insolvency-restructuring"),
    ("Insurance Law", "insurance"),
    ("Intellectual Property (Patents, Trademarks, Copyright)", "intellectual-property"),
    ("International Law, Trade & Customs Law", "international-trade-customs"),
    ("Litigation & Dispute Resolution", "litigation-dispute-resolution"),
    ("Mergers & Acquisitions (M&A)", "mergers-acquisitions"),
    ("Private Equity & Venture Capital", "private-equity-vc"),
    ("Constitutional Law", "constitutional"),
    ("Sports & Entertainment Law", "sports-entertainment"),
    ("Tax Law", "tax"),
    ("Transport & Logistics Law", "transport-logistics"),
]

CATEGORY_NAMES: List[str] = [name for name, _ in LEGAL_CATEGORIES]

NAME_TO_SLUG: Dict[str, str] = {name.lower(): slug for name, slug in LEGAL_CATEGORIES}
