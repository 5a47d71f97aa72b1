"""
Recommendation service - Natural-language package search

A query is turned into structured requirements (Gemini when configured, a
keyword parser otherwise), active packages are filtered on them, and the
matches are ranked with a deterministic score.
"""

import json
import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import NotFoundError
from ...models import Package
from ...services.gemini import GeminiClient
from .repository import RecommendationRepository
from .schemas import Requirements

logger = logging.getLogger(__name__)

MAX_MATCHES = 15
MAX_FALLBACK_MATCHES = 10
MAX_RESULTS = 10
FALLBACK_BUDGET_FACTOR = 1.5

EVENT_TYPE_KEYWORDS = [
    ("wedding", ("wedding",)),
    ("corporate", ("corporate", "business")),
    ("portrait", ("portrait",)),
    ("event", ("event", "shoot")),
]

FEATURE_KEYWORDS = [
    ("photography", "photography"),
    ("video", "videography"),
    ("drone", "drone"),
    ("album", "album"),
    ("edit", "editing"),
    ("candid", "candid"),
    ("traditional", "traditional"),
    ("cinematic", "cinematic"),
]

BUDGET_PATTERN = re.compile(
    r"\$(\d+)(?:\s*-\s*\$(\d+))?"
    r"|\$(\d+)\s*(?:and|to)\s*\$(\d+)"
    r"|under\s*\$(\d+)"
    r"|less than\s*\$(\d+)"
    r"|(\d+)\s*dollars?"
    r"|(\d+)\s*usd",
    re.IGNORECASE,
)

PARSE_PROMPT = """
Extract package requirements from this user query. Return as JSON.

User Query: "{query}"

Return format:
{{
  "eventType": "wedding|corporate|portrait|event|general",
  "minBudget": number|null,
  "maxBudget": number|null,
  "requiredFeatures": ["photography", "videography", "drone", "album", "editing"],
  "duration": "string|null",
  "location": "string|null",
  "specialRequirements": ["string"]
}}

If not specified, use null or an empty array.
"""

SUMMARY_PROMPT = """
You are a helpful photography package recommendation assistant. A user asked: "{query}"

These packages matched, best first:
{packages}

Write a short, friendly answer in plain English (no markdown, no bullet points):
acknowledge the request, say how many packages were found, highlight the best
two or three and why, and suggest a next step.
"""


def parse_requirements_offline(query: str) -> Requirements:
    """Keyword parser used when the model is unavailable or returns garbage"""
    lower = query.lower()

    event_type = "general"
    for name, keywords in EVENT_TYPE_KEYWORDS:
        if any(k in lower for k in keywords):
            event_type = name
            break

    min_budget = max_budget = None
    for match in BUDGET_PATTERN.finditer(query):
        numbers = [int(n) for n in match.groups() if n]
        if not numbers:
            continue
        text = match.group(0).lower()
        if "under" in text or "less than" in text:
            max_budget = min(numbers)
        elif len(numbers) == 2:
            min_budget, max_budget = min(numbers), max(numbers)
        else:
            max_budget = numbers[0]

    features = []
    for keyword, feature in FEATURE_KEYWORDS:
        if keyword in lower and feature not in features:
            features.append(feature)

    return Requirements(
        eventType=event_type,
        minBudget=min_budget,
        maxBudget=max_budget,
        requiredFeatures=features,
    )


def _features_text(package: Package) -> str:
    return " ".join(str(f) for f in package.features or []).lower()


def matches(package: Package, req: Requirements, broad: bool = False) -> bool:
    """
    Strict matching applies every parsed filter. The broad pass only keeps
    the event type and a budget raised by half.
    """
    price = float(package.price)
    if req.maxBudget is not None:
        limit = req.maxBudget * FALLBACK_BUDGET_FACTOR if broad else req.maxBudget
        if price > limit:
            return False

    name = package.name.lower()
    if req.eventType and req.eventType != "general":
        words = req.eventType.lower().split()
        if broad and req.eventType.lower() not in name:
            return False
        if not broad and not any(w in name for w in words):
            return False

    if broad:
        return True

    if req.minBudget is not None and price < req.minBudget:
        return False
    if req.location:
        country = (package.company.country or "").lower() if package.company else ""
        if req.location.lower() not in country:
            return False
    features = _features_text(package)
    if req.requiredFeatures and not any(f.lower() in features for f in req.requiredFeatures):
        return False
    if req.specialRequirements and not any(
        s.lower() in name or s.lower() in features for s in req.specialRequirements
    ):
        return False
    return True


def score_package(package: Package, req: Requirements) -> dict:
    """Base 50, adjusted for budget fit, matched features, popularity and event type, capped to 0-100"""
    score = 50
    reasons = []
    price = float(package.price)

    if req.maxBudget:
        ratio = price / req.maxBudget
        if ratio <= 1:
            score += 30
            reasons.append(f"Within budget (${price:g} <= ${req.maxBudget:g})")
        elif ratio <= 1.2:
            score += 15
            reasons.append(f"Slightly above budget (${price:g})")
        else:
            score -= 10

    matched = [
        feature
        for feature in package.features or []
        if any(r.lower() in str(feature).lower() or str(feature).lower() in r.lower() for r in req.requiredFeatures)
    ]
    if matched:
        score += 10 * len(matched)
        reasons.append(f"Includes required features: {', '.join(str(f) for f in matched)}")

    if package.is_popular:
        score += 10
        reasons.append("Popular choice")

    if req.eventType and req.eventType != "general" and req.eventType.lower() in package.name.lower():
        score += 15
        reasons.append(f"Specialized for {req.eventType}")

    score = min(max(score, 0), 100)
    company = package.company
    return {
        "id": package.id,
        "name": package.name,
        "price": price,
        "duration": package.duration,
        "features": package.features or [],
        "companyName": company.name if company else "Unknown",
        "companyCountry": (company.country or "") if company else "",
        "companyEmail": company.email if company else "",
        "isPopular": package.is_popular,
        "score": score,
        "explanation": f"Score: {score}/100. {' '.join(reasons)}".strip(),
        "matchReasons": reasons,
    }


def rank_packages(packages: list[Package], req: Requirements) -> list[dict]:
    ranked = [score_package(p, req) for p in packages]
    # stable sort keeps popular/cheap order for equal scores
    ranked.sort(key=lambda p: p["score"], reverse=True)
    return ranked[:MAX_RESULTS]


def summarize_offline(ranked: list[dict], query: str) -> str:
    if not ranked:
        return (
            "I couldn't find any packages matching your specific requirements. "
            "Try adjusting your budget or features."
        )

    lines = [f'Hi! I found {len(ranked)} photography packages that match your request for "{query}".']
    for i, pkg in enumerate(ranked[:3], start=1):
        line = f"{i}. {pkg['name']} ({pkg['score']}/100 match), ${pkg['price']:g} for {pkg['duration']} by {pkg['companyName']}."
        if pkg["features"]:
            line += f" Includes: {', '.join(str(f) for f in pkg['features'][:3])}."
        lines.append(line)
    if len(ranked) > 1:
        prices = [p["price"] for p in ranked]
        average = round(sum(p["score"] for p in ranked) / len(ranked))
        lines.append(f"Prices range from ${min(prices):g} - ${max(prices):g}. The average match score is {average}/100.")
    lines.append("Would you like more details on any of these options, or should I search for something more specific?")
    return "\n".join(lines)


class RecommendationService:
    """Service layer for package recommendations"""

    def __init__(self, db: Session, gemini: Optional[GeminiClient] = None):
        self.db = db
        self.repo = RecommendationRepository()
        self.gemini = gemini

    def parse_requirements(self, query: str) -> Requirements:
        if self.gemini is None:
            return parse_requirements_offline(query)
        try:
            parsed = self.gemini.predict_json(PARSE_PROMPT.format(query=query))
            cleaned = {k: v for k, v in parsed.items() if v is not None and k in Requirements.model_fields}
            return Requirements.model_validate(cleaned)
        except Exception as e:
            logger.warning(f"⚠️ AI parsing failed, using keyword parser: {e}")
            return parse_requirements_offline(query)

    def summarize(self, ranked: list[dict], query: str) -> str:
        if self.gemini is None or not ranked:
            return summarize_offline(ranked, query)
        listing = "\n".join(
            f"{i}. {p['name']} - ${p['price']:g}, {p['duration']}, {p['companyName']} ({p['companyCountry']}), "
            f"score {p['score']}: {p['explanation']}"
            for i, p in enumerate(ranked, start=1)
        )
        try:
            return self.gemini.predict(SUMMARY_PROMPT.format(query=query, packages=listing), temperature=0.8)
        except Exception as e:
            logger.warning(f"⚠️ AI summary failed, using template: {e}")
            return summarize_offline(ranked, query)

    def recommend(self, query: str) -> dict:
        req = self.parse_requirements(query)
        active = self.repo.get_active_packages(self.db)

        found = [p for p in active if matches(p, req)][:MAX_MATCHES]
        broadened = False
        if not found:
            found = sorted((p for p in active if matches(p, req, broad=True)), key=lambda p: float(p.price))
            found = found[:MAX_FALLBACK_MATCHES]
            broadened = True

        ranked = rank_packages(found, req)
        logger.info(f"🔎 Recommendation for '{query}': {len(ranked)} package(s), broadened={broadened}")
        return {
            "success": True,
            "message": "Packages found successfully",
            "data": {
                "originalQuery": query,
                "parsedRequirements": json.loads(req.model_dump_json()),
                "packages": ranked,
                "summary": self.summarize(ranked, query),
                "totalFound": len(ranked),
                "broadenedSearch": broadened,
                "filtersApplied": {
                    "priceRange": {"min": req.minBudget, "max": req.maxBudget},
                    "eventType": req.eventType,
                    "features": req.requiredFeatures,
                    "location": req.location,
                    "duration": req.duration,
                },
            },
        }

    def quick_search(self, term: str, limit: int) -> dict:
        """Case-insensitive match on package names and features"""
        needle = term.lower()
        results = [
            score_package(p, Requirements())
            for p in self.repo.get_active_packages(self.db)
            if needle in p.name.lower() or needle in _features_text(p)
        ][:limit]
        return {
            "success": True,
            "message": "Search completed",
            "data": {"searchTerm": term, "results": results, "count": len(results)},
        }

    def get_package_details(self, package_id: str) -> dict:
        package = self.repo.get_active_package(self.db, package_id)
        if not package:
            raise NotFoundError("Package not found or inactive")
        return {"success": True, "data": score_package(package, Requirements())}
