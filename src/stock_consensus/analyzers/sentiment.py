"""News sentiment analyzer using keyword scoring."""

from datetime import datetime, timedelta, timezone
from time import perf_counter
from typing import Any

from stock_consensus.data.yfinance_client import fetch_attribute
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.provenance import build_meta, build_provenance
from stock_consensus.utils.sanitize import sanitize_text

LOOKBACK_DAYS = 14
MAX_ARTICLES = 10

POSITIVE_KEYWORDS = {
    "beat", "beats", "exceeded", "growth", "profit", "surge", "gain",
    "upgrade", "outperform", "record", "strong", "bullish",
    "raises", "raised", "higher", "boost", "soars", "jumps",
}
NEGATIVE_KEYWORDS = {
    "miss", "missed", "decline", "loss", "cut", "downgrade",
    "weak", "bearish", "lawsuit", "investigation", "recall", "layoff",
    "warns", "warning", "falls", "drops", "lower", "slump", "plunge",
}


def score_sentiment(text: str) -> str:
    """Simple keyword-based sentiment scoring."""
    text_lower = text.lower()
    pos = sum(1 for w in POSITIVE_KEYWORDS if w in text_lower)
    neg = sum(1 for w in NEGATIVE_KEYWORDS if w in text_lower)

    if pos > neg:
        return "positive"
    elif neg > pos:
        return "negative"
    return "neutral"


def overall_sentiment(counts: dict[str, int]) -> str:
    if counts["positive"] > counts["negative"]:
        return "Bullish"
    if counts["negative"] > counts["positive"]:
        return "Bearish"
    return "Neutral"


def _parse_article(item: dict[str, Any], cutoff: datetime) -> dict[str, Any] | None:
    content = item.get("content") or {}
    pub_date_str = content.get("pubDate")
    if not pub_date_str:
        return None
    try:
        pub_date = datetime.fromisoformat(pub_date_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if pub_date.tzinfo is None:
        pub_date = pub_date.replace(tzinfo=timezone.utc)
    if pub_date < cutoff:
        return None

    title = sanitize_text(content.get("title") or "", max_length=200)
    summary = sanitize_text(content.get("summary") or "", max_length=500)
    provider = (content.get("provider") or {}).get("displayName", "Unknown")
    return {
        "date": pub_date.strftime("%Y-%m-%d"),
        "title": title,
        "provider": sanitize_text(provider, max_length=50),
        "sentiment": score_sentiment(f"{title} {summary}"),
    }


async def analyze_sentiment(subject: AnalysisSubject) -> dict[str, Any]:
    """
    Keyword sentiment over recent headlines.

    No recent news is a valid, neutral result rather than a failure.
    """
    start_time = perf_counter()
    news = await fetch_attribute(subject.symbol, "news") or []

    cutoff = datetime.now(timezone.utc) - timedelta(days=LOOKBACK_DAYS)
    articles = [a for a in (_parse_article(item, cutoff) for item in news) if a is not None]
    articles.sort(key=lambda a: a["date"], reverse=True)

    counts = {"positive": 0, "negative": 0, "neutral": 0}
    for article in articles:
        counts[article["sentiment"]] += 1

    warnings = []
    if not articles:
        warnings.append(f"No news articles found in the past {LOOKBACK_DAYS} days")

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "type": "sentiment",
        "meta": build_meta("sentiment", duration_ms),
        "data_provenance": build_provenance("yfinance", method="keyword_v1", warnings=warnings),
        "analysis": {
            "article_count": len(articles),
            "counts": counts,
            "overall_sentiment": overall_sentiment(counts),
            "articles": articles[:MAX_ARTICLES],
        },
    }
