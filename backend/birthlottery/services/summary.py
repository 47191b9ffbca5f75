"""
Draw result summary: flag, a short comment on the economic starting point,
and the plain-text share message shown next to a result.
"""
from typing import Optional

from birthlottery.services.distribution import Distribution, DistributionEntry

WHITE_FLAG = "\U0001F3F3\uFE0F"
_REGIONAL_INDICATOR_OFFSET = 0x1F1E6 - ord("A")

# (GDP per capita floor in USD, comment), first match wins
GDP_TIERS = [
    (60000, "Congratulations! You were born in a developed economy with a strong start."),
    (30000, "Not bad! A moderately developed country with a good quality of life."),
    (10000, "A developing economy: expect to work hard for it!"),
    (0, "A tough start, but challenges come with opportunities!"),
]

POPULOUS_THRESHOLD = 1.0     # percent
RARE_THRESHOLD = 0.01        # percent

GDP_REFERENCE = 120000       # USD, full GDP bar


def flag_emoji(iso2: Optional[str]) -> str:
    if not iso2 or len(iso2) != 2 or not iso2.isalpha() or not iso2.isascii():
        return WHITE_FLAG
    return "".join(chr(_REGIONAL_INDICATOR_OFFSET + ord(ch)) for ch in iso2.upper())


def comment_for(gdp_per_capita: float, probability: float) -> str:
    comment = GDP_TIERS[-1][1]
    for threshold, text in GDP_TIERS:
        if gdp_per_capita > threshold:
            comment = text
            break

    if probability > POPULOUS_THRESHOLD:
        comment += " It's a populous country, so you'll have plenty of peers!"
    elif probability < RARE_THRESHOLD:
        comment += " It's a small country, you're lucky to land here!"
    return comment


def share_text(entry: DistributionEntry) -> str:
    record = entry.record
    return "\n".join([
        f"I was born in {record.name} in the Birth Lottery!",
        "",
        f"{flag_emoji(record.iso2)} Country: {record.name}",
        f"GDP per capita: ${record.gdp_per_capita:,.0f}",
        f"Birth probability: {entry.probability:.4f}%",
        f"Birth rate: {record.birth_rate_per_mille:.2f}‰",
        f"Region: {record.region or 'Unknown'}",
        "",
        "Try your luck!",
    ])


def summarize(entry: DistributionEntry, distribution: Optional[Distribution] = None) -> dict:
    """Presentation-neutral decorations for a drawn entry."""
    record = entry.record
    summary = {
        "flag": flag_emoji(entry.iso2),
        "comment": comment_for(record.gdp_per_capita, entry.probability),
        "shareText": share_text(entry),
    }
    if distribution is not None:
        top = distribution.max_probability
        summary["relativeProbability"] = round(entry.probability / top * 100, 2) if top > 0 else 0.0
        summary["gdpPercent"] = round(min(record.gdp_per_capita / GDP_REFERENCE * 100, 100.0), 2)
        top_rate = max((e.record.birth_rate_per_mille for e in distribution.entries), default=0.0)
        summary["birthRatePercent"] = (
            round(record.birth_rate_per_mille / top_rate * 100, 2) if top_rate > 0 else 0.0
        )
    return summary
