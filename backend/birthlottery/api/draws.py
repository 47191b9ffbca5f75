from fastapi import APIRouter, Depends, Query, Request
from typing import Optional

from birthlottery.api.deps import get_distribution
from birthlottery.core.config import settings
from birthlottery.core.rate_limit import limiter
from birthlottery.services.distribution import Distribution
from birthlottery.services.sampler import TEN_DRAW, draw_many, draw_one, random_source
from birthlottery.services.summary import summarize
from birthlottery.schemas.schemas import DrawResponse, TenDrawResponse

router = APIRouter(prefix="/api/draw", tags=["Draws"])

MAX_BATCH = 100


@router.get("/", response_model=DrawResponse)
@limiter.limit(settings.draw_rate_limit)
def draw(
    request: Request,
    seed: Optional[int] = Query(None, description="Seed for a reproducible draw"),
    distribution: Distribution = Depends(get_distribution),
):
    """Draw one country, weighted by annual births."""
    entry = draw_one(distribution, random_source(seed))
    return {
        "success": True,
        "country": entry.to_dict(),
        "summary": summarize(entry, distribution),
    }


@router.get("/ten", response_model=TenDrawResponse)
@limiter.limit(settings.draw_rate_limit)
def draw_ten(
    request: Request,
    count: int = Query(TEN_DRAW, ge=1, le=MAX_BATCH, description="Number of independent draws"),
    seed: Optional[int] = Query(None, description="Seed for a reproducible batch"),
    distribution: Distribution = Depends(get_distribution),
):
    """
    Batch draw (ten by default). Draws are independent, so the same country
    can come up more than once.
    """
    results = draw_many(distribution, count, random_source(seed))
    return {
        "success": True,
        "count": len(results),
        "results": [
            {**r.to_dict(), "summary": summarize(r.entry, distribution)}
            for r in results
        ],
    }
