from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from birthlottery.api.deps import get_distribution
from birthlottery.core.database import get_db
from birthlottery.services.dataset import load_dataset
from birthlottery.services.distribution import Distribution
from birthlottery.services.sampler import lookup
from birthlottery.services.summary import flag_emoji
from birthlottery.schemas.schemas import CountryDetail, DatasetResponse

router = APIRouter(prefix="/api/countries", tags=["Countries"])


@router.get("/", response_model=DatasetResponse)
def get_countries(
    refresh: bool = Query(False, description="Ignore the snapshot and refetch from World Bank"),
    db: Session = Depends(get_db),
):
    """All merged countries with births, weight and probability."""
    return load_dataset(db, force=refresh)


@router.get("/{code}", response_model=CountryDetail)
def get_country(code: str, distribution: Distribution = Depends(get_distribution)):
    """Get a single country by ISO3 or ISO2 code."""
    entry = lookup(distribution, code)
    data = entry.to_dict()
    data["flag"] = flag_emoji(entry.iso2)
    return data
