from pydantic import BaseModel, Field
from typing import Dict, List, Optional


# ─── Country Schemas ───

class CountryEntry(BaseModel):
    id: str
    name: str
    iso2: str
    region: str
    income_level: str = Field("", alias="incomeLevel")
    capital: str = ""
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    birth_rate: float = Field(alias="birthRate")          # per 1,000 people
    population: float
    gdp_per_capita: float = Field(0, alias="gdpPerCapita")
    births: int
    weight: float                                          # unrounded births
    probability: float                                     # percent
    eligible: bool

    class Config:
        populate_by_name = True


class CountryDetail(CountryEntry):
    flag: str


class DatasetResponse(BaseModel):
    success: bool
    timestamp: int
    data_year: Dict[str, int] = Field(default_factory=dict, alias="dataYear")
    total_countries: int = Field(alias="totalCountries")
    eligible_countries: int = Field(alias="eligibleCountries")
    excluded_countries: int = Field(alias="excludedCountries")
    total_births: int = Field(alias="totalBirths")
    countries: List[CountryEntry]

    class Config:
        populate_by_name = True


# ─── Draw Schemas ───

class DrawSummary(BaseModel):
    flag: str
    comment: str
    share_text: str = Field(alias="shareText")
    relative_probability: Optional[float] = Field(None, alias="relativeProbability")
    gdp_percent: Optional[float] = Field(None, alias="gdpPercent")
    birth_rate_percent: Optional[float] = Field(None, alias="birthRatePercent")

    class Config:
        populate_by_name = True


class DrawResponse(BaseModel):
    success: bool = True
    country: CountryEntry
    summary: DrawSummary


class RankedDraw(CountryEntry):
    rank: int
    summary: DrawSummary


class TenDrawResponse(BaseModel):
    success: bool = True
    count: int
    results: List[RankedDraw]
