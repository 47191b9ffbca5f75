from fastapi import Depends
from sqlalchemy.orm import Session

from birthlottery.core.database import get_db
from birthlottery.services.dataset import distribution_from_payload, load_dataset
from birthlottery.services.distribution import Distribution


def get_distribution(db: Session = Depends(get_db)) -> Distribution:
    """Distribution built from the current (possibly cached) dataset."""
    return distribution_from_payload(load_dataset(db))
