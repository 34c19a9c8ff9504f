"""
Seed Sweets Script
Populates an empty catalog with the starter assortment.
Safe to run repeatedly: does nothing when sweets already exist.

    python -m app.scripts.seed_sweets
"""

import logging
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.config import get_settings
from app.database import create_db_and_tables, engine
from app.models.sweet import Sweet
from app.repositories.sweet_repo import SweetRepository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STARTER_SWEETS = [
    ("Chocolate Truffles", "Chocolate", "12.99", 50,
     "Rich dark chocolate truffles with a smooth ganache center"),
    ("Strawberry Gummies", "Gummy", "5.99", 100,
     "Soft and chewy strawberry-flavored gummy candies"),
    ("Mint Chocolate Bar", "Chocolate", "3.99", 75,
     "Refreshing mint chocolate bar with crispy bits"),
    ("Sour Rainbow Strips", "Sour", "4.99", 80,
     "Tangy rainbow-colored sour candy strips"),
    ("Caramel Fudge", "Caramel", "8.99", 40,
     "Smooth and creamy homemade caramel fudge"),
    ("Lemon Drops", "Hard Candy", "3.49", 120,
     "Classic lemon-flavored hard candy drops"),
]


def seed_sweets(session: Session, image_url: str) -> int:
    """Insert the starter sweets if the table is empty. Returns rows created."""
    repo = SweetRepository()
    if repo.count(session) > 0:
        logger.info("Sweets already present, skipping seed")
        return 0

    for name, category, price, quantity, description in STARTER_SWEETS:
        session.add(
            Sweet(
                name=name,
                category=category,
                price=Decimal(price),
                quantity=quantity,
                description=description,
                image_url=image_url,
            )
        )
    session.commit()
    logger.info("Seeded %d sweets", len(STARTER_SWEETS))
    return len(STARTER_SWEETS)


def main(bind: Engine | None = None) -> int:
    bind = bind or engine
    create_db_and_tables(bind)
    with Session(bind) as session:
        return seed_sweets(session, get_settings().DEFAULT_IMAGE_URL)


if __name__ == "__main__":
    main()
