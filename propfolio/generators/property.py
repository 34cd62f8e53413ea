"""Sample property draft generator."""

from __future__ import annotations

import random
from decimal import Decimal
from typing import Iterator

from propfolio.generators.base import BaseGenerator
from propfolio.models import PropertyDraft, PropertyType


class PropertyDraftGenerator(BaseGenerator):
    """Generate realistic UK property drafts for development portfolios."""

    PROPERTY_TYPES = list(PropertyType)
    TYPE_WEIGHTS = [0.35, 0.35, 0.15, 0.10, 0.05]

    # Valuation ranges by type (GBP, thousands)
    VALUATION_RANGES = {
        PropertyType.FLAT: (110, 350),
        PropertyType.HOUSE: (180, 650),
        PropertyType.HMO: (250, 700),
        PropertyType.BUNGALOW: (200, 450),
        PropertyType.COMMERCIAL: (300, 1200),
    }

    # Lettable rooms for an HMO
    HMO_CAPACITY = (4, 8)

    def __init__(self, seed: int | None = None, owner: str = "") -> None:
        super().__init__(seed)
        self.owner = owner

    def generate(self) -> PropertyDraft:
        """Generate a single property draft.

        Returns
        -------
        PropertyDraft
            Generated draft, ready for ``PortfolioStore.add``.
        """
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[PropertyDraft]:
        """Generate multiple property drafts.

        Parameters
        ----------
        count : int
            Number of drafts to generate.

        Yields
        ------
        PropertyDraft
            Generated drafts.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> PropertyDraft:
        property_type = random.choices(self.PROPERTY_TYPES, weights=self.TYPE_WEIGHTS)[0]
        low, high = self.VALUATION_RANGES[property_type]
        # Valuations round to the nearest 5k like agent estimates
        valuation = Decimal(random.randint(low // 5, high // 5) * 5000)

        street = self.fake.street_address()
        if property_type == PropertyType.FLAT:
            street = f"Flat {random.randint(1, 24)}, {street}"

        capacity = None
        if property_type == PropertyType.HMO:
            capacity = random.randint(*self.HMO_CAPACITY)

        return PropertyDraft(
            address=f"{street}, {self.fake.city()}",
            postcode=self.fake.postcode(),
            property_type=property_type,
            valuation=valuation,
            purchase_date=self.fake.date_between(start_date="-20y", end_date="-30d"),
            owner=self.owner,
            description=self.fake.sentence(nb_words=10),
            capacity=capacity,
        )
