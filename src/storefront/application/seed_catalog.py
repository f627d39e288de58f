"""Application service: Seed Catalog use case.

Loads the demo catalog and the delivery zones.  Zones are upserted on
every run so fee changes here reach existing stores; products are only
inserted into an empty catalog.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.delivery_zone import DeliveryZone
from storefront.domain.model.product import Product, ProductCategory, ProductMetadata
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.logging import get_logger

logger = get_logger(__name__)

_IMAGES = "https://images.unsplash.com"

SEED_PRODUCTS = [
    # (name, category, price, description, image, metadata, stock)
    ("2018 Toyota Camry", "car", 18_500_000, "Premium foreign used sedan",
     f"{_IMAGES}/photo-1550355291-bbee04a92027?auto=format&fit=crop&w=800&q=80",
     {"mileage": "45k mi", "fuel": "Petrol", "transmission": "Auto"}, 3),
    ("2020 Lexus RX 350", "car", 45_000_000, "Luxury SUV, near-new condition",
     f"{_IMAGES}/photo-1533473359331-0135ef1b58bf?auto=format&fit=crop&w=800&q=80",
     {"mileage": "12k mi", "fuel": "Petrol", "transmission": "Auto"}, 2),
    ("2019 Mercedes GLK", "car", 28_000_000, "Well maintained executive SUV",
     f"{_IMAGES}/photo-1549317661-bd32c8ce0db2?auto=format&fit=crop&w=800&q=80",
     {"mileage": "30k mi", "fuel": "Petrol", "transmission": "Auto"}, 1),
    ("Long Grain Rice (50kg)", "grocery", 75_000, "Stone-free premium long grain rice",
     f"{_IMAGES}/photo-1586201375761-83865001e31c?auto=format&fit=crop&w=400&q=80",
     {"unit": "bag"}, 12),
    ("Italian Pasta (20 packs)", "grocery", 12_500, "Durum wheat pasta carton",
     f"{_IMAGES}/photo-1621996346565-e3dbc646d9a9?auto=format&fit=crop&w=400&q=80",
     {"unit": "carton"}, 8),
    ("Fresh Beef (per kg)", "grocery", 4_500, "Freshly cut beef",
     f"{_IMAGES}/photo-1607623814075-e51df1bdc82f?auto=format&fit=crop&w=400&q=80",
     {"unit": "kg"}, 18),
    ("Vegetable Oil (5L)", "grocery", 10_500, "Refined vegetable cooking oil",
     f"{_IMAGES}/photo-1601039641847-7857b994d704?auto=format&fit=crop&w=400&q=80",
     {"unit": "bottle"}, 9),
    ("Beverage Pack", "grocery", 15_000, "Assorted non-alcoholic drinks",
     f"{_IMAGES}/photo-1598511726623-d2199042b5a8?auto=format&fit=crop&w=400&q=80",
     {"unit": "case"}, 5),
]

SEED_ZONES = [
    # (code, name, flat fee, covered)
    ("lagos_mainland", "Lagos Mainland", 3_000, True),
    ("lagos_island", "Lagos Island", 5_000, True),
    ("abuja", "Abuja", 7_000, True),
    ("outside_coverage", "Outside Coverage", 0, False),
]


@dataclass(frozen=True)
class SeedResult:
    products_added: int
    zones_upserted: int


class SeedCatalogHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> SeedResult:
        added = 0
        with self._uow as uow:
            for code, name, fee, covered in SEED_ZONES:
                uow.zones.save(
                    DeliveryZone(code=code, name=name, flat_fee=Money(fee), is_covered=covered)
                )

            if not uow.products.list_all():
                for name, category, price, description, image, meta, stock in SEED_PRODUCTS:
                    kind = ProductCategory(category)
                    uow.products.save(
                        Product(
                            id=uow.products.next_id(),
                            name=name,
                            category=kind,
                            price=Money(price),
                            stock_quantity=stock,
                            description=description,
                            image_url=image,
                            metadata=ProductMetadata.build(kind, meta),
                        )
                    )
                    added += 1
            uow.commit()

        logger.info("Seeded {} products and {} delivery zones", added, len(SEED_ZONES))
        return SeedResult(products_added=added, zones_upserted=len(SEED_ZONES))
