"""
Seed demo data so a fresh install has something to show.

Creates three areas, five categories and eight plants with a short growth
history. Seeding is skipped when any area already exists.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from app.utils.time import local_today

if TYPE_CHECKING:
    from app.services.application.garden_service import GardenService

logger = logging.getLogger(__name__)

DEMO_AREAS = [
    {"name": "Backyard Garden", "emoji": "🏡", "description": "Main vegetable beds", "cover_color": "#7CB342"},
    {"name": "Balcony Pots", "emoji": "🪴", "description": "Herbs and flowers in containers", "cover_color": "#FFB74D"},
    {"name": "Greenhouse", "emoji": "🌿", "description": "Seedlings and tomatoes", "cover_color": "#4DB6AC"},
]

DEMO_CATEGORIES = [
    {"name": "Vegetables", "emoji": "🥕"},
    {"name": "Herbs", "emoji": "🌿"},
    {"name": "Flowers", "emoji": "🌸"},
    {"name": "Fruits", "emoji": "🍓"},
    {"name": "Succulents", "emoji": "🌵"},
]

# (name, area, category, variety, days since planting, growth notes)
DEMO_PLANTS = [
    ("Tomato", "Greenhouse", "Vegetables", "Cherry", 45, ["First true leaves", "Flowering", "First green fruit"]),
    ("Basil", "Balcony Pots", "Herbs", "Genovese", 30, ["Pinched the tops", "Bushy and fragrant"]),
    ("Carrot", "Backyard Garden", "Vegetables", "Nantes", 60, ["Thinned the row", "Tops are 15 cm"]),
    ("Lavender", "Balcony Pots", "Flowers", "Hidcote", 90, ["New buds"]),
    ("Strawberry", "Backyard Garden", "Fruits", "Albion", 40, ["Runners appearing", "First berries"]),
    ("Mint", "Balcony Pots", "Herbs", None, 25, ["Spreading fast"]),
    ("Aloe", "Greenhouse", "Succulents", "Vera", 120, []),
    ("Zucchini", "Backyard Garden", "Vegetables", "Black Beauty", 35, ["Big leaves", "First flower"]),
]


def seed_demo_data(garden_service: "GardenService") -> dict[str, Any]:
    """Load the demo garden. Returns counts of what was created."""
    if garden_service.list_areas():
        logger.info("Garden already has areas; skipping demo seed")
        return {"seeded": False, "areas": 0, "categories": 0, "plants": 0, "growth_logs": 0}

    areas = {a["name"]: garden_service.create_area(**a)["area_id"] for a in DEMO_AREAS}
    categories = {c["name"]: garden_service.add_category(**c)["category_id"] for c in DEMO_CATEGORIES}

    today = local_today(garden_service.tz)
    log_count = 0
    for name, area, category, variety, age_days, notes in DEMO_PLANTS:
        planted = today - timedelta(days=age_days)
        plant = garden_service.add_plant(
            name,
            categories[category],
            areas[area],
            variety=variety,
            date_planted=planted.isoformat(),
        )
        # Spread notes evenly between planting and today
        step = age_days // (len(notes) + 1) if notes else 0
        for index, note in enumerate(notes, start=1):
            garden_service.add_growth_log(
                plant["plant_id"], date=(planted + timedelta(days=step * index)).isoformat(), note=note
            )
            log_count += 1

    logger.info(
        "Seeded demo garden: %s areas, %s categories, %s plants, %s growth logs",
        len(areas), len(categories), len(DEMO_PLANTS), log_count,
    )
    return {
        "seeded": True,
        "areas": len(areas),
        "categories": len(categories),
        "plants": len(DEMO_PLANTS),
        "growth_logs": log_count,
    }
