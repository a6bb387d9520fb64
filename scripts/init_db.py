#!/usr/bin/env python3
"""
Database initialization script for ScanBeauty.
Creates the catalog and lead tables; pass --seed to load a demo catalog.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging

from scanbeauty.config import get_settings
from scanbeauty.database import SessionLocal, engine, init_db
from scanbeauty.models import Product

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_CATALOG = [
    {"name": "Latte Detergente Delicato", "category": "Detergente", "price": 18.0,
     "concerns_treated": ["rossori", "sensibilità"], "skin_types": ["tutti i tipi"]},
    {"name": "Gel Detergente Purificante", "category": "Detergente", "price": 16.0,
     "concerns_treated": ["acne", "pori dilatati"], "skin_types": ["grassa", "mista"]},
    {"name": "Tonico Lenitivo", "category": "Tonico", "price": 15.0,
     "concerns_treated": ["rossori"], "skin_types": ["sensibile", "secca"]},
    {"name": "Siero Vitamina C", "category": "Siero", "price": 32.0,
     "concerns_treated": ["macchie", "pigmentazione"], "skin_types": ["tutti i tipi"]},
    {"name": "Siero Sebo-Equilibrante", "category": "Siero", "price": 29.0,
     "concerns_treated": ["acne", "sebo"], "skin_types": ["grassa", "mista"]},
    {"name": "Contorno Occhi Illuminante", "category": "Contorno Occhi", "price": 24.0,
     "concerns_treated": ["occhiaie", "rughe"], "skin_types": ["tutti i tipi"]},
    {"name": "Crema Idratante Leggera", "category": "Crema Viso", "price": 27.0,
     "concerns_treated": ["disidratazione"], "skin_types": ["mista", "grassa", "normale"]},
    {"name": "Crema Ricca Anti-Età", "category": "Crema Viso", "price": 39.0,
     "concerns_treated": ["rughe", "elasticità"], "skin_types": ["secca", "normale"]},
    {"name": "Fluido Solare SPF 50", "category": "Protezione Solare", "price": 22.0,
     "concerns_treated": ["danni solari", "macchie"], "skin_types": ["tutti i tipi"]},
]


async def seed_catalog() -> None:
    async with SessionLocal() as session:
        for row in DEMO_CATALOG:
            session.add(Product(product_url="", **row))
        await session.commit()
    logger.info(f"Seeded {len(DEMO_CATALOG)} demo products")


async def main(seed: bool):
    """Initialize the database"""
    try:
        logger.info("Starting database initialization...")
        logger.info(f"Database URL: {get_settings().database_url}")

        await init_db()
        if seed:
            await seed_catalog()
        logger.info("✅ Database initialized successfully!")

    except Exception as e:
        logger.error(f"❌ Error initializing database: {str(e)}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="load a demo catalog")
    asyncio.run(main(parser.parse_args().seed))
