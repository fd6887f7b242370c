"""
Seed script to populate a local SQLite database with sample advocates.

    python -m advocates_api.db.seed [database_path]
"""
import asyncio
import logging
import sys

from advocates_api.db.schema import create_schema, insert_advocates
from advocates_api.db.session import get_db_connection, get_database_path
from advocates_api.models.advocate_model import Advocate

logger = logging.getLogger(__name__)

SPECIALTY_LABELS = [
    "Bipolar",
    "LGBTQ",
    "Medication/Prescribing",
    "Suicide History/Attempts",
    "General Mental Health (anxiety, depression, stress, grief, life transitions)",
    "Men's issues",
    "Relationship Issues (family, friends, couple, etc)",
    "Trauma & PTSD",
    "Personality disorders",
    "Personal growth",
    "Substance use/abuse",
    "Pediatrics",
    "Women's issues (post-partum, infertility, family planning)",
    "Chronic pain",
    "Weight loss & nutrition",
    "Eating disorders",
    "Diabetic Diet and nutrition",
    "Coaching (leadership, career, academic and wellness)",
    "Life coaching",
    "Obsessive-compulsive disorders",
    "Neuropsychological evaluations & testing (ADHD testing)",
    "Attention and Hyperactivity (ADHD)",
    "Sleep issues",
    "Schizophrenia and psychotic disorders",
    "Learning disorders",
    "Domestic abuse",
]

_SEED_ROWS = [
    ("John", "Doe", "New York", "MD", [0, 4, 7], 10, "5551234567"),
    ("Jane", "Smith", "Los Angeles", "PhD", [1, 5], 8, "5559876543"),
    ("Alice", "Johnson", "Chicago", "MSW", [2, 8, 9], 5, "5554567890"),
    ("Michael", "Brown", "Houston", "MD", [3, 10], 12, "5556543210"),
    ("Emily", "Davis", "Phoenix", "PhD", [11, 12], 7, "5553210987"),
    ("Chris", "Martinez", "Philadelphia", "MSW", [13, 14], 9, "5557890123"),
    ("Jessica", "Taylor", "San Antonio", "MD", [15, 16], 11, "5554561234"),
    ("David", "Harris", "San Diego", "PhD", [17, 18], 6, "5557896543"),
    ("Laura", "Clark", "Dallas", "MSW", [19, 20], 4, "5550123456"),
    ("Daniel", "Lewis", "San Jose", "MD", [21, 22], 13, "5553217654"),
    ("Sarah", "Lee", "Austin", "PhD", [23, 24], 10, "5551238765"),
    ("James", "King", "Jacksonville", "MSW", [25, 0], 5, "5556540987"),
    ("Megan", "Green", "San Francisco", "MD", [1, 7, 4], 14, "5553216543"),
    ("Joshua", "Walker", "Columbus", "PhD", [5, 9], 9, "5559873456"),
    ("Amanda", "Hall", "Fort Worth", "MSW", [6, 8], 3, "5554567891"),
]

SEED_ADVOCATES = [
    Advocate(
        id=index,
        first_name=first_name,
        last_name=last_name,
        city=city,
        degree=degree,
        specialties=[SPECIALTY_LABELS[i] for i in specialty_indexes],
        years_of_experience=years,
        phone_number=phone,
    )
    for index, (first_name, last_name, city, degree, specialty_indexes, years, phone) in enumerate(_SEED_ROWS, start=1)
]


async def seed_database(database_path: str) -> int:
    logger.info(f"🌱 Seeding {database_path}")
    async with get_db_connection(database_path) as conn:
        await create_schema(conn)
        await conn.execute("DELETE FROM advocates")
        count = await insert_advocates(conn, SEED_ADVOCATES)
    logger.info(f"✅ Seeded {count} advocates")
    return count


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    target = sys.argv[1] if len(sys.argv) > 1 else get_database_path()
    try:
        asyncio.run(seed_database(target))
    except KeyboardInterrupt:
        print("\n\nSeed cancelled by user")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Fatal error: {str(e)}")
        sys.exit(1)
