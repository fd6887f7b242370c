import json
import logging
from typing import Iterable

from advocates_api.models.advocate_model import Advocate

logger = logging.getLogger(__name__)

CREATE_ADVOCATES_TABLE = """
    CREATE TABLE IF NOT EXISTS advocates (
        id INTEGER PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        city TEXT NOT NULL,
        degree TEXT NOT NULL,
        specialties TEXT NOT NULL DEFAULT '[]',
        years_of_experience INTEGER NOT NULL DEFAULT 0 CHECK (years_of_experience >= 0),
        phone_number TEXT NOT NULL
    )
"""

CREATE_CITY_INDEX = "CREATE INDEX IF NOT EXISTS idx_advocates_city ON advocates (city)"

INSERT_ADVOCATE = """
    INSERT INTO advocates (
        id, first_name, last_name, city, degree, specialties, years_of_experience, phone_number
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


async def create_schema(conn) -> None:
    await conn.execute(CREATE_ADVOCATES_TABLE)
    await conn.execute(CREATE_CITY_INDEX)
    await conn.commit()


async def insert_advocates(conn, advocates: Iterable[Advocate]) -> int:
    rows = [
        (
            advocate.id,
            advocate.first_name,
            advocate.last_name,
            advocate.city,
            advocate.degree,
            json.dumps(list(advocate.specialties)),
            advocate.years_of_experience,
            advocate.phone_number,
        )
        for advocate in advocates
    ]
    await conn.executemany(INSERT_ADVOCATE, rows)
    await conn.commit()
    logger.info(f"💾 Inserted {len(rows)} advocates")
    return len(rows)


def row_to_advocate(row) -> Advocate:
    row_dict = dict(row)
    row_dict["specialties"] = json.loads(row_dict.get("specialties") or "[]")
    return Advocate(**row_dict)
