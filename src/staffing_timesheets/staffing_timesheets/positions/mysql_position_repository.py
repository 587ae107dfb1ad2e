from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, gateway_errors
from .model import PositionRateProfile
from .repository import PositionRepository


class MySQLPositionRepository(PositionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_rate_profile(self, position_id: str) -> Optional[PositionRateProfile]:
        with gateway_errors("load position"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT position_id, title, regular_pay_rate, regular_bill_rate, overtime_enabled,
                       overtime_threshold_hours, overtime_pay_rate, overtime_bill_rate, markup
                FROM positions
                WHERE position_id=%s
                """,
                (position_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PositionRateProfile.from_mapping(r)
