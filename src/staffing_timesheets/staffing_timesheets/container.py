from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_LOOKUP_LIMIT, DEFAULT_NOTIFICATION_TTL_SECONDS, DEFAULT_WEEK_WINDOW
from .database.connection import DBConfig, DatabaseConnection
from .payroll.allocation.proportional import ProportionalOvertimeAllocator
from .payroll.calculator.standard_calculator import StandardPayCalculator
from .payroll.service import TimesheetCalculationService
from .positions.repository import PositionRepository
from .positions.mysql_position_repository import MySQLPositionRepository
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.reconciler import TimesheetReconciler
from .timesheets.repository import TimesheetGateway


@dataclass(frozen=True)
class Container:
    positions_repo: PositionRepository
    timesheets_repo: TimesheetGateway

    calculation_service: TimesheetCalculationService
    reconciler: TimesheetReconciler

    week_window: int = DEFAULT_WEEK_WINDOW
    notification_ttl_seconds: float = DEFAULT_NOTIFICATION_TTL_SECONDS
    conn: DatabaseConnection | None = None


def build_services(
    *,
    positions_repo: PositionRepository,
    timesheets_repo: TimesheetGateway,
    week_window: int = DEFAULT_WEEK_WINDOW,
    notification_ttl_seconds: float = DEFAULT_NOTIFICATION_TTL_SECONDS,
    lookup_limit: int = DEFAULT_LOOKUP_LIMIT,
    conn: DatabaseConnection | None = None,
) -> Container:
    calculation_service = TimesheetCalculationService(
        allocator=ProportionalOvertimeAllocator(),
        calculator=StandardPayCalculator(),
    )
    reconciler = TimesheetReconciler(timesheets_repo, calculation=calculation_service, lookup_limit=lookup_limit)

    return Container(
        positions_repo=positions_repo,
        timesheets_repo=timesheets_repo,
        calculation_service=calculation_service,
        reconciler=reconciler,
        week_window=int(week_window),
        notification_ttl_seconds=float(notification_ttl_seconds),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    week_window: int = DEFAULT_WEEK_WINDOW,
    notification_ttl_seconds: float = DEFAULT_NOTIFICATION_TTL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        positions_repo=MySQLPositionRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        week_window=week_window,
        notification_ttl_seconds=notification_ttl_seconds,
        conn=conn,
    )
