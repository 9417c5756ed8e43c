"""Database initialization utilities."""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from vehicle_care.db import models  # noqa: F401 - ensure model metadata is registered
from vehicle_care.db.session import Base, engine

logger = logging.getLogger(__name__)


def _table_exists(table_name: str) -> bool:
    inspector = inspect(engine)
    return table_name in inspector.get_table_names()


def _get_columns(table_name: str) -> set[str]:
    if not _table_exists(table_name):
        return set()
    inspector = inspect(engine)
    return {column["name"] for column in inspector.get_columns(table_name)}


def _ensure_column(table_name: str, column_name: str, column_ddl: str) -> None:
    existing_columns = _get_columns(table_name)
    if column_name in existing_columns:
        return

    logger.info("Adding column %s.%s", table_name, column_name)
    with engine.begin() as connection:
        connection.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_ddl}"))


def _ensure_index(table_name: str, index_name: str, columns: list[str]) -> None:
    if not _table_exists(table_name):
        return

    columns_sql = ", ".join(columns)
    with engine.begin() as connection:
        connection.execute(
            text(
                f"CREATE INDEX IF NOT EXISTS {index_name} "
                f"ON {table_name} ({columns_sql})"
            )
        )


def init_db() -> None:
    """Create tables and add columns introduced after the first schema."""
    try:
        Base.metadata.create_all(bind=engine)

        _ensure_column(
            table_name="users",
            column_name="notification_preferences",
            column_ddl="notification_preferences JSON",
        )
        _ensure_column(
            table_name="vehicles",
            column_name="last_service_date",
            column_ddl="last_service_date DATE",
        )
        _ensure_column(
            table_name="notifications",
            column_name="sent_via",
            column_ddl="sent_via VARCHAR(16) NOT NULL DEFAULT 'in_app'",
        )

        _ensure_index(
            table_name="notifications",
            index_name="ix_notifications_owner_unread",
            columns=["owner_id", "is_read"],
        )
        _ensure_index(
            table_name="service_records",
            index_name="ix_service_records_vehicle_date",
            columns=["vehicle_id", "service_date"],
        )
    except SQLAlchemyError:
        logger.exception("Database initialization failed.")
        raise
