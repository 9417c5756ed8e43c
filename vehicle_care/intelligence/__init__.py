"""Deterministic service-due rules and channel preferences."""

from vehicle_care.intelligence.due_calculator import (
    DueStatus,
    NextService,
    calculate_next_service,
    evaluate_due_status,
    initial_service_due,
    is_upcoming,
    scan_due_status,
)
from vehicle_care.intelligence.preferences import NotificationPreferences, resolve_channels

__all__ = [
    "DueStatus",
    "NextService",
    "NotificationPreferences",
    "calculate_next_service",
    "evaluate_due_status",
    "initial_service_due",
    "is_upcoming",
    "resolve_channels",
    "scan_due_status",
]
