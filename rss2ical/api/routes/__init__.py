"""HTTP route registration for rss2ical."""

from .calendar_routes import register_calendar_routes

__all__ = ["register_calendar_routes"]
