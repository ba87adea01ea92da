"""Feed-to-iCalendar conversion."""

from .calendar_builder import PRODUCT_ID, build_calendar, feed_to_ical, serialize_calendar

__all__ = ["PRODUCT_ID", "build_calendar", "feed_to_ical", "serialize_calendar"]
