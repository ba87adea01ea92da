"""Clock helpers for rss2ical.

All wall-clock reads go through now_utc() so tests can pin time with the
RSS2ICAL_TEST_TIME environment variable.
"""

from __future__ import annotations

import datetime
import logging
import os

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

TEST_TIME_ENV = "RSS2ICAL_TEST_TIME"


def now_utc() -> datetime.datetime:
    """Return current UTC time with tzinfo.

    Can be overridden for testing via RSS2ICAL_TEST_TIME environment variable.
    Format: ISO 8601 datetime string (e.g., "2025-07-27T12:00:00Z")

    Returns:
        Current time in UTC with timezone info
    """
    test_time = os.environ.get(TEST_TIME_ENV)
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
            if dt.tzinfo is not None:
                return dt.astimezone(datetime.UTC)
            # Naive override is taken as UTC
            return dt.replace(tzinfo=datetime.UTC)
        except ValueError as e:
            logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)

    return datetime.datetime.now(datetime.UTC)
