"""Utility constants for calmoment.

Time unit constants represent fixed-length durations in seconds.
Months, quarters and years use flat approximations (30, 90 and 365 days);
calendar-exact offsets go through integer arithmetic on a Moment instead.
"""

# Time unit constants (all values in seconds)
SECOND = 1
MINUTE = 60
HOUR = 3600
DAY = 86400
WEEK = 604800
MONTH = 2592000
QUARTER = 7776000
YEAR = 31536000
