"""Configuration constants for customer insights."""

# Basket value thresholds (RD$)
LARGE_BASKET_THRESHOLD = 500.0
SMALL_BASKET_THRESHOLD = 100.0

# Dominican payroll days (quincena)
PAYROLL_DAYS = (15, 30)
# Month-end payroll also lands on the 31st for seasonal multipliers
SEASONAL_PAYROLL_DAYS = (15, 30, 31)

# Default lookback windows
FEATURE_LOOKBACK_DAYS = 30
HISTORICAL_LOOKBACK_DAYS = 30
RECENT_TREND_DAYS = 7
SEASONAL_LOOKBACK_DAYS = 90
WEEKLY_LOOKBACK_WEEKS = 4

# Real-time thresholds (multiples of the historical average)
BUSY_MULTIPLIER = 1.5
SLOW_MULTIPLIER = 0.5
HIGH_REVENUE_MULTIPLIER = 1.2
LARGE_BASKET_MULTIPLIER = 1.3

# Weighting of the last week against the 30-day average in revenue forecasts
RECENT_WEIGHT = 0.7
HISTORICAL_WEIGHT = 0.3

# Segment summaries
TOP_CATEGORIES = 5
TOP_PEAK_HOURS = 4
TOP_PEAK_DAYS = 3
SAMPLE_TRANSACTIONS = 20

# Segment confidence by transaction count: (upper bound, confidence)
SEGMENT_CONFIDENCE_STEPS = [(10, 0.3), (50, 0.6), (100, 0.8)]
SEGMENT_CONFIDENCE_MAX = 0.9
