"""Constants for taskmatrix.

This module centralizes the thresholds and score floors shared by the guardrail engine.
The quadrant thresholds mirror the scoring model given to the remote classifier and
must stay identical to it.
"""


# Quadrant thresholds (inclusive)
URGENCY_THRESHOLD = 60
IMPORTANCE_THRESHOLD = 60

# Time units in milliseconds
MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# Due-date proximity buckets: (inclusive upper bound of |due - now|, minimum urgency)
DUE_URGENCY_BUCKETS = [
    (DAY_MS, 60),
    (72 * HOUR_MS, 45),
    (7 * DAY_MS, 30),
]
DUE_URGENCY_FALLBACK = 10

# Due status windows used for display labels
DUE_SOON_WINDOW_MS = DAY_MS
DUE_NEAR_WINDOW_MS = 72 * HOUR_MS

# Quadrant names by locale
QUADRANT_NAMES = {
    "zh": {
        "Q1": "立即执行",
        "Q2": "制定计划",
        "Q3": "授权他人",
        "Q4": "暂不处理",
    },
    "en": {
        "Q1": "Do Now",
        "Q2": "Plan",
        "Q3": "Delegate",
        "Q4": "Defer",
    },
}
DEFAULT_LOCALE = "zh"
