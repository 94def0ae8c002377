"""Runtime configuration for taskmatrix.

Settings are read from the environment (optionally via a `.env` file).
The keyword rules below are domain-tuning data, not matcher logic: edit the
pattern lists to adjust which task texts raise the importance floor.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskmatrix.db")

# Classifier
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT_SEC = float(os.getenv("OPENAI_TIMEOUT_SEC", "60"))

# Presentation
TIME_ZONE = os.getenv("TASKMATRIX_TIME_ZONE", "UTC")
LOCALE = os.getenv("TASKMATRIX_LOCALE", "zh")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# Importance keyword rules, evaluated in order (first match wins).
# Each entry: (category, minimum importance, regex fragments).
# Fragments are matched case-insensitively anywhere in the task text.
KEYWORD_RULES = [
    (
        "high_risk",
        80,
        [
            "受伤", "安全", "(?<!不)合规", "税务", "诉讼", "立案", "财产保全", "平台政策", "海关",
            "injur", "safety", "compliance", "tax", "lawsuit", "litigation", "customs", "platform",
        ],
    ),
    (
        "packaging",
        70,
        [
            "说明书", "外箱", "内盒", "包装", "箱唛", "标签", "标识",
            "label", "(?<![a-z])ce(?![a-z])", "rohs",
        ],
    ),
    (
        "reviews",
        70,
        [
            "差评", "评分", "退货", "客诉",
            "bad review", "rating", "return", "complaint",
        ],
    ),
]
