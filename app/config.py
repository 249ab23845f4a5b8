import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./workflow.db")

# Reporting calendar
# The business week starts on REPORTING_WEEK_START_WEEKDAY (0=Monday) at
# REPORTING_WEEK_START_HOUR local time in REPORTING_TIMEZONE.
REPORTING_TIMEZONE = os.getenv("REPORTING_TIMEZONE", "Asia/Amman")
REPORTING_WEEK_START_WEEKDAY = int(os.getenv("REPORTING_WEEK_START_WEEKDAY", "3"))
REPORTING_WEEK_START_HOUR = int(os.getenv("REPORTING_WEEK_START_HOUR", "14"))

# Unknown ?period= values resolve to this kind on every analytics endpoint
UNKNOWN_PERIOD_FALLBACK = os.getenv("UNKNOWN_PERIOD_FALLBACK", "monthly")

# Top-N size for freelancer leaderboards
LEADERBOARD_SIZE = int(os.getenv("LEADERBOARD_SIZE", "10"))

# Workflow
# true: reject status changes outside the intended graph with 409
# false: log the unintended transition and apply it anyway (legacy behaviour)
STRICT_STATUS_TRANSITIONS = os.getenv("STRICT_STATUS_TRANSITIONS", "true").lower() == "true"

# Billing
# true: one invoice line item per (work item, freelancer), even across
# reviewed -> needs_fixes -> reviewed cycles or reviewed -> published
BILL_ONCE_PER_WORK_ITEM = os.getenv("BILL_ONCE_PER_WORK_ITEM", "true").lower() == "true"
