# branchwatch/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# Address matching thresholds (static, never learned)
STRICT_THRESHOLD = float(os.getenv("STRICT_THRESHOLD", "0.83"))
WEAK_THRESHOLD = float(os.getenv("WEAK_THRESHOLD", "0.73"))

# Schedule comparison: "exact" ignores the tolerance, "tolerant" applies it
SCHEDULE_MATCH_MODE = os.getenv("SCHEDULE_MATCH_MODE", "exact")
SCHEDULE_TOLERANCE_MINUTES = int(os.getenv("SCHEDULE_TOLERANCE_MINUTES", "0"))

# Runtime parameters
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
RECENT_WINDOW_HOURS = 24

# File names
COMPANIES_CSV = os.getenv("COMPANIES_CSV", "companies.csv")
BRANCHES_JSON = os.getenv("BRANCHES_JSON", "data/branches.json")
SNAPSHOT_JSON = os.getenv("SNAPSHOT_JSON", "data/branches-snapshot.json")
MAPPING_JSON = os.getenv("MAPPING_JSON", "data/mapping.json")
DISCREPANCIES_CSV = os.getenv("DISCREPANCIES_CSV", "discrepancies.csv")
