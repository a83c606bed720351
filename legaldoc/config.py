from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

PROFILE = os.getenv("LEGALDOC_PROFILE", "strict")
PROFILE_DIR = Path(os.getenv("LEGALDOC_PROFILE_DIR", "./config/profiles"))

# Hard ceiling for ExtractOptions.max_length
MAX_LENGTH_CEILING = 1_000_000
DEFAULT_MAX_LENGTH = 100_000

USER_AGENT = os.getenv("LEGALDOC_UA", "legaldoc/0.1")
HTTP_TIMEOUT = float(os.getenv("LEGALDOC_HTTP_TIMEOUT", "12"))   # seconds
MAX_RETRIES = int(os.getenv("LEGALDOC_MAX_RETRIES", "3"))
BACKOFF_BASE = float(os.getenv("LEGALDOC_BACKOFF_BASE", "2"))
