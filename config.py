import os
from dotenv import load_dotenv

load_dotenv()

PORTAL_BASE_URL = os.getenv("PORTAL_BASE_URL", "https://examweb.ggsipu.ac.in")
PORTAL_TIMEOUT = int(os.getenv("PORTAL_TIMEOUT", 30))

CREDITS_CSV_PATH = os.getenv(
    "CREDITS_CSV_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "subject_credits.csv"),
)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

# Portal cookies are only kept in memory; idle sessions are dropped after this.
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", 1800))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
