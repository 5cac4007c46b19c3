import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./washhub.db")

# Ceiling for a single store operation (seconds). Applied as a server-side
# statement timeout on PostgreSQL and as the connection checkout timeout.
STORE_TIMEOUT_SECONDS = int(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

# Frontend base URL for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "WashHub <noreply@washhub.app>")

# Nearby search tiers (km)
NEARBY_RADIUS_KM = float(os.getenv("NEARBY_RADIUS_KM", "10"))
EXTENDED_RADIUS_KM = float(os.getenv("EXTENDED_RADIUS_KM", "100"))
