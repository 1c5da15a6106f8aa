# config.py
from dotenv import load_dotenv
import os

load_dotenv()

BACKEND_API_URL = os.getenv("BACKEND_API_URL", "http://localhost:5001/api")
BACKEND_TIMEOUT_SECS = float(os.getenv("BACKEND_TIMEOUT_SECS", "30"))
# upper bound for a single bound-query execution during load or bind
QUERY_TIMEOUT_SECS = float(os.getenv("QUERY_TIMEOUT_SECS", "30"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
AUTH_JWT_ALGORITHM = "HS256"
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE")

CHARTJS_CDN_URL = os.getenv("CHARTJS_CDN_URL", "https://cdn.jsdelivr.net/npm/chart.js@4.4.0/dist/chart.umd.min.js")
EXPORT_BRAND_NAME = os.getenv("EXPORT_BRAND_NAME", "DashForge")
