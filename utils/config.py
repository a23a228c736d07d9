import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./restaurant_qr.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Table sessions
SESSION_DURATION_HOURS = int(os.getenv("SESSION_DURATION_HOURS", 4))

# Orders
DEFAULT_ESTIMATED_TIME = int(os.getenv("DEFAULT_ESTIMATED_TIME", 20))
MAX_ORDER_AMOUNT = float(os.getenv("MAX_ORDER_AMOUNT", 100000))
MAX_ITEM_QUANTITY = 99

# Feedback
FEEDBACK_RATE_LIMIT = int(os.getenv("FEEDBACK_RATE_LIMIT", 3))
FEEDBACK_RATE_WINDOW_SECONDS = int(os.getenv("FEEDBACK_RATE_WINDOW_SECONDS", 60))
FEEDBACK_LIST_LIMIT = int(os.getenv("FEEDBACK_LIST_LIMIT", 50))
