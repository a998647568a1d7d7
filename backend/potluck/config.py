import os

from dotenv import load_dotenv

# .env wins over any shell env vars, same as the API process
load_dotenv(override=True)

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+asyncpg://localhost/potluck")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# French-first display: "1,5 kg"
SHOPPING_DECIMAL_SEPARATOR = os.getenv("SHOPPING_DECIMAL_SEPARATOR", ",")
SHOPPING_FRAGMENT_SEPARATOR = os.getenv("SHOPPING_FRAGMENT_SEPARATOR", " + ")
