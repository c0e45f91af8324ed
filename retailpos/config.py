import os


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")

    # Register
    POS_CURRENCY = os.getenv("POS_CURRENCY", "PKR")
    POS_SEED_DATA = _env_bool("POS_SEED_DATA", True)
    POS_CATALOG_FILE = os.getenv("POS_CATALOG_FILE")  # optional .csv / .xlsx import at startup
    POS_WORKERS = int(os.getenv("POS_WORKERS", "4"))

    # Loyalty
    POS_LOYALTY_ENABLED = _env_bool("POS_LOYALTY_ENABLED", True)
    POS_LOYALTY_THRESHOLD = os.getenv("POS_LOYALTY_THRESHOLD", "50000")
    POS_LOYALTY_REWARD_PERCENT = os.getenv("POS_LOYALTY_REWARD_PERCENT", "10")

    # FBR tax authority
    POS_TAX_RATE = os.getenv("POS_TAX_RATE", "0.08")  # manual / fallback rate
    FBR_ENABLED = _env_bool("FBR_ENABLED", False)
    FBR_MODE = os.getenv("FBR_MODE", "simulated")  # simulated | http
    FBR_API_KEY = os.getenv("FBR_API_KEY", "")
    FBR_NTN = os.getenv("FBR_NTN", "")
    FBR_POS_ID = os.getenv("FBR_POS_ID", "")
    FBR_TIMEOUT = float(os.getenv("FBR_TIMEOUT", "5"))
    FBR_INVOICE_URL = os.getenv("FBR_INVOICE_URL", "https://iris.fbr.gov.pk/api/pos/v1/invoice")
    FBR_TAX_RATE_URL = os.getenv("FBR_TAX_RATE_URL", "")
    FBR_SIMULATED_TAX_RATE = os.getenv("FBR_SIMULATED_TAX_RATE", "0.17")
    FBR_SIMULATED_DELAY = float(os.getenv("FBR_SIMULATED_DELAY", "1.5"))

    # AI insights
    AI_ENABLED = _env_bool("AI_ENABLED", False)
    AI_API_KEY = os.getenv("AI_API_KEY") or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    AI_MODEL = os.getenv("AI_MODEL", "gemini-2.5-flash")
    AI_TIMEOUT = float(os.getenv("AI_TIMEOUT", "60"))


class TestConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    FBR_SIMULATED_DELAY = 0.0
    FBR_ENABLED = False
    AI_ENABLED = False
    AI_API_KEY = ""
    POS_CATALOG_FILE = None
