import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./storefront_billing.db")
    DB_AUTO_CREATE = bool(data.get("DB_AUTO_CREATE", True))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    INTERNAL_API_TOKEN = data.get("INTERNAL_API_TOKEN", "")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Credit ledger
    LEDGER_TIMEZONE = data.get("LEDGER_TIMEZONE", "UTC")  # Month boundaries are computed in this zone
    MONTHLY_CREDITS = data.get("MONTHLY_CREDITS", 50)
    WELCOME_CREDITS = data.get("WELCOME_CREDITS", 50)
    PURCHASE_BONUS_PER_ITEM = data.get("PURCHASE_BONUS_PER_ITEM", 10)
    DEFAULT_CREDIT_COST = data.get("DEFAULT_CREDIT_COST", 1)
    CREDIT_PRICE_TABLE = data.get(
        "CREDIT_PRICE_TABLE",
        {
            "flux-dev": 1,
            "lora-normal": 1,
            "lora-context": 1,
            "nano-banana": 0.5,
            "nano-banana-pro": 2,
            "gemini-flash": 1,
        },
    )

    # Guest quota
    GUEST_DAILY_LIMIT = data.get("GUEST_DAILY_LIMIT", 3)
    GUEST_WINDOW_HOURS = data.get("GUEST_WINDOW_HOURS", 24)

    # Checkout / payment provider
    PAYMENT_PROVIDER_URL = data.get("PAYMENT_PROVIDER_URL", "")  # Empty = in-memory sandbox
    PAYMENT_PROVIDER_TOKEN = data.get("PAYMENT_PROVIDER_TOKEN", "")
    PAYMENT_PROVIDER_LOCATION_ID = data.get("PAYMENT_PROVIDER_LOCATION_ID", "")
    PAYMENT_PROVIDER_TIMEOUT_SECONDS = data.get("PAYMENT_PROVIDER_TIMEOUT_SECONDS", 15)
    CURRENCY = data.get("CURRENCY", "USD")

    # Ledger reconciliation worker
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily

    # Monthly reset sweep worker
    MONTHLY_RESET_ENABLED = bool(data.get("MONTHLY_RESET_ENABLED", True))
    MONTHLY_RESET_INTERVAL_SECONDS = data.get("MONTHLY_RESET_INTERVAL_SECONDS", 3600)
    MONTHLY_RESET_BATCH_SIZE = data.get("MONTHLY_RESET_BATCH_SIZE", 500)
