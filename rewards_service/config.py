import os

from dotenv import load_dotenv

# Local .env is optional; deployed environments provide real variables.
load_dotenv(encoding="utf-8")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _list_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL") or "sqlite:///./rewards.db"

    CORS_ORIGINS: list[str] = _list_env(
        "CORS_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
    )

    # lifetime of an issued redemption code when the reward has no validity_days
    REDEMPTION_VALIDITY_DAYS: int = int(os.getenv("REDEMPTION_VALIDITY_DAYS") or "30")

    # whether an admin may still mark an expired, unused code as used
    ALLOW_EXPIRED_MARK_USED: bool = _bool_env("ALLOW_EXPIRED_MARK_USED", True)

    HISTORY_MAX_LIMIT: int = int(os.getenv("HISTORY_MAX_LIMIT") or "500")

    LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").upper()


settings = Settings()
