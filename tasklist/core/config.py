from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://tasklist:tasklist@db:5432/tasklist")
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  # 15 minutes
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  # 30 days
    # emails promoted to admin at signup
    ADMIN_EMAILS = [e.strip().lower() for e in getenv("ADMIN_EMAILS", "").split(",") if e.strip()]
    CRON_SECRET = getenv("CRON_SECRET", "")
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
