from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./quotes.db"
    COMPANY_NAME: str = "Precision CNC Quoting"

    # Rate card used when a quote request names no region
    DEFAULT_REGION: str = "default"
    DEFAULT_CURRENCY: str = "USD"

    # Machining time heuristic: base + cbrt(volume_mm3) / scale, in minutes
    MACHINING_BASE_SETUP_MIN: float = 10.0
    MACHINING_VOLUME_SCALE: float = 10.0

    # Quantity discount ceiling (fraction of subtotal)
    MAX_QUANTITY_DISCOUNT: float = 0.20

    SEED_ON_STARTUP: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
