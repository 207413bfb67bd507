from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Flight providers
    DUFFEL_API_TOKEN: str = ""
    AMADEUS_CLIENT_ID: str = ""
    AMADEUS_CLIENT_SECRET: str = ""
    AMADEUS_HOSTNAME: str = "test"

    # Hotel providers
    BOOKING_API_KEY: str = ""
    BOOKING_AFFILIATE_ID: str = ""
    SERPAPI_KEY: str = ""

    # Weather
    WEATHER_API_KEY: str = ""

    # AI Config
    AI_PROVIDER: str = "anthropic" # "openai", "gemini" or "anthropic"
    OPENAI_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # Tier markups (cents)
    MARKUP_BASE_CENTS: int = 2500
    MARKUP_PREMIUM_CENTS: int = 4000
    MARKUP_LUXE_CENTS: int = 7500

    # AWIN affiliate ids (Booking.com North America)
    AWIN_PUBLISHER_ID: str = "2705974"
    AWIN_ADVERTISER_ID: str = "6776"

    CURRENCY: str = "USD"
    TRIP_NIGHTS: int = 3
    FETCH_BATCH_SIZE: int = 10
    HTTP_TIMEOUT_SECONDS: float = 15.0
    ADVISOR_TIMEOUT_SECONDS: float = 20.0
    REFUND_WINDOW_MINUTES: int = 60
    PACKAGE_TTL_SECONDS: int = 1800

    ENV: str = "development"
    DEBUG: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

settings = Settings()
