from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings.
    """
    model_config = SettingsConfigDict(env_prefix="RTC_TICKET_", env_file=".env", extra="ignore")

    # Service Info
    service_name: str = "rtc-ticket-exporter"
    environment: str = "local"
    log_level: str = "INFO"

    # Exporter defaults
    default_refresh_every_ms: int = 2000
    default_record: bool = False
    default_ticket: bool = True

settings = Settings()
