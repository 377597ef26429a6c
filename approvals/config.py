from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    MAX_BODY_SIZE: int = 65536
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Currency used when an amount trigger arrives without a currency leaf
    DEFAULT_CURRENCY: str = "EUR"
    # Boilerplate literal emitted as the first element of every encoded trigger
    LEADING_GUARD: str = "{event_name == 'submitted_for_approval'}"
    # Re-emit conditions the editor does not understand when saving a policy
    PRESERVE_UNKNOWN_CONDITIONS: bool = True

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
