from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_TZ = "America/New_York"
DEFAULT_RUN_AT = "16:00"
DEFAULT_USER_AGENT = "ufc-fight-night-notifier/1.0"


class Settings(BaseSettings):
    discord_token: str = ""
    discord_api_base: str = "https://discord.com/api/v10"
    tz: str = DEFAULT_TZ
    run_at: str = DEFAULT_RUN_AT
    run_on_start: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float = 12.0
    reminder_duration_hours: int = 6
    log_level: str = "INFO"
    api_key: str = ""
    api_open: bool = False  # allow write endpoints without API_KEY
    database_url: str = "sqlite+aiosqlite:///data/fightnight.db"

    @field_validator("tz", mode="before")
    @classmethod
    def default_empty_tz(cls, v: str) -> str:
        if not v or not str(v).strip():
            return DEFAULT_TZ
        return v

    @field_validator("run_at", mode="before")
    @classmethod
    def default_empty_run_at(cls, v: str) -> str:
        if not v or not str(v).strip():
            return DEFAULT_RUN_AT
        return v

    @field_validator("user_agent", mode="before")
    @classmethod
    def default_empty_user_agent(cls, v: str) -> str:
        if not v or not str(v).strip():
            return DEFAULT_USER_AGENT
        return v

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "extra": "ignore"}


settings = Settings()
