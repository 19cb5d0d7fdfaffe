from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    APP_ENV: str = "dev"
    APP_SECRET: str
    DB_URL: str
    JWT_ISS: str = "shopbill"
    JWT_EXP_MIN: int = 24*60
    TZ: str = "UTC"
    LOG_LEVEL: str = "INFO"
    LOW_STOCK_THRESHOLD: int = 10
    CORS_ORIGINS: list[str] = ["*"]
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
