from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Certgen"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Key material
    RSA_KEY_SIZE: int = 2048
    RSA_PUBLIC_EXPONENT: int = 65537

    # Certificate
    CERT_VALIDITY_YEARS: int = 20

    # Pipeline
    GENERATION_TIMEOUT_SECONDS: float = 30.0


settings = Settings()
