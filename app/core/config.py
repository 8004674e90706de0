from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Team Directory API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Team member directory with OTP login verification"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 7000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "team_directory"
    COLLECTION_NAME: str = "teams"
    MONGODB_TRANSACTIONS: bool = False

    # Reserved teams
    ALL_MEMBERS_TEAM_ID: str = "634eefb4b35a8abf6acbdd2a"
    PRIVILEGED_TEAM_ID: str = "634eefb4b35a8abf6acbdd3a"

    # OTP
    OTP_TTL_SECONDS: int = 300
    OTP_SUBJECT: str = "Your login OTP"

    # Email delivery: "console" logs the message, "brevo" sends it
    EMAIL_BACKEND: str = "console"
    BREVO_API_KEY: str = ""
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_FROM: str = ""
    EMAIL_FROM_NAME: str = "Team Directory"
    EMAIL_TIMEOUT_SECONDS: float = 15.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # File Upload
    MAX_FILE_SIZE: int = 5242880
    PROFILE_PICTURE_STORAGE: str = "inline"  # inline | disk
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()
