from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./railadmin.db"
    DB_ECHO: bool = False
    
    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "password"
    
    # Application
    PROJECT_NAME: str = "Railway Ticketing Administration"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]
    
    # Ticketing
    TICKET_VALIDITY_HOURS: int = 24
    PLATFORM_TICKET_PRICE: float = 10.0
    MAX_SEATS_PER_CLASS: int = 50
    REPORTS_DIR: str = "reports"
    
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")
    
    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
