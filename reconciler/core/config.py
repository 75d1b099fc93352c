from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    """Application settings"""
    
    # Drone backend settings
    DRONE1_URL: str = "https://drone.bitgo-dev.com"
    DRONE2_URL: str = "https://drone2.bitgo-ci.com"
    DRONE1_TOKEN: str = ""
    DRONE2_TOKEN: str = ""
    
    # Repository whose builds are compared
    REPO_OWNER: str = "BitGo"
    REPO_NAME: str = "bitgo-microservices"
    
    # None keeps the transport default (no timeout)
    REQUEST_TIMEOUT: Optional[float] = None
    
    # Report settings
    OUTPUT_DELIMITER: str = "\t"
    
    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Drone Build Reconciler"
    
    class Config:
        env_file = ".env"
        case_sensitive = True

# Global settings instance
settings = Settings()
