import os
from dotenv import load_dotenv

from canvass.utils.exceptions import ConfigurationError

# Load environment variables
load_dotenv()

class Settings:
    """Application configuration settings"""
    
    # Database (PostgreSQL with PostGIS)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "2"))
    DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "20"))
    
    # Flask
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key")
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))
    API_VERSION: str = os.getenv("API_VERSION", "v1")
    ALLOWED_ORIGINS: list = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    
    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))
    RATE_LIMIT_PER_HOUR: int = int(os.getenv("RATE_LIMIT_PER_HOUR", "7200"))  # 120 * 60
    RATELIMIT_STORAGE_URI: str = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    
    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")
    SLOW_REQUEST_SECONDS: float = float(os.getenv("SLOW_REQUEST_SECONDS", "2.0"))
    
    # Query ceilings
    MAX_AREA_ACRES: float = float(os.getenv("MAX_AREA_ACRES", "50"))
    MAX_VIEWPORT_AREA_SQ_KM: float = float(os.getenv("MAX_VIEWPORT_AREA_SQ_KM", "5"))
    
    # Field mode
    IN_AREA_THRESHOLD_M: float = float(os.getenv("IN_AREA_THRESHOLD_M", "200"))
    NEARBY_THRESHOLD_M: float = float(os.getenv("NEARBY_THRESHOLD_M", "30"))
    
    # Routes
    DEFAULT_STATE: str = os.getenv("DEFAULT_STATE", "CA")  # address_points only covers California
    DEFAULT_DESTINATION_URL: str = os.getenv("DEFAULT_DESTINATION_URL", "https://www.brightersettings.com/")
    
    @classmethod
    def validate(cls) -> None:
        """Validate required settings"""
        if not cls.DATABASE_URL:
            raise ConfigurationError("DATABASE_URL is required")
        
        if cls.MAX_AREA_ACRES <= 0:
            raise ConfigurationError(f"Invalid MAX_AREA_ACRES: {cls.MAX_AREA_ACRES}")
        
        if cls.MAX_VIEWPORT_AREA_SQ_KM <= 0:
            raise ConfigurationError(f"Invalid MAX_VIEWPORT_AREA_SQ_KM: {cls.MAX_VIEWPORT_AREA_SQ_KM}")
        
        if cls.DB_POOL_MIN < 1 or cls.DB_POOL_MAX < cls.DB_POOL_MIN:
            raise ConfigurationError(f"Invalid pool size: {cls.DB_POOL_MIN}-{cls.DB_POOL_MAX}")

# Create singleton instance
settings = Settings()
