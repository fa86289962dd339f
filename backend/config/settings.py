from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    """
    Application settings and configuration management.
    Loads environment variables from .env file.
    """

    # ============ API Configuration ============
    API_TITLE: str = "Mock Interview Backend"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ============ Server Configuration ============
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # ============ Database Configuration ============
    DATABASE_URL: str = "sqlite:///./mock_interview.db"
    """SQLAlchemy database connection string (PostgreSQL in production)"""

    # ============ Language Model Configuration ============
    OPENAI_API_KEY: Optional[str] = None
    """API key for the OpenAI-compatible chat completions endpoint"""

    LLM_BASE_URL: Optional[str] = None
    """Alternative OpenAI-compatible base URL (e.g. https://api.groq.com/openai/v1)"""

    LLM_MODEL: str = "gpt-4o-mini"

    QUESTION_MAX_TOKENS: int = 200
    QUESTION_TEMPERATURE: float = 0.7
    EVALUATION_MAX_TOKENS: int = 400

    ORACLE_TIMEOUT_SECONDS: float = 20.0
    """Upper bound for a single question/evaluation call"""

    ORACLE_MAX_RETRIES: int = 0
    """Extra attempts before an oracle call falls back to its placeholder"""

    # ============ Interview Configuration ============
    MAX_TURNS: int = 5
    """Number of questions asked before the interview is evaluated"""

    DEFAULT_TOPICS: List[str] = ["JavaScript", "Python", "React", "Node.js", "SQL"]
    """Topics created on startup when the topics table is empty"""

    # ============ JWT Authentication Configuration ============
    SECRET_KEY: str = "your-secret-key-change-in-production"
    """Secret key for JWT token signing - change in production"""

    ALGORITHM: str = "HS256"
    """JWT algorithm for token encoding"""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    """JWT token expiration time in minutes (8 hours)"""

    # ============ CORS Configuration ============
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:5173",  # Vite dev server
    ]
    """Allowed origins for CORS requests"""

    class Config:
        env_file = ".env"
        """Load environment variables from .env file"""

        env_file_encoding = "utf-8"
        case_sensitive = False

# Create global settings instance
settings = Settings()
