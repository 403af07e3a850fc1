"""
Configuration and constants for the NutriPlan API.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
    OPENAI_IMAGE_MODEL: str = os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1")
    IMAGE_SIZE: str = "1024x1024"

    # Server Configuration
    PORT: int = int(os.getenv("PORT", 10000))
    HOST: str = "0.0.0.0"

    # Upper bound on a whole provider call, retries included (seconds)
    AI_TOTAL_TIMEOUT: float = float(os.getenv("AI_TOTAL_TIMEOUT", 120))

    # AI Temperature Settings
    TEMPERATURE_EXTRACTION: float = 0.0  # Parsing free text / photos
    TEMPERATURE_CREATIVE: float = 0.7    # Plans, recipes, chat
    TEMPERATURE_ANALYSIS: float = 0.5    # Progress and food questions

    # Rate limiting on the action endpoint
    RATE_LIMIT: str = os.getenv("RATE_LIMIT", "30/minute")
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration on startup."""
        missing = []

        if not cls.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )


settings = Settings()
