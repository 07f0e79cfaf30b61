from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Klaviyo Flow Builder"
    API_PREFIX: str = "/api"
    CORS_ORIGIN: str = "http://localhost:8501"  # Streamlit form
    LOG_LEVEL: str = "INFO"

    # Klaviyo Flows API
    KLAVIYO_API_KEY: str = ""  # Private key; requests fail with 500 until set
    KLAVIYO_API_URL: str = "https://a.klaviyo.com/api/flows/"
    KLAVIYO_REVISION: str = "2024-10-15"

    # Where the Streamlit form posts submissions
    FLOW_API_URL: str = "http://localhost:8000/api/flows"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
