from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env next to the checkout, also when started from another directory
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Backend
    API_URL: str = "http://localhost:8002"
    REQUEST_TIMEOUT_S: float = 10.0
    UPLOAD_TIMEOUT_S: float = 10.0          # face upload has its own budget

    # Customer app for QR enrollment. localhost will not open on a phone
    USER_APP_BASE_URL: str = "http://localhost:5174"

    # Face capture
    CAMERA_INDEX: int = 0
    CAPTURE_INTERVAL_MS: int = 200
    SMILE_THRESHOLD: float = 0.9
    SMILE_WINDOW: int = 10                  # frames averaged into one score

    # Local state
    TOKEN_STORE_PATH: str = "~/.cashier/session.ini"

    LOG_LEVEL: str = "INFO"
    PRICE_CURRENCY: str = "AED"

settings = Settings()
