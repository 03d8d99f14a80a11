'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "Smart Calendar Backend"
    APP_VERSION: str = "0.2.0"
    APP_DESCRIPTION: str = "The backend API for the Smart Calendar scheduling grid."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    BACKEND_CORS_ORIGINS: list[str] = []

    # Grid used when a user has no calendar_config row yet
    DEFAULT_START_HOUR: int = 5
    DEFAULT_START_MINUTE: int = 0
    DEFAULT_END_HOUR: int = 21
    DEFAULT_END_MINUTE: int = 0
    DEFAULT_STEP_MINUTES: int = 30

    # open + trashed tabs allowed per label
    MAX_LABEL_TABS: int = 7

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
