from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import os
from subrelay.core.constants import DEFAULT_LABEL as _DEFAULT_LABEL
from subrelay.core.constants import DEFAULT_SUBSCRIPTION_NAME as _DEFAULT_SUBSCRIPTION_NAME

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=os.getenv("ENV_FILE", ".env"), extra="ignore")

    APP_NAME: str = "subrelay"
    ENV: str = "dev"

    UPSTREAM_URL: str = "https://dev1.irdevs.sbs/"
    LICENSE_SOURCE_URL: str = "https://dev.ehsanjs.ir/data.json"

    DEFAULT_LABEL: str = _DEFAULT_LABEL
    DEFAULT_SUBSCRIPTION_NAME: str = _DEFAULT_SUBSCRIPTION_NAME

    HTTP_TIMEOUT_SECONDS: int = 15
    UPSTREAM_TLS_VERIFY: bool = True

    CLIENT_DETECTION_ENABLED: bool = False
    CLIENT_REDIRECT_URL: str = "https://t.me/"

    CORS_ORIGINS: str = ""  # comma separated
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        if not self.CORS_ORIGINS:
            return []
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
