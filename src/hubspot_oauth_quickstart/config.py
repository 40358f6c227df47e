# src/hubspot_oauth_quickstart/config.py

import re
from pathlib import Path
from typing import List, Any, Union, Optional

from dotenv import load_dotenv
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env is at the project root, two levels up from src/hubspot_oauth_quickstart/
CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=True)
    print(f"HubSpotQuickstart: Successfully loaded .env file from: {ENV_FILE_PATH}")
else:
    print(
        f"HubSpotQuickstart: Warning: .env file not found at {ENV_FILE_PATH}. Relying on environment variables."
    )

# Matches the separators accepted in SCOPE: a space, a comma (optionally
# followed by a space) or an already url-encoded space.
SCOPE_SEPARATOR = re.compile(r" |, ?|%20")
LOCALHOST = "LOCALHOST"


class Settings(BaseSettings):
    # === HubSpot environment selection ===
    HUBSPOT_ENV: str = "PROD"

    # === HubSpot app credentials ===
    CLIENT_ID_PROD: str
    CLIENT_SECRET_PROD: str
    CLIENT_ID_QA: Optional[str] = None
    CLIENT_SECRET_QA: Optional[str] = None

    # Allow Pydantic to see this as a string from the env,
    # the validator below converts it to List[str]
    SCOPE: Union[str, List[str]] = ["contacts"]

    # === Where this app is reachable ===
    NODE_ENV: str = "production"
    PORT: int = 80
    DEPLOYED_BASE_URL: str = "https://alex-devex-app.herokuapp.com"

    # === Token lifecycle ===
    # Access tokens are cached for this fraction of the lifetime HubSpot declares.
    ACCESS_TOKEN_EXPIRY_FACTOR: float = 0.75
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # === Session / local dev ===
    SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 4
    OPEN_BROWSER: bool = False

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator("HUBSPOT_ENV", mode='before')
    @classmethod
    def normalize_hubspot_env(cls, v: Any) -> str:
        if v is None:
            return "PROD"
        return "QA" if str(v).strip().upper() == "QA" else "PROD"

    @field_validator("SCOPE", mode='before')
    @classmethod
    def parse_scopes(cls, v: Any) -> List[str]:
        if v is None:
            return ["contacts"]
        if isinstance(v, str):
            scopes = [scope for scope in SCOPE_SEPARATOR.split(v.strip()) if scope]
            return scopes or ["contacts"]
        if isinstance(v, list):
            return v
        raise TypeError(f'SCOPE: Expected a space or comma separated string or a list, got {type(v)}')

    @model_validator(mode='after')
    def check_final_values(self) -> 'Settings':
        if not isinstance(self.SCOPE, list) or not all(isinstance(item, str) for item in self.SCOPE):
            raise ValueError(f"SCOPE ended up as {type(self.SCOPE)}, expected a list of strings.")
        if not 0 < self.ACCESS_TOKEN_EXPIRY_FACTOR <= 1:
            raise ValueError("ACCESS_TOKEN_EXPIRY_FACTOR must be in the range (0, 1].")
        return self

    # === Derived values ===
    @property
    def IS_LOCALHOST(self) -> bool:
        return self.NODE_ENV.strip().upper() == LOCALHOST

    @property
    def APP_BASE_URL(self) -> str:
        if self.IS_LOCALHOST:
            return f"http://localhost:{self.PORT}"
        return self.DEPLOYED_BASE_URL.rstrip("/")

    @property
    def REDIRECT_URI(self) -> str:
        # On successful install, users are sent back to /oauth-callback
        return f"{self.APP_BASE_URL}/oauth-callback"

    @property
    def SCOPE_STRING(self) -> str:
        return " ".join(self.SCOPE)


try:
    settings = Settings()
    print(f"HubSpot Env: {settings.HUBSPOT_ENV}")
    print(f"App Base URL: {settings.APP_BASE_URL}")
    print(f"Redirect URI: {settings.REDIRECT_URI}")
    print(f"Scopes: {settings.SCOPE} (type: {type(settings.SCOPE)})")
except Exception as e:
    print(f"HubSpotQuickstart: Error instantiating Settings (CLIENT_ID_PROD and CLIENT_SECRET_PROD are required): {e}")
    raise
