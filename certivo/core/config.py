from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
from typing import List
import os


load_dotenv()


class Settings(BaseSettings):
    app_name: str = "Certivo API"
    debug: bool = False
    database_url: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    secret_key: str = ""
    access_token_expire_minutes: int = 60 * 24 * 7
    allowed_hosts: str = ""
    static_dir: Path = Path(__file__).parent.parent.parent / "static"
    public_url: str = "http://localhost:8000"

    log_file: str = "logs/application.log"
    log_level: str = "INFO"

    # Certificate issuance
    certificate_code_prefix: str = "CERT-INT"
    code_max_attempts: int = 5
    placeholder_email_domain: str = "certivo.local"

    # When False, every issued/imported certificate is created as 'verified'.
    # When True, the AdminSettings verification defaults decide the status.
    apply_verification_settings: bool = False

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_hosts.split(",") if origin.strip()]


settings = Settings()

if not settings.secret_key:
    raise RuntimeError("Secret key not configured.")


os.makedirs(settings.static_dir, exist_ok=True)
