from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "marketplace"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    # full URL wins over the postgres_* parts (sqlite for tests)
    database_url_override: Optional[str] = None

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    otp_token_expire_minutes: int = 15

    # Paystack
    paystack_secret_key: str
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_seconds: float = 15.0
    platform_fee_percentage: float = 5.0
    currency: str = "ZAR"
    bank_country: str = "south africa"
    transfer_recipient_type: str = "nuban"

    # Brevo (OTP mail)
    brevo_api_key: Optional[str] = None
    mail_from: str = "no-reply@marketplace.local"
    store_name: str = "Marketplace"

    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    @property
    def database_url(self):
        if self.database_url_override:
            return self.database_url_override
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
