from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    database_url: str = "sqlite:///./purchases.db"

    secret_key: str = "CHANGE_ME_SECRET"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_WEBHOOK_SECRET: str = ""

    payment_currency: str = "INR"
    payment_success_url: str = "http://localhost:5173/payment/success"
    payment_cancel_url: str = "http://localhost:5173/payment/cancel"

    # None -> derived from ENV
    payment_strict_mode: Optional[bool] = None

    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def strict_payments(self) -> bool:
        if self.payment_strict_mode is not None:
            return self.payment_strict_mode
        return self.ENV == "production"

    @property
    def razorpay_configured(self) -> bool:
        return bool(self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET)

    @property
    def allowed_origins(self):
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
