from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "parcelDB"

    # Jetons d'identité (émis par le fournisseur d'identité)
    JWT_SECRET: str = "changeme_minimum_32_chars_here_please"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # Passerelle de paiement (Stripe)
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_API_URL: str = "https://api.stripe.com/v1"
    PAYMENT_CURRENCY: str = "usd"
    PAYMENT_INTENT_RATE_LIMIT: str = "10/minute"

    model_config = SettingsConfigDict(
        env_file=[".env", "../.env"],  # cherche dans backend/ puis dans la racine
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
