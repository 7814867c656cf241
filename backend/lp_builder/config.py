import os
from dotenv import load_dotenv

load_dotenv()


def _split(value):
    return [v.strip() for v in value.split(",") if v.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    BASE_URL = os.getenv("BASE_URL", os.getenv("NEXT_PUBLIC_BASE_URL", "http://localhost:3000"))
    CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "*"))
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024

    # Supabase issues HS256 access tokens for the "authenticated" audience
    SUPABASE_URL = os.getenv("SUPABASE_URL", os.getenv("NEXT_PUBLIC_SUPABASE_URL"))
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
    SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "images")

    JWT_SECRET_KEY = SUPABASE_JWT_SECRET
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_IDENTITY_CLAIM = "sub"
    JWT_DECODE_AUDIENCE = "authenticated"
    JWT_ENCODE_AUDIENCE = "authenticated"

    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
    STRIPE_PRICE_STARTER = os.getenv("STRIPE_PRICE_STARTER", "price_starter")
    STRIPE_PRICE_PRO = os.getenv("STRIPE_PRICE_PRO", "price_pro")
    STRIPE_PRICE_BUSINESS = os.getenv("STRIPE_PRICE_BUSINESS", "price_business")
    STRIPE_PRICE_ENTERPRISE = os.getenv("STRIPE_PRICE_ENTERPRISE", "price_enterprise")
    STRIPE_PRICE_UNLIMITED = os.getenv("STRIPE_PRICE_UNLIMITED", "price_unlimited")

    GOOGLE_GENERATIVE_AI_API_KEY = os.getenv("GOOGLE_GENERATIVE_AI_API_KEY")
    GEMINI_MAX_RETRIES = int(os.getenv("GEMINI_MAX_RETRIES", 3))
    GEMINI_INITIAL_DELAY = float(os.getenv("GEMINI_INITIAL_DELAY", 2.0))

    ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///lp_builder.db")
    JWT_SECRET_KEY = os.getenv("SUPABASE_JWT_SECRET", "dev-jwt-secret")


class ProductionConfig(BaseConfig):
    DEBUG = False

    # Settings create_app refuses to start without
    REQUIRED_SETTINGS = ("JWT_SECRET_KEY", "SQLALCHEMY_DATABASE_URI")


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SUPABASE_URL = None
    SUPABASE_SERVICE_ROLE_KEY = None
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    STRIPE_SECRET_KEY = "sk_test_dummy"
    STRIPE_WEBHOOK_SECRET = "whsec_test"
    GOOGLE_GENERATIVE_AI_API_KEY = "test-google-key"
    GEMINI_INITIAL_DELAY = 0.0
    ENCRYPTION_KEY = "0123456789abcdef0123456789abcdef"
    BASE_URL = "http://localhost:3000"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
