from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "tumpanich-jwt-secret"
MIN_SECRET_LENGTH = 32
ALLOWED_SLIP_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class Settings(BaseSettings):
    app_name: str = "Tum Panich Ordering API"

    database_url: str = Field(
        default="sqlite+pysqlite:///./test.db",
        validation_alias="TUMPANICH_DATABASE_URL",
    )
    auto_create_schema: bool = True
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    jwt_secret: str = DEFAULT_JWT_SECRET
    admin_roles: str = "ADMIN,STAFF"
    testing: bool = Field(default=False, validation_alias="TUMPANICH_TESTING")

    order_list_default_limit: int = 50
    order_list_max_limit: int = 200
    user_orders_limit: int = 20

    upload_dir: str = "./uploads"
    slip_max_bytes: int = 5 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("order_list_default_limit", "order_list_max_limit", "user_orders_limit")
    @classmethod
    def validate_positive_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("order list limits must be >= 1")
        return value


settings = Settings()


def allowed_origins() -> list[str]:
    return [origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()]


def admin_roles_list() -> list[str]:
    return [value.strip() for value in settings.admin_roles.split(",") if value.strip()]


def ensure_secure_runtime_settings() -> None:
    """Fail fast when production-like runtime uses insecure defaults."""
    if not settings.testing and settings.jwt_secret == DEFAULT_JWT_SECRET:
        raise RuntimeError(
            "JWT_SECRET must be set to a non-default value when TUMPANICH_TESTING is false"
        )
    if not settings.testing and len(settings.jwt_secret) < MIN_SECRET_LENGTH:
        raise RuntimeError(
            "JWT_SECRET must be at least "
            f"{MIN_SECRET_LENGTH} characters when TUMPANICH_TESTING is false"
        )
    if not settings.testing and _is_sqlite_url(settings.database_url):
        raise RuntimeError("TUMPANICH_DATABASE_URL must use postgres when TUMPANICH_TESTING is false")


def _is_sqlite_url(database_url: str) -> bool:
    value = database_url.strip().lower()
    return value.startswith("sqlite")
