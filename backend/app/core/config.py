import os

from dotenv import load_dotenv


def str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def merge_unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in items:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


class Settings:
    def __init__(self) -> None:
        # Only load .env for local/dev. In prod, env vars come from the service config.
        self.ENV = os.getenv("ENV", "dev").strip().lower()  # dev | prod
        if self.ENV != "prod":
            load_dotenv()

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

        # ----------------------------
        # Tenant stores
        # ----------------------------
        self.SEWING_DATABASE_URL = os.getenv("SEWING_DATABASE_URL", "").strip()
        self.UPHOLSTERY_DATABASE_URL = os.getenv("UPHOLSTERY_DATABASE_URL", "").strip()

        # ----------------------------
        # Password hashing / policy
        # ----------------------------
        # argon2 time cost; raise it as hardware gets faster.
        self.PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "3"))
        self.PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "10"))

        # ----------------------------
        # CORS
        # ----------------------------
        dev_defaults = [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]

        cors_from_env = parse_csv(os.getenv("CORS_ORIGINS"))
        if self.ENV == "prod":
            self.CORS_ORIGINS = merge_unique(cors_from_env)
        else:
            self.CORS_ORIGINS = merge_unique(cors_from_env + dev_defaults)

        # ----------------------------
        # Auth / JWT
        # ----------------------------
        self.JWT_SECRET = os.getenv("JWT_SECRET", "")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_ISSUER = os.getenv("JWT_ISSUER", "candidate-directory").strip()
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

        # ----------------------------
        # Geocoding / enrichment
        # ----------------------------
        self.POSTCODE_API_BASE_URL = (
            os.getenv("POSTCODE_API_BASE_URL", "https://api.postcodes.io").strip().rstrip("/")
        )
        self.GEOCODE_TIMEOUT_SECONDS = float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "3.0"))
        self.GEOCODE_CACHE_SIZE = int(os.getenv("GEOCODE_CACHE_SIZE", "1024"))
        self.ENRICHMENT_MAX_WORKERS = int(os.getenv("ENRICHMENT_MAX_WORKERS", "8"))
        self.ENRICHMENT_BUDGET_SECONDS = float(os.getenv("ENRICHMENT_BUDGET_SECONDS", "8.0"))

        self.ENABLE_DOCS = str_to_bool(os.getenv("ENABLE_DOCS"), default=self.ENV != "prod")

        # Final: fail fast in prod
        self._validate_prod()

    def _validate_prod(self) -> None:
        if self.ENV != "prod":
            return

        missing: list[str] = []

        if not self.JWT_SECRET:
            missing.append("JWT_SECRET")
        if not self.SEWING_DATABASE_URL:
            missing.append("SEWING_DATABASE_URL")
        if not self.UPHOLSTERY_DATABASE_URL:
            missing.append("UPHOLSTERY_DATABASE_URL")
        if not self.CORS_ORIGINS:
            missing.append("CORS_ORIGINS")

        cors_joined = ",".join(self.CORS_ORIGINS)
        if "localhost" in cors_joined or "127.0.0.1" in cors_joined:
            raise RuntimeError("CORS_ORIGINS contains localhost/dev origins in prod")

        if self.POSTCODE_API_BASE_URL and not self.POSTCODE_API_BASE_URL.startswith("https://"):
            raise RuntimeError("POSTCODE_API_BASE_URL should be https://... in prod")

        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    def database_url_for(self, tenant: str) -> str:
        urls = {
            "sewing": self.SEWING_DATABASE_URL,
            "upholstery": self.UPHOLSTERY_DATABASE_URL,
        }
        url = urls.get(tenant, "")
        if not url:
            raise RuntimeError(f"No database URL configured for tenant '{tenant}'")
        return url


settings = Settings()


def require_jwt_secret() -> None:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set")
