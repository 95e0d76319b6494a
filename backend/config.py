import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # Credentials (empty = provider not configured)
    apollo_api_key: str = ""
    adzuna_app_id: str = ""
    adzuna_app_key: str = ""
    onet_username: str = ""
    onet_password: str = ""

    # Occupation providers
    local_catalog_enabled: bool = True
    esco_enabled: bool = True
    onet_enabled: bool = True
    local_catalog_priority: int = 3
    esco_priority: int = 2
    onet_priority: int = 1
    esco_base_url: str = "https://ec.europa.eu/esco/api"
    onet_base_url: str = "https://services.onetcenter.org/ws/online"
    occupation_cache_ttl_seconds: int = 30 * 24 * 3600  # 30 days
    max_coordinated_occupations: int = 10

    # Discovery providers
    discovery_provider: str = "apollo"  # "apollo" | "adzuna"
    fallback_provider: str = "adzuna"  # "" disables fallback
    apollo_base_url: str = "https://api.apollo.io"
    adzuna_base_url: str = "https://api.adzuna.com/v1/api/jobs"
    adzuna_country: str = "us"
    adzuna_pages: int = 2
    adzuna_results_per_page: int = 50
    http_timeout_seconds: float = 30.0
    health_check_timeout_seconds: float = 5.0
    http_max_attempts: int = 3
    enrichment_pacing_seconds: float = 1.0  # delay between enrichment calls
    min_viable_companies: int = 5
    search_multiplier: int = 3  # raw candidates requested per target company
    search_radius_miles: float = 150.0

    # Embeddings
    embeddings_enabled: bool = True
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_cache_ttl_seconds: int = 3600
    circuit_breaker_threshold: int = 3
    circuit_breaker_reset_seconds: float = 60.0

    # Ranking calibration
    hard_exclude_penalty: float = 1.0
    soft_exclude_penalty: float = 0.8
    hybrid_legitimate_penalty: float = 0.3
    hiring_boost_factor: float = 0.15
    keyword_important_bonus_cap: float = 0.20
    keyword_important_bonus_step: float = 0.04
    keyword_floor_score: float = 0.15
    # (pool size strictly greater than, threshold) checked in order; last entry is the default
    threshold_table: list[tuple[int, float]] = [(20, 0.50), (10, 0.45), (5, 0.40), (0, 0.35)]

    # Persistence
    database_path: str = "data/discovery.sqlite3"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
