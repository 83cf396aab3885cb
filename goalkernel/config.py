from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/goalkernel"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False
    default_tz: str = "UTC"

    log_level: str = "INFO"
    log_format: str = "text"  # "text" | "json"

    # Goal filter
    pace_distance_tolerance: float = 0.05  # ±5% of race_distance

    # Data quality filter (GPS / sensor outliers)
    quality_filter_enabled: bool = True
    quality_min_distance_m: float = 500.0
    quality_max_distance_m: float = 200_000.0
    quality_min_pace_s_per_km: float = 150.0  # 2:30/km
    quality_max_pace_s_per_km: float = 720.0  # 12:00/km
    quality_max_speed_kmh: float = 25.0

    # Trend projection
    trend_window_points: int = 8
    trend_recent_days: int = 28  # Recent-vs-prior volume window for trend shape

    # Course correction
    max_weekly_increase: float = 0.5  # 50% over current weekly average
    max_weekly_pace_improvement: float = 0.01  # 1% of race time per week

    analysis_cache_size: int = 512

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
