from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "OUTLOOK_"}

    # Geometry tolerances (planar, CONUS-local units)
    # Grid size every vertex is snapped to before predicates and overlay
    coincident_epsilon: float = 1e-9
    # Anything at or below this area is treated as zero (slivers, touching overlaps)
    area_epsilon: float = 1e-9

    # Overlay: total boundary segments above which the arrangement path is used
    sweep_threshold: int = 64

    # Input cap for a single recompute (all hazards combined)
    max_areas: int = 500

    # App
    log_level: str = "INFO"


settings = Settings()
