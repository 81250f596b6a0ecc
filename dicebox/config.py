from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DICEBOX_", extra="ignore"
    )

    # Per-group bounds enforced by the notation parser.
    max_dice_count: int = 1000
    max_die_size: int = 10000
    # Ceiling on count * size for a single group, e.g. 100d100 passes, 500d500 does not.
    max_dice_product: int = 100_000

    # Extra rolls a single exploding die may chain before the roller gives up.
    explosion_limit: int = 1000


settings = Settings()
