"""CleanQuest Device Configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "CleanQuest"
    app_origin: str = "https://cleanquest.app"  # share links: <origin>?join=<CODE>
    host: str = "127.0.0.1"
    port: int = 8090
    debug: bool = False

    # Paths
    data_dir: Path = Path.home() / "cleanquest" / "data"

    # Local store
    db_path: Path = Path.home() / "cleanquest" / "data" / "cleanquest.db"

    # Remote registry (Firebase Realtime Database REST)
    remote_database_url: str = ""  # empty = no remote, local only
    remote_auth_token: str = ""
    remote_timeout_seconds: float = 5.0

    # Family records
    merge_strategy: str = "last_writer_wins"  # 'last_writer_wins' | 'union_members'

    # Validation
    username_min_length: int = 3
    password_min_length: int = 4
    chat_max_length: int = 500

    model_config = {"env_prefix": "CLEANQUEST_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_dirs()
