"""Application configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

import dotenv

dotenv.load_dotenv()


# Project root is two levels up from this file (src/voice_rig_agent/config.py -> project root)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


@dataclass
class AppSettings:
    """Main application settings with environment variable overrides."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Language model
    llm_provider: str = ""
    llm_model: str = ""
    llm_timeout: float = 90.0
    openrouter_site_url: str = ""
    openrouter_site_title: str = ""

    # Cluster
    cluster_connect_timeout: float = 15.0

    # Paths
    credentials_path: str = str(PROJECT_ROOT / "credentials.json")
    cluster_config_path: str = str(PROJECT_ROOT / "cluster.json")
    logo_path: str = str(PROJECT_ROOT / "assets" / "logo.png")

    @classmethod
    def from_env(cls) -> "AppSettings":
        return cls(
            host=os.getenv("APP_HOST", cls.host),
            port=int(os.getenv("APP_PORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            llm_provider=os.getenv("LLM_PROVIDER", cls.llm_provider),
            llm_model=os.getenv("LLM_MODEL", cls.llm_model),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", cls.llm_timeout)),
            openrouter_site_url=os.getenv("OPENROUTER_SITE_URL", cls.openrouter_site_url),
            openrouter_site_title=os.getenv("OPENROUTER_SITE_TITLE", cls.openrouter_site_title),
            cluster_connect_timeout=float(os.getenv("CLUSTER_CONNECT_TIMEOUT", cls.cluster_connect_timeout)),
            credentials_path=os.getenv("CREDENTIALS_PATH", cls.credentials_path),
            cluster_config_path=os.getenv("CLUSTER_CONFIG_PATH", cls.cluster_config_path),
            logo_path=os.getenv("LOGO_PATH", cls.logo_path),
        )


settings = AppSettings.from_env()
