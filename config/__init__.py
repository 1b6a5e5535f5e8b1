# Nginx Manager Deploy v1.0
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_IMAGE = "docker.io/wtation/nginx-manager:latest"
CONFIG_FILE_NAME = "config.env"
COMPOSE_FILE_NAME = "docker-compose.yml"
LOG_FILE_NAME = "nginx-manager-deploy.log"

SERVICE_NAME = "nginx-manager"
NETWORK_NAME = "nginx-network"


@dataclass(frozen=True)
class Settings:
    '''Where the tool keeps its files and what it deploys'''
    work_dir: Path
    image: str = DEFAULT_IMAGE
    log_level: str = "INFO"

    @property
    def config_file(self) -> Path:
        return self.work_dir / CONFIG_FILE_NAME

    @property
    def compose_file(self) -> Path:
        return self.work_dir / COMPOSE_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.work_dir / LOG_FILE_NAME


def load_settings(work_dir=None) -> Settings:
    '''Build settings from the environment (a local .env may override)'''
    load_dotenv()

    if work_dir is None:
        work_dir = os.getenv("NGINX_MANAGER_WORKDIR") or os.getcwd()

    return Settings(
        work_dir=Path(work_dir).expanduser().resolve(),
        image=os.getenv("NGINX_MANAGER_IMAGE", DEFAULT_IMAGE),
        log_level=os.getenv("NGINX_MANAGER_LOG_LEVEL", "INFO").upper(),
    )
