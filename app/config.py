from enum import Enum

from pydantic_settings import BaseSettings


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    db_url: str = "sqlite+aiosqlite:///foodora.db"
    log_level: str = "INFO"
    auth_token: str = "keyboardcat"
    login_delay: float = 2.0
