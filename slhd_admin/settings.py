from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    version: str = Field(default="v1.2-0004")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    mysql_host: str = Field(default="mariadb", alias="MYSQL_HOST")
    mysql_port: int = Field(default=3306, alias="MYSQL_PORT")
    mysql_database: str = Field(default="slhd", alias="MYSQL_DATABASE")
    mysql_user: str = Field(default="slhd", alias="MYSQL_USER")
    mysql_password: str = Field(default="slhdpass", alias="MYSQL_PASSWORD")
    # overrides the MYSQL_* fields when set (sqlite in tests)
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    cors_allow_origins: str | list[str] = Field(default="*", alias="CORS_ALLOW_ORIGINS")
    api_key: str | None = Field(default=None, alias="API_KEY")

    storage_path: str = Field(default="storage/app/dlh", alias="STORAGE_PATH")
    stats_cache_ttl_sec: int = Field(default=600, alias="STATS_CACHE_TTL_SEC")
    storage_cache_ttl_sec: int = Field(default=3600, alias="STORAGE_CACHE_TTL_SEC")
