from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    # 项目信息
    APP_NAME: str = "Library Manager"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # 服务监听
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # 日志
    LOG_LEVEL: str = "INFO"

    # 数据库（DATABASE_URL_OVERRIDE 非空时直接使用）
    DATABASE_DIR: Path = Path(__file__).resolve().parent.parent / "data"
    DATABASE_NAME: str = "library.db"
    DATABASE_URL_OVERRIDE: str | None = None

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        self.DATABASE_DIR.mkdir(parents=True, exist_ok=True)
        return f"sqlite+aiosqlite:///{self.DATABASE_DIR / self.DATABASE_NAME}"

    # CORS（前端在其它端口运行，默认放开）
    CORS_ORIGINS: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
