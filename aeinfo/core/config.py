from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./aeinfo.db"

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    SESSION_COOKIE_NAME: str = "session"
    # empty means the login page is not configured
    LOGIN_URL: str = ""

    # Instance identity
    DEV_APP_SERVER: bool = False
    APP_ID: str = "dev~aeinfo"
    DATACENTER: str = "local"
    DEFAULT_VERSION_HOSTNAME: str = ""
    INSTANCE_ID: str = ""
    MODULE_NAME: str = "default"
    VERSION_ID: str = "1"
    SERVER_SOFTWARE: str = "aeinfo/0.1.0"

    # Runtime sampler
    RUNTIME_SAMPLE_SECONDS: int = 5

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
