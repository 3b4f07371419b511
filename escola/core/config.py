from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    AUTH_SECRET: str

    # usuario criado no startup (vazio desliga)
    LOGIN_USERNAME: str = "admin"
    TOKEN_TTL_SECONDS: int = 60 * 60 * 24 * 7  # 7 dias

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # duracao de uma aula, usada pra converter carga horaria em aulas
    PERIOD_MINUTES: int = 50

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
