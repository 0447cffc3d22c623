from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DB_URL: str = "sqlite+aiosqlite:///./optical_sales.db"
    DB_SYNC_URL: str = "sqlite:///./optical_sales.db"

    LOG_LEVEL: str = "INFO"

    SALES_ORDER_PREFIX: str = "XS"
    PURCHASE_ORDER_PREFIX: str = "CG"

    # category names (as stored in the product directory) per stock rule
    LENS_CATEGORY_NAMES: list[str] = ["镜片", "lens"]
    FRAME_CATEGORY_NAMES: list[str] = ["镜架", "frame"]

    class Config:
        env_file = ".env"

settings = Settings()
