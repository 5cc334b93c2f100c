from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from slhd_admin.settings import Settings

_settings = Settings()

def make_db_url():
    if _settings.database_url:
        return _settings.database_url
    return (
        f"mysql+pymysql://{_settings.mysql_user}:{_settings.mysql_password}"
        f"@{_settings.mysql_host}:{_settings.mysql_port}/{_settings.mysql_database}"
        f"?charset=utf8mb4"
    )

def make_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, pool_recycle=3600)

engine = make_engine(make_db_url())
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

class Base(DeclarativeBase):
    pass

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
