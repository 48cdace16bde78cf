from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from techphone.core.config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # models must be imported so their tables are registered on Base.metadata
    from techphone.models import orm  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
