from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from catering import config

Base = declarative_base()


def make_engine(url: str):
    # SQLite does not take pool sizing and refuses cross-thread use by default
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


engine = make_engine(config.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
