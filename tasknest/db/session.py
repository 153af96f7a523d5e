from sqlmodel import create_engine, Session
from ..core.config import settings

# Helper function to ensure URL format is correct
def get_db_url():
    url = settings.DATABASE_URL
    if not url:
        return "sqlite:///./tasknest.db"
    return url

db_url = get_db_url()

# --- CONFIGURATION FOR SQLITE ---
if db_url.startswith("sqlite"):
    sync_engine = create_engine(
        db_url,
        echo=settings.SQL_ECHO,
        connect_args={"check_same_thread": False}
    )

# --- CONFIGURATION FOR POSTGRESQL ---
else:
    # SQLAlchemy only accepts the postgresql:// scheme (psycopg2-binary driver)
    pg_url = db_url.replace("postgres://", "postgresql://", 1)
    sync_engine = create_engine(
        pg_url,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10
    )


# Dependency: one session per request, rolled back if the request fails
def get_session():
    with Session(sync_engine) as session:
        yield session
