from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def build_engine(url: str):
	"""Create an engine; SQLite connections are shared across request threads."""
	connect_args = {}
	if url.startswith("sqlite"):
		connect_args = {"check_same_thread": False, "timeout": 30}
	return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
