"""Initialize the database - creates all tables and loads reference data."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qbank.database import engine, Base, SessionLocal
import qbank.models  # noqa: F401 - registers all models
from qbank.services.reference_data import seed_reference_data


def init_db():
    print("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
