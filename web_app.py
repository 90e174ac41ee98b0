"""
Vintage Crib Cross-Poster - Web App
Run with: python web_app.py
"""

import logging
import os

from crosspost.config import Settings
from crosspost.database import InMemoryStore
from crosspost.logging_config import configure_logging
from crosspost.publisher import CrossPostingEngine
from crosspost.web import create_app

configure_logging()
logger = logging.getLogger("crosspost.web_app")

settings = Settings.from_env()

if settings.database_url:
    from crosspost.database.db import Database
    store = Database.from_settings(settings)
    store.create_tables()
else:
    logger.warning("⚠️  DATABASE_URL not set; using the in-memory store (data is lost on restart)")
    store = InMemoryStore()

engine = CrossPostingEngine.from_settings(settings, store)
app = create_app(engine, store, settings)


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG") == "1")
