# catering/migrations.py: idempotent schema + seed step, run once at startup
import logging
from typing import Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, configure_mappers, sessionmaker

import catering.models  # noqa: F401  (register every table before create_all)
from catering.db import Base
from catering.models.catalog import Flavor
from catering.models.email import EmailSetting, EmailTemplate
from catering.notify.dispatcher import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)

# Columns added after the first release; create_all does not touch existing
# tables, so older databases get them through ALTER TABLE.
ADDED_COLUMNS = {
    "orders": {
        "rejection_reason": "TEXT",
        "courier_status": "VARCHAR(32)",
        "courier_notes": "TEXT",
        "production_done": "BOOLEAN NOT NULL DEFAULT 0",
        "production_done_at": "DATETIME",
        "kitchen_notified": "BOOLEAN NOT NULL DEFAULT 0",
    },
    "email_templates": {
        "customer_subject": "VARCHAR(255) NOT NULL DEFAULT ''",
        "customer_body_html": "TEXT NOT NULL DEFAULT ''",
    },
}

DEFAULT_FLAVORS = [
    ("Cheese", "feta, ricotta"),
    ("Spinach Artichoke", "artichoke heart, garlic confit"),
    ("Potato Leek", "roasted Yukons, caramelized leek"),
    ("Seasonal", "varies"),
]


def add_missing_columns(engine: Engine) -> int:
    insp = inspect(engine)
    added = 0
    with engine.begin() as conn:
        for table, columns in ADDED_COLUMNS.items():
            if not insp.has_table(table):
                continue
            existing = {c["name"] for c in insp.get_columns(table)}
            for name, ddl in columns.items():
                if name not in existing:
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                    logger.info("Column %s.%s added", table, name)
                    added += 1
    return added


def seed_flavors(db: Session) -> None:
    # only an empty catalog is seeded; deleted flavors stay deleted
    if db.query(Flavor).count():
        return
    for i, (name, description) in enumerate(DEFAULT_FLAVORS, start=1):
        db.add(Flavor(name=name, description=description, sort_order=i))
    logger.info("Seeded %d flavors", len(DEFAULT_FLAVORS))


def seed_email(db: Session) -> None:
    for trigger, tpl in DEFAULT_TEMPLATES.items():
        if db.get(EmailSetting, trigger) is None:
            db.add(EmailSetting(trigger_name=trigger, enabled=True, recipients=""))
        if db.get(EmailTemplate, trigger) is None:
            db.add(EmailTemplate(trigger_name=trigger, **tpl))


def run_migrations(engine: Engine, seed: bool = True) -> None:
    """Create tables, add late columns, seed defaults. Safe to run repeatedly."""
    configure_mappers()
    Base.metadata.create_all(bind=engine)
    add_missing_columns(engine)

    if not seed:
        return
    db = sessionmaker(bind=engine)()
    try:
        seed_flavors(db)
        seed_email(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))


def main(engine: Optional[Engine] = None):
    from catering.db import engine as default_engine

    logging.basicConfig(level=logging.INFO)
    run_migrations(engine or default_engine)


if __name__ == "__main__":
    main()
