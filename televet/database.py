from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from televet.core import config


engine = create_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_assignment_schema_checked = False

# Columns added after the first deployment of each table.
_MIGRATION_STEPS = {
    'consultations': [
        ('assigned_at', 'ALTER TABLE consultations ADD COLUMN assigned_at TIMESTAMP'),
        ('prescription', 'ALTER TABLE consultations ADD COLUMN prescription TEXT'),
        ('attachments', 'ALTER TABLE consultations ADD COLUMN attachments JSON'),
    ],
    'appointments': [
        ('assigned_at', 'ALTER TABLE appointments ADD COLUMN assigned_at TIMESTAMP'),
        ('prescription', 'ALTER TABLE appointments ADD COLUMN prescription TEXT'),
    ],
}

_INDEX_STATEMENTS = {
    'consultations': [
        'CREATE INDEX IF NOT EXISTS idx_consultations_pending ON consultations(doctor_id, status, created_at)',
        'CREATE INDEX IF NOT EXISTS idx_consultations_doctor_assigned ON consultations(doctor_id, assigned_at)',
    ],
    'appointments': [
        'CREATE INDEX IF NOT EXISTS idx_appointments_pending ON appointments(doctor_id, status, created_at)',
        'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date ON appointments(doctor_id, preferred_date)',
    ],
}


def ensure_assignment_schema() -> None:
    global _assignment_schema_checked

    if _assignment_schema_checked:
        return

    with _schema_lock:
        if _assignment_schema_checked:
            return

        inspector = inspect(engine)
        table_names = set(inspector.get_table_names())

        with engine.begin() as connection:
            for table_name, migration_steps in _MIGRATION_STEPS.items():
                if table_name not in table_names:
                    continue

                existing_columns = {column['name'] for column in inspector.get_columns(table_name)}
                for column_name, statement in migration_steps:
                    if column_name not in existing_columns:
                        connection.execute(text(statement))

                for statement in _INDEX_STATEMENTS[table_name]:
                    connection.execute(text(statement))

        _assignment_schema_checked = True
