import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from televet.core import config
from televet.database import Base, engine, ensure_assignment_schema
from televet.models import appointment, consultation, doctor_settings  # noqa: F401
from televet.routes import assignment_routes, doctor_settings_routes, request_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_assignment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Tele-vet Assignment API Running'}


app.include_router(request_routes.router)
app.include_router(assignment_routes.router, prefix='/assignments')
app.include_router(doctor_settings_routes.router, prefix='/doctors')
