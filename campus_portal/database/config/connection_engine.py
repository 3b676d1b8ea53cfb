"""
SQLAlchemy engine and declarative base of the portal database.

The URL is assembled from the ``DB_*`` settings with `URL.create`; the default
is a SQLite file next to the working directory, PostgreSQL works through the
``postgres`` extra. Every entity in `database.entities` derives from
`declarativeBase`, so ``metadata.create_all`` builds the whole schema.
"""


from sqlalchemy import create_engine
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import MetaData
from campus_portal.database.config.config import settings

connection_url = URL.create(
    drivername=settings.DB_DRIVER_NAME,
    username=settings.DB_USERNAME,
    password=settings.DB_PASSWORD,
    host=settings.DB_HOST,
    port=settings.DB_PORT,
    database=settings.DB_DATABASE_NAME,
)

connection_engine = create_engine(connection_url)

metadata = MetaData()

declarativeBase = declarative_base(metadata=metadata)
