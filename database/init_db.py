import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from database.database import get_engine
from database.models import Base

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_fixed(2),
    retry=retry_if_exception_type(OperationalError),
    reraise=True
)
def init_db(engine: Optional[Engine] = None) -> None:
    logger.info("Initializing database...")
    try:
        Base.metadata.create_all(bind=engine or get_engine())
        logger.info("Tables created or verified.")
    except OperationalError as e:
        logger.error(f"Error initializing DB: {e}")
        raise
