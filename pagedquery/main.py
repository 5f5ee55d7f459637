import logging
import sys
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from pagedquery.core.config import config
from pagedquery.core.db.engine import (
    check_database_connection,
    create_tables,
    get_db_util,
)
from pagedquery.core.error_handler import global_exception_handler
from pagedquery.modules.items import router as items_router

# Configure logging to output to console
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting pagedquery demo API...")
    await create_tables()
    yield
    logger.info("Shutting down pagedquery demo API")


app = FastAPI(
    title="pagedquery demo API",
    description="Offset-paged listings over SQLAlchemy",
    version="1.0.0",
    lifespan=lifespan,
)

# Add global exception handler
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(items_router, prefix="/api")


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db_util)) -> dict[str, str]:
    ok = await check_database_connection(db)
    return {"status": "ok" if ok else "unavailable"}
