import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Iterator, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from app.core.config import settings
from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()


def _check_settings():
    missing = [
        name for name in ("MONGODB_URL", "DATABASE_NAME", "COLLECTION_NAME")
        if not getattr(settings, name)
    ]
    if missing:
        logger.error("Missing required MongoDB settings: %s", ", ".join(missing))
        raise RuntimeError(f"Missing required settings: {', '.join(missing)}")


async def connect_to_mongo():
    """Connect to MongoDB."""
    _check_settings()
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes()
    logger.info("Connected to MongoDB: %s.%s", settings.DATABASE_NAME, settings.COLLECTION_NAME)


async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
        logger.info("Disconnected from MongoDB")


async def create_indexes():
    """Create database indexes."""
    collection = mongodb.db[settings.COLLECTION_NAME]
    await collection.create_index("teams._id")
    await collection.create_index("teams.members.memberID._id")
    await collection.create_index("teams.members.memberID.email")


def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db


@asynccontextmanager
async def optional_transaction(client: Optional[AsyncIOMotorClient]) -> AsyncIterator[Optional[AsyncIOMotorClientSession]]:
    """Yield a session inside a transaction when transactions are enabled, else None."""
    if not settings.MONGODB_TRANSACTIONS or client is None:
        yield None
        return

    async with await client.start_session() as session:
        async with session.start_transaction():
            yield session


@contextmanager
def store_errors(action: str, data: Optional[Any] = None) -> Iterator[None]:
    """Translate driver failures raised inside the block into UpstreamError."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception("MongoDB failure while trying to %s", action)
        raise UpstreamError(f"Failed to {action}", data=data, cause=exc) from exc
