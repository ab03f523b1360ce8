import logging
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import IndexModel
from config import settings

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient = None
_db_instance = None


class _DbProxy:
    """
    Proxy transparent vers l'instance Motor.
    Permet aux services de faire `from database import db` AVANT connect_db().
    db.collection → délégué à _db_instance.collection au moment de l'appel.
    """
    def __getattr__(self, name):
        if _db_instance is None:
            raise RuntimeError("Database not connected. Call connect_db() first.")
        return getattr(_db_instance, name)

    def __getitem__(self, name):
        if _db_instance is None:
            raise RuntimeError("Database not connected. Call connect_db() first.")
        return _db_instance[name]


db = _DbProxy()


async def connect_db():
    global client, _db_instance
    client = AsyncIOMotorClient(
        settings.MONGO_URL,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
    )
    _db_instance = client[settings.DB_NAME]
    logger.info(f"Connected to MongoDB: {settings.DB_NAME}")
    try:
        await create_indexes()
    except Exception as e:
        logger.warning(f"Could not create indexes (non-blocking): {e}")


async def close_db():
    global client
    if client:
        client.close()
        logger.info("MongoDB connection closed")


async def create_indexes():
    collections_to_index = {
        "users": [
            IndexModel([("id", 1)], unique=True),
            IndexModel([("email", 1)], unique=True),
            IndexModel([("role", 1)]),
        ],
        "parcels": [
            IndexModel([("id", 1)], unique=True),
            IndexModel([("tracking_id", 1)]),
            IndexModel([("created_by", 1)]),
            IndexModel([("delivery_status", 1)]),
            IndexModel([("assigned_rider_email", 1)]),
            IndexModel([("created_date", -1)]),
        ],
        "riders": [
            IndexModel([("id", 1)], unique=True),
            IndexModel([("email", 1)]),
            IndexModel([("status", 1)]),
            IndexModel([("district", 1)]),
        ],
        "payments": [
            IndexModel([("id", 1)], unique=True),
            IndexModel([("email", 1)]),
            IndexModel([("parcelId", 1)]),
            IndexModel([("paid_at", -1)]),
        ],
        "trackings": [
            IndexModel([("tracking_id", 1)]),
            IndexModel([("timestamp", 1)]),
        ],
    }

    for collection_name, index_models in collections_to_index.items():
        try:
            await _db_instance[collection_name].create_indexes(index_models)
            logger.info(f"Indexes created for collection: {collection_name}")
        except Exception as e:
            logger.error(f"Failed to create indexes for collection {collection_name}: {e}")

    logger.info("All MongoDB indexes creation attempts completed.")
