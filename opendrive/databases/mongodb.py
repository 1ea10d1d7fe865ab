from typing import List, Optional, Type
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie, Document
from pymongo.errors import ServerSelectionTimeoutError

from opendrive.configs.settings import settings
from opendrive.utils.logging import get_logger

logger = get_logger(__name__)


class MongoDB:
    """MongoDB connection manager using Beanie ODM"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect(self, document_models: List[Type[Document]] = None, client: Optional[AsyncIOMotorClient] = None):
        """Connect to MongoDB and initialize Beanie.

        An already built client (e.g. an in-memory one) can be passed in;
        the ping is skipped for it.
        """
        try:
            if client is None:
                self.client = AsyncIOMotorClient(
                    settings.MONGO_URL,
                    serverSelectionTimeoutMS=8000,
                    connectTimeoutMS=8000,
                    socketTimeoutMS=10000,
                    maxPoolSize=50,
                    minPoolSize=0,
                )
                await self.client.admin.command('ping')
            else:
                self.client = client

            self.database = self.client[settings.MONGO_DB]

            if document_models:
                await init_beanie(
                    database=self.database,
                    document_models=document_models
                )
                logger.info(
                    f"Beanie initialized with {len(document_models)} document models")

            return True

        except ServerSelectionTimeoutError as e:
            logger.error(
                f"Failed to connect to MongoDB (timeout) at {settings.MONGO_URL}: {e}")
            raise ConnectionError("Cannot connect to MongoDB server")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            raise

    async def disconnect(self):
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")


# Global MongoDB instance
mongodb = MongoDB()
