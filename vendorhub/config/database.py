"""
Database configuration and connection management.
Handles MongoDB connection lifecycle and database operations.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, GEOSPHERE

from .settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class DatabaseManager:
    """Manages MongoDB database connection and operations."""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            logger.info("🚀 Connecting to MongoDB...")

            self.client = AsyncIOMotorClient(
                settings.mongodb_url,
                serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
                connectTimeoutMS=settings.connect_timeout_ms,
                socketTimeoutMS=settings.socket_timeout_ms,
                maxPoolSize=settings.max_pool_size,
                minPoolSize=settings.min_pool_size,
                retryWrites=settings.retry_writes,
            )

            await self.client.admin.command('ping')
            self.database = self.client[settings.database_name]
            logger.info("✅ Connected to MongoDB successfully")

        except Exception as db_error:
            logger.warning(f"⚠️  MongoDB connection failed: {db_error}")
            # The app still starts so that / and /api/health answer

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("🔌 MongoDB connection closed")

    async def create_indexes(self) -> None:
        """Create the indexes the handlers rely on (uniqueness and $geoNear)."""
        if self.database is None:
            logger.warning("Database not connected, skipping index creation")
            return

        db = self.database
        try:
            await db.admins.create_index("email", unique=True)
            await db.admins.create_index("vendor_ids")

            await db.modules.create_index("name", unique=True)

            # $geoNear requires exactly one 2dsphere index on the collection
            await db.vendors.create_index([("location", GEOSPHERE)])
            await db.vendors.create_index("email")
            await db.vendors.create_index("module")

            await db.products.create_index("vendor_id")
            await db.products.create_index([("vendor_id", ASCENDING), ("is_active", ASCENDING)])

            await db.users.create_index("mobile_number", unique=True)
            await db.users.create_index("email", unique=True, sparse=True)

            await db.addresses.create_index("user")
            await db.addresses.create_index([("user", ASCENDING), ("is_default", ASCENDING)])

            await db.carts.create_index([("user", ASCENDING), ("status", ASCENDING)])
            await db.carts.create_index("vendor")
            await db.carts.create_index([("created_at", DESCENDING)])
            await db.carts.create_index("stripe_session_id", sparse=True)

            logger.info("✅ Database indexes created successfully")

        except Exception as index_error:
            logger.warning(f"⚠️  Failed to create indexes: {index_error}")

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get database instance."""
        if self.database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.database

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.database is not None


# Global database manager instance
db_manager = DatabaseManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for database connection."""
    logger.info("🚀 Starting up application...")
    await db_manager.connect()
    await db_manager.create_indexes()

    # Store database manager in app state for dependency injection
    app.state.db_manager = db_manager

    yield

    # Shutdown
    await db_manager.disconnect()


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency to get database instance."""
    if not db_manager.is_connected():
        raise HTTPException(
            status_code=503,
            detail="Database connection not available. Please check your MongoDB connection."
        )
    return db_manager.get_database()


def get_database_manager() -> DatabaseManager:
    """Get database manager instance."""
    return db_manager
