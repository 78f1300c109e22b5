from __future__ import annotations

import logging
import re
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from mongo_paginate.utils.exceptions import NotConnected

logger = logging.getLogger(__name__)

_clients: dict[str, AsyncMongoClient] = {}
_databases: dict[str, AsyncDatabase] = {}


async def connect(uri: str, *, alias: str = "default", **client_options: Any) -> AsyncDatabase:
    """Connect to a MongoDB instance and register the connection.

    Args:
        uri: MongoDB connection URI (must include database name).
        alias: Connection alias for multi-database setups.
        **client_options: Extra keyword arguments for AsyncMongoClient
            (e.g. serverSelectionTimeoutMS).

    Returns:
        The AsyncDatabase instance.

    Raises:
        ValueError: If URI format is invalid
    """
    logger.info(f"Connecting to MongoDB with alias '{alias}'")

    try:
        db_name = _extract_db_name(uri)
        client = AsyncMongoClient(uri, **client_options)
        db = client[db_name]
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise

    previous = _clients.get(alias)
    if previous is not None and previous is not client:
        logger.warning(f"Replacing existing connection for alias '{alias}'")
        await previous.close()
    _clients[alias] = client
    _databases[alias] = db
    logger.info(f"Connected to database '{db_name}' with alias '{alias}'")
    return db


async def disconnect(alias: str = "default") -> None:
    """Disconnect and remove a registered connection."""
    client = _clients.pop(alias, None)
    _databases.pop(alias, None)
    if client is not None:
        await client.close()
        logger.info(f"Disconnected from MongoDB (alias: '{alias}')")


async def ping(alias: str = "default") -> bool:
    """Round-trip a ``ping`` command on a registered connection.

    Raises:
        NotConnected: If no connection exists for the alias
        pymongo.errors.PyMongoError: If the server cannot be reached
    """
    db = get_database(alias)
    result = await db.command("ping")
    return bool(result.get("ok"))


def get_database(alias: str = "default") -> AsyncDatabase:
    """Retrieve a registered database or raise NotConnected."""
    try:
        return _databases[alias]
    except KeyError:
        raise NotConnected(
            f"No connection registered for alias '{alias}'. Call connect() first."
        )


def get_client(alias: str = "default") -> AsyncMongoClient:
    """Retrieve a registered client or raise NotConnected."""
    try:
        return _clients[alias]
    except KeyError:
        raise NotConnected(
            f"No client registered for alias '{alias}'. Call connect() first."
        )


def _extract_db_name(uri: str) -> str:
    """Extract the database name from a MongoDB URI with validation.

    Raises:
        ValueError: If URI format is invalid or database name cannot be extracted
    """
    if not uri:
        raise ValueError("MongoDB URI cannot be empty")

    path = uri.split("?")[0]
    if "://" in path:
        path = path.split("://", 1)[1]
    if "/" not in path:
        raise ValueError(
            "Cannot extract database name from URI. "
            "Expected format: mongodb://host:port/database"
        )
    db_name = path.rsplit("/", 1)[-1]

    if not db_name:
        raise ValueError(
            "Cannot extract database name from URI. "
            "Expected format: mongodb://host:port/database"
        )

    # MongoDB naming rules
    if not re.match(r"^[a-zA-Z0-9_-]+$", db_name):
        raise ValueError(
            f"Invalid database name '{db_name}'. "
            f"Database names can only contain letters, numbers, underscores, and hyphens."
        )

    logger.debug(f"Extracted database name: {db_name}")
    return db_name
