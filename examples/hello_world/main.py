#!/usr/bin/env python3
"""
Hello World Example for MDB_CONVERT

Stores users with an internal "owner" field and a flattened address, while
application code only ever sees the public shape.
"""
import asyncio
import os

from motor.motor_asyncio import AsyncIOMotorClient

from mdb_convert import Converter, convert_raw_collection

OWNER = "hello-world"


def to_stored(user):
    """Public user -> stored user."""
    address = user.get("address", {})
    stored = {k: v for k, v in user.items() if k != "address"}
    stored.update({f"address_{k}": v for k, v in address.items()})
    stored["owner"] = OWNER
    return stored


def to_public(stored):
    """Stored user -> public user."""
    user = {}
    address = {}
    for key, value in stored.items():
        if key == "owner":
            continue
        if key.startswith("address_"):
            address[key[len("address_"):]] = value
        else:
            user[key] = value
    if address:
        user["address"] = address
    return user


async def main():
    """Main example function"""
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    db_name = os.getenv("MONGO_DB_NAME", "hello_world_db")
    print(f"📦 Database: {db_name}\n")

    client = AsyncIOMotorClient(mongo_uri)
    users = convert_raw_collection(
        client[db_name]["users"],
        Converter(
            pre_insert=to_stored,
            pre_update=lambda update: update,
            pre_replace=to_stored,
            post_find=to_public,
            delete_filter=lambda f: {"$and": [f, {"owner": OWNER}]},
        ),
    )

    try:
        await users.insert_one({"name": "Ada", "address": {"city": "London"}})
        print("✅ Inserted:", await users.find_one({"name": "Ada"}))

        async for user in users.find({}).sort("name", 1):
            print("👤", user)

        result = await users.delete_many({})
        print(f"🧹 Deleted {result.deleted_count} document(s)")
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
