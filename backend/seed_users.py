import asyncio
import os
import uuid
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient

from core.security import create_access_token

MONGO_URL = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.environ.get("DB_NAME", "parcelDB")

# Comptes de développement ; les jetons imprimés sont signés avec JWT_SECRET
TEST_USERS = [
    {"email": "admin@parcel.dev", "role": "admin"},
    {"email": "rider@parcel.dev", "role": "rider"},
    {"email": "user@parcel.dev",  "role": "user"},
]


async def seed_test_accounts():
    print(f"🔌 Connexion à MongoDB : {DB_NAME}")
    client = AsyncIOMotorClient(MONGO_URL)
    db = client[DB_NAME]

    now = datetime.now(timezone.utc)

    print("\n---------- CRÉATION DES COMPTES ------------")
    for u in TEST_USERS:
        existing = await db.users.find_one({"email": u["email"]})
        if existing:
            await db.users.update_one({"email": u["email"]}, {"$set": {"role": u["role"]}})
            print(f"⏩ {u['role'].upper()} ({u['email']}) existe déjà, rôle forcé.")
        else:
            await db.users.insert_one({
                "id":          f"usr_{uuid.uuid4().hex[:12]}",
                "email":       u["email"],
                "role":        u["role"],
                "created_at":  now,
                "last_log_in": now,
            })
            print(f"✅ {u['role'].upper()} ({u['email']}) créé.")

        if u["role"] == "rider":
            rider = await db.riders.find_one({"email": u["email"]})
            if not rider:
                await db.riders.insert_one({
                    "id":          f"rdr_{uuid.uuid4().hex[:12]}",
                    "name":        "Dev Rider",
                    "email":       u["email"],
                    "district":    "Dhaka",
                    "status":      "active",
                    "work_status": "idle",
                    "created_at":  now,
                })
                print("   ↳ fiche livreur active créée.")

    print("\n---------- JETONS DE DÉVELOPPEMENT ------------")
    for u in TEST_USERS:
        token = create_access_token({"sub": u["email"], "email": u["email"]})
        print(f"{u['role']:>6} : Bearer {token}")

    client.close()


if __name__ == "__main__":
    asyncio.run(seed_test_accounts())
