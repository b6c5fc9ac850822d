"""MongoDB database operations for authentication."""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from .errors import ConflictError
from .models import User, utcnow


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a string id, returning None if it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _doc_to_user(doc: Optional[dict]) -> Optional[User]:
    if not doc:
        return None
    doc["id"] = str(doc.pop("_id"))
    return User(**doc)


class UserDatabase:
    """Async MongoDB operations for user authentication."""

    def __init__(self, mongodb_uri: str, database_name: str = "notekeep"):
        """Initialize database connection."""
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None
        self._mongodb_uri = mongodb_uri
        self._database_name = database_name

    async def connect(self) -> None:
        """Connect to MongoDB."""
        self._client = AsyncIOMotorClient(self._mongodb_uri, tz_aware=True)
        self._db = self._client[self._database_name]
        await self._db.users.create_index("email", unique=True)
        # Only users that signed in with Google carry a google_id
        await self._db.users.create_index(
            "google_id",
            unique=True,
            partialFilterExpression={"google_id": {"$type": "string"}},
        )

    async def close(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """Get the connected database (shared with the note store)."""
        if self._db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._db

    @property
    def users(self):
        """Get users collection."""
        return self.database.users

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by id. Malformed ids are treated as unknown."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return _doc_to_user(await self.users.find_one({"_id": oid}))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return _doc_to_user(await self.users.find_one({"email": email.lower()}))

    async def find_by_email_or_google_id(
        self, email: str, google_id: str
    ) -> Optional[User]:
        """Get the first user matching either the email or the Google subject id."""
        doc = await self.users.find_one(
            {"$or": [{"email": email.lower()}, {"google_id": google_id}]}
        )
        return _doc_to_user(doc)

    async def create_user(
        self,
        name: str,
        email: str,
        date_of_birth: Optional[datetime] = None,
        verified: bool = False,
        google_id: Optional[str] = None,
        otp: Optional[str] = None,
        otp_expires: Optional[datetime] = None,
    ) -> User:
        """Insert a new user. Raises ConflictError if the email is taken."""
        now = utcnow()
        doc = {
            "email": email.lower(),
            "name": name,
            "date_of_birth": date_of_birth,
            "verified": verified,
            "google_id": google_id,
            "otp": otp,
            "otp_expires": otp_expires,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.users.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("User already exists with this email")

        doc["_id"] = result.inserted_id
        return _doc_to_user(doc)

    async def set_passcode(
        self, user_id: str, otp: str, otp_expires: datetime
    ) -> bool:
        """Replace the pending passcode. Returns True if the user exists."""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        result = await self.users.update_one(
            {"_id": oid},
            {
                "$set": {
                    "otp": otp,
                    "otp_expires": otp_expires,
                    "updated_at": utcnow(),
                }
            },
        )
        return result.matched_count > 0

    async def consume_passcode(
        self, user_id: str, otp: str, mark_verified: bool = False
    ) -> bool:
        """
        Clear the passcode if it still equals ``otp``.
        Optionally marks the user verified in the same update.
        Returns False if the passcode was replaced or cleared in the meantime.
        """
        oid = to_object_id(user_id)
        if oid is None:
            return False

        updates = {
            "otp": None,
            "otp_expires": None,
            "updated_at": utcnow(),
        }
        if mark_verified:
            updates["verified"] = True

        result = await self.users.update_one(
            {"_id": oid, "otp": otp},
            {"$set": updates},
        )
        return result.modified_count > 0

    async def link_google_id(self, user_id: str, google_id: str) -> bool:
        """Attach a Google subject id and mark the user verified."""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        try:
            result = await self.users.update_one(
                {"_id": oid},
                {
                    "$set": {
                        "google_id": google_id,
                        "verified": True,
                        "updated_at": utcnow(),
                    }
                },
            )
        except DuplicateKeyError:
            raise ConflictError("Google account is already linked to another user")
        return result.modified_count > 0
