"""Database service for MongoDB operations using Motor (async)."""

import math
import re
from datetime import datetime
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ReturnDocument

from campsite_ingest.models.campsite import CampsiteCreate, CampsiteEntry
from campsite_ingest.models.import_candidate import (
    ImportCandidate,
    ImportCandidateStatus,
)
from campsite_ingest.models.place import RawPlace, RawPlaceStatus
from campsite_ingest.utils.geo import distance_km
from campsite_ingest.utils.text import normalize_phone, normalize_website, tokenize

# Global MongoDB client (initialized at startup)
_mongodb_client: Optional[AsyncIOMotorClient] = None
_mongodb_database: Optional[AsyncIOMotorDatabase] = None

KM_PER_DEGREE_LATITUDE = 111.32

# Name tokens shorter than this are too common to search on
MIN_NAME_TOKEN_LENGTH = 3


async def connect_to_mongodb(uri: str, database_name: str) -> None:
    """Connect to MongoDB and initialize global client.

    Args:
        uri: MongoDB connection URI
        database_name: Database name to use
    """
    global _mongodb_client, _mongodb_database
    _mongodb_client = AsyncIOMotorClient(uri)
    _mongodb_database = _mongodb_client[database_name]


async def close_mongodb_connection() -> None:
    """Close MongoDB connection."""
    global _mongodb_client, _mongodb_database
    if _mongodb_client:
        _mongodb_client.close()
    _mongodb_client = None
    _mongodb_database = None


def get_database() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance.

    Raises:
        RuntimeError: If database not initialized
    """
    if _mongodb_database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongodb first.")
    return _mongodb_database


def get_collection(name: str) -> AsyncIOMotorCollection:
    """Get MongoDB collection by name."""
    db = get_database()
    return db[name]


def bounding_box(
    latitude: float,
    longitude: float,
    radius_km: float,
) -> tuple[tuple[float, float], Optional[tuple[float, float]]]:
    """Latitude and longitude ranges enclosing a circle.

    The longitude range is None when the box would cross a pole or the
    antimeridian; callers then filter on latitude only.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LATITUDE
    lat_range = (max(-90.0, latitude - lat_delta), min(90.0, latitude + lat_delta))

    cos_lat = math.cos(math.radians(latitude))
    if cos_lat < 1e-6:
        return lat_range, None

    lon_delta = radius_km / (KM_PER_DEGREE_LATITUDE * cos_lat)
    lon_min, lon_max = longitude - lon_delta, longitude + lon_delta
    if lon_min < -180.0 or lon_max > 180.0:
        return lat_range, None
    return lat_range, (lon_min, lon_max)


class CampsiteRepository:
    """Repository for catalog campsites used as duplicate targets."""

    def __init__(
        self,
        collection: Optional[AsyncIOMotorCollection] = None,
        phone_country_code: str = "66",
    ):
        """Initialize campsite repository.

        Args:
            collection: Motor collection instance (optional, uses default if not provided)
            phone_country_code: Calling code used when normalizing stored phones
        """
        self.collection = collection if collection is not None else get_collection("campsites")
        self.phone_country_code = phone_country_code

    async def ensure_indexes(self) -> None:
        """Create indexes backing the duplicate lookups."""
        await self.collection.create_index([("phone_normalized", 1)])
        await self.collection.create_index([("website_normalized", 1)])
        await self.collection.create_index([("latitude", 1), ("longitude", 1)])
        await self.collection.create_index([("is_active", 1), ("name", 1)])

    async def create(self, campsite_data: CampsiteCreate) -> CampsiteEntry:
        """Insert a campsite with normalized phone and website for lookups.

        Args:
            campsite_data: Campsite creation data

        Returns:
            Created CampsiteEntry with ID
        """
        doc = campsite_data.model_dump()
        doc["phone_normalized"] = (
            normalize_phone(campsite_data.phone or "", self.phone_country_code) or None
        )
        doc["website_normalized"] = normalize_website(campsite_data.website or "") or None
        doc["created_at"] = datetime.utcnow()

        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return CampsiteEntry(**doc)

    async def get_by_id(self, campsite_id: ObjectId) -> Optional[CampsiteEntry]:
        """Get campsite by MongoDB ObjectId."""
        doc = await self.collection.find_one({"_id": campsite_id})
        if doc:
            return CampsiteEntry(**doc)
        return None

    async def search_by_name(self, name: str, limit: int = 20) -> list[CampsiteEntry]:
        """Find active campsites whose name shares a word with `name`.

        Matching is a case-insensitive regex per token; ranking is left to
        the scorer.

        Args:
            name: Candidate name
            limit: Maximum campsites to return

        Returns:
            List of CampsiteEntry instances
        """
        tokens = tokenize(name or "")
        search_tokens = sorted(t for t in tokens if len(t) >= MIN_NAME_TOKEN_LENGTH) or sorted(tokens)
        if not search_tokens:
            return []

        query = {
            "is_active": True,
            "$or": [
                {"name": {"$regex": re.escape(token), "$options": "i"}}
                for token in search_tokens
            ],
        }
        cursor = self.collection.find(query).limit(limit)

        campsites = []
        async for doc in cursor:
            campsites.append(CampsiteEntry(**doc))
        return campsites

    async def find_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> list[CampsiteEntry]:
        """Find active campsites within radius_km, nearest first.

        Candidates come from a bounding-box query and are then filtered by
        haversine distance, which is stored on each entry as distance_km.
        """
        lat_range, lon_range = bounding_box(latitude, longitude, radius_km)
        query: dict = {
            "is_active": True,
            "latitude": {"$gte": lat_range[0], "$lte": lat_range[1]},
        }
        if lon_range is not None:
            query["longitude"] = {"$gte": lon_range[0], "$lte": lon_range[1]}
        else:
            query["longitude"] = {"$ne": None}

        nearby = []
        async for doc in self.collection.find(query):
            distance = distance_km(latitude, longitude, doc["latitude"], doc["longitude"])
            if distance <= radius_km:
                doc["distance_km"] = distance
                nearby.append(CampsiteEntry(**doc))

        nearby.sort(key=lambda c: c.distance_km)
        return nearby

    async def find_by_phone(self, normalized_phone: str) -> list[CampsiteEntry]:
        """Find active campsites with the same normalized phone number."""
        if not normalized_phone:
            return []
        cursor = self.collection.find(
            {"is_active": True, "phone_normalized": normalized_phone}
        )
        return [CampsiteEntry(**doc) async for doc in cursor]

    async def find_by_website(self, normalized_website: str) -> list[CampsiteEntry]:
        """Find active campsites with the same normalized website."""
        if not normalized_website:
            return []
        cursor = self.collection.find(
            {"is_active": True, "website_normalized": normalized_website}
        )
        return [CampsiteEntry(**doc) async for doc in cursor]


class RawPlaceRepository:
    """Repository for fetched Google places awaiting processing."""

    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None):
        self.collection = (
            collection if collection is not None else get_collection("google_places_raw")
        )

    async def create(self, place_id: str, raw_data: dict) -> RawPlace:
        """Store a fetched Places Details payload."""
        raw_place = RawPlace(place_id=place_id, raw_data=raw_data)
        result = await self.collection.insert_one(
            raw_place.model_dump(by_alias=True, exclude={"id"})
        )
        raw_place.id = result.inserted_id
        return raw_place

    async def get_by_id(self, raw_place_id: ObjectId) -> Optional[RawPlace]:
        doc = await self.collection.find_one({"_id": raw_place_id})
        if doc:
            return RawPlace(**doc)
        return None

    async def list_pending(self, limit: int = 100) -> list[RawPlace]:
        """List raw places that have not been processed yet, oldest first."""
        cursor = (
            self.collection.find({"sync_status": RawPlaceStatus.PENDING.value})
            .sort("data_fetched_at", 1)
            .limit(limit)
        )
        return [RawPlace(**doc) async for doc in cursor]

    async def mark_processed(
        self,
        raw_place_id: ObjectId,
        status: RawPlaceStatus = RawPlaceStatus.COMPLETED,
    ) -> Optional[RawPlace]:
        """Record the outcome of processing a raw place."""
        result = await self.collection.find_one_and_update(
            {"_id": raw_place_id},
            {
                "$set": {
                    "sync_status": status.value,
                    "processed_at": datetime.utcnow(),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if result:
            return RawPlace(**result)
        return None


class ImportCandidateRepository:
    """Repository for import candidates, unique per raw place."""

    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None):
        self.collection = (
            collection
            if collection is not None
            else get_collection("google_places_import_candidates")
        )

    async def ensure_indexes(self) -> None:
        """Create indexes; one candidate per raw place is enforced here."""
        await self.collection.create_index(
            [("google_place_raw_id", 1)],
            unique=True,
        )
        await self.collection.create_index([("status", 1), ("updated_at", -1)])

    async def upsert_for_raw_place(self, candidate: ImportCandidate) -> ImportCandidate:
        """Create the candidate for its raw place, or refresh the existing one.

        Args:
            candidate: Candidate to store

        Returns:
            Stored ImportCandidate with ID
        """
        now = datetime.utcnow()
        fields = candidate.model_dump(exclude={"id", "created_at", "updated_at"})
        fields["updated_at"] = now

        result = await self.collection.find_one_and_update(
            {"google_place_raw_id": candidate.google_place_raw_id},
            {"$set": fields, "$setOnInsert": {"created_at": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return ImportCandidate(**result)

    async def get_by_raw_place_id(self, raw_place_id: ObjectId) -> Optional[ImportCandidate]:
        doc = await self.collection.find_one({"google_place_raw_id": raw_place_id})
        if doc:
            return ImportCandidate(**doc)
        return None

    async def list_by_status(
        self,
        status: ImportCandidateStatus,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ImportCandidate]:
        """List candidates in a review status, most recently updated first."""
        cursor = (
            self.collection.find({"status": status.value})
            .sort("updated_at", -1)
            .skip(offset)
            .limit(limit)
        )
        return [ImportCandidate(**doc) async for doc in cursor]
