"""Campsite catalog models used as duplicate targets."""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class PyObjectId(ObjectId):
    """Custom ObjectId type for Pydantic v2."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        """Define Pydantic schema for ObjectId."""
        from pydantic_core import core_schema

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(ObjectId),
                core_schema.chain_schema(
                    [
                        core_schema.str_schema(),
                        core_schema.no_info_plain_validator_function(cls.validate),
                    ]
                ),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: str(x),
                when_used="json",
            ),
        )

    @classmethod
    def validate(cls, v: Any) -> ObjectId:
        """Validate and convert to ObjectId."""
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str):
            try:
                return ObjectId(v)
            except Exception as e:
                raise ValueError(f"Invalid ObjectId: {v}") from e
        raise ValueError(f"Invalid ObjectId type: {type(v)}")


class CampsiteCreate(BaseModel):
    """Schema for adding a campsite to the catalog."""

    name: str = Field(
        ...,
        min_length=1,
        description="Campsite display name",
    )
    address: str = Field(
        default="",
        description="Postal address",
    )
    phone: Optional[str] = Field(
        default=None,
        description="Contact phone number as entered",
    )
    website: Optional[str] = Field(
        default=None,
        description="Website URL as entered",
    )
    latitude: Optional[float] = Field(
        default=None,
        ge=-90.0,
        le=90.0,
        description="Latitude in decimal degrees",
    )
    longitude: Optional[float] = Field(
        default=None,
        ge=-180.0,
        le=180.0,
        description="Longitude in decimal degrees",
    )
    is_active: bool = Field(
        default=True,
        description="Inactive campsites are ignored by duplicate lookups",
    )


class CampsiteEntry(BaseModel):
    """An existing catalog campsite considered as a duplicate target.

    Read-only to the scorer. distance_km is filled in by location lookups
    and is relative to the candidate being evaluated.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        json_encoders={ObjectId: str},
    )

    id: PyObjectId = Field(
        ...,
        alias="_id",
        description="MongoDB document ID",
    )
    name: str = Field(
        ...,
        description="Campsite display name",
    )
    address: str = Field(
        default="",
        description="Postal address",
    )
    phone: Optional[str] = Field(
        default=None,
        description="Contact phone number",
    )
    website: Optional[str] = Field(
        default=None,
        description="Website URL",
    )
    latitude: Optional[float] = Field(
        default=None,
        description="Latitude in decimal degrees",
    )
    longitude: Optional[float] = Field(
        default=None,
        description="Longitude in decimal degrees",
    )
    distance_km: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Distance from the candidate in km, when known",
    )
    is_active: bool = Field(
        default=True,
        description="Whether the campsite is listed",
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the campsite was added",
    )
