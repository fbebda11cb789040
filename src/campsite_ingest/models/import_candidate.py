"""Import candidate model for places awaiting admin review."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from campsite_ingest.models.campsite import PyObjectId


class ImportCandidateStatus(str, Enum):
    """Review status of an import candidate."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IMPORTED = "imported"


class ProcessedPlace(BaseModel):
    """Result of running one raw place through duplicate detection,
    classification and confidence scoring."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        json_encoders={ObjectId: str},
    )

    raw_place_id: PyObjectId
    place_id: str
    name: str
    address: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    is_duplicate: bool = False
    duplicate_of_campsite_id: Optional[PyObjectId] = None
    suggested_type_id: int = 1
    validation_warnings: list[str] = Field(default_factory=list)
    processed_data: dict[str, Any] = Field(default_factory=dict)


class ImportCandidate(BaseModel):
    """Stored import candidate, one per raw place."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        json_encoders={ObjectId: str},
    )

    id: Optional[PyObjectId] = Field(
        default=None,
        alias="_id",
        description="MongoDB document ID",
    )
    google_place_raw_id: PyObjectId = Field(
        ...,
        description="Raw place this candidate was built from",
    )
    confidence_score: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Overall import confidence",
    )
    is_duplicate: bool = Field(
        default=False,
        description="Whether the place duplicates an existing campsite",
    )
    duplicate_of_campsite_id: Optional[PyObjectId] = Field(
        default=None,
        description="Existing campsite the place duplicates",
    )
    suggested_type_id: int = Field(
        default=1,
        description="Suggested campsite type",
    )
    processed_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Selected place fields for review",
    )
    validation_warnings: list[str] = Field(
        default_factory=list,
        description="Data quality warnings",
    )
    status: ImportCandidateStatus = Field(
        default=ImportCandidateStatus.PENDING,
        description="Review status",
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the candidate was first created",
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the candidate was last updated",
    )
