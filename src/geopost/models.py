from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MediaKind(str, Enum):
    """Coarse media classification derived from a filename extension."""

    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"
    NONE = ""


class Location(BaseModel):
    lat: float = Field(0.0, description="Latitude in degrees")
    lon: float = Field(0.0, description="Longitude in degrees")


class Post(BaseModel):
    """A geo-tagged post as stored in the post index.

    Field aliases are the document keys used in the index and in API
    responses.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    post_id: str | None = Field(
        None, exclude=True, description="Generated id; also the media object key"
    )
    author: str = Field(..., alias="user", description="Username of the author")
    text: str = Field("", alias="message", description="Free-form message")
    location: Location = Field(default_factory=Location)
    media_address: str = Field("", alias="url", description="Public URI of the stored media")
    media_kind: MediaKind = Field(MediaKind.NONE, alias="type")
    face_score: float = Field(0.0, ge=0.0, le=1.0, alias="face")


class User(BaseModel):
    """A registered account as stored in the user index (keyed by username)."""

    username: str
    password: str = Field(..., description="Salted password hash")
    age: int = 0
    gender: str = ""


class SignupRequest(BaseModel):
    username: str
    password: str
    age: int = 0
    gender: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class IdentityClaims(BaseModel):
    """Claims carried by a bearer token, decoded once per request."""

    username: str
    expiry: datetime


# Index mappings, applied when the index does not exist yet.
POST_MAPPINGS = {
    "properties": {
        "user": {"type": "keyword"},
        "message": {"type": "text"},
        "location": {"type": "geo_point"},
        "url": {"type": "keyword"},
        "type": {"type": "keyword"},
        "face": {"type": "float"},
    }
}

USER_MAPPINGS = {
    "properties": {
        "username": {"type": "keyword"},
        "password": {"type": "keyword", "index": False},
        "age": {"type": "long"},
        "gender": {"type": "keyword"},
    }
}
