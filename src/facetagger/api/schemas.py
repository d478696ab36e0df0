"""Pydantic request/response schemas for the FaceTagger API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from facetagger.session import Direction, SessionState


class NormalizedBox(BaseModel):
    """Detector bounding box, normalized with a bottom-left origin."""

    x: float = Field(description="Relative x of the left edge (0.0-1.0)")
    y: float = Field(description="Relative y of the bottom edge (0.0-1.0)")
    width: float = Field(description="Relative width (0.0-1.0)")
    height: float = Field(description="Relative height (0.0-1.0)")


class PixelBox(BaseModel):
    """Pixel rectangle with a top-left origin."""

    x: float
    y: float
    width: float
    height: float


class ContactOut(BaseModel):
    id: str
    name: str


class FaceOut(BaseModel):
    """A face in the session, in reading order."""

    id: str
    index: int
    capture_quality: float | None = Field(default=None, ge=0.0, le=1.0)
    contact: ContactOut | None = None
    bounding_box: NormalizedBox
    outline: PixelBox = Field(description="Un-inflated face outline in image pixels")
    thumbnail_url: str


class SessionResponse(BaseModel):
    """Full state of the tagging session."""

    state: SessionState
    generation: int
    image_width: int | None = None
    image_height: int | None = None
    selected_index: int | None = None
    faces: list[FaceOut]
    search_query: str
    filtered_contacts: list[ContactOut]


class SelectRequest(BaseModel):
    index: int


class AdvanceRequest(BaseModel):
    direction: Direction


class SwipeRequest(BaseModel):
    """Drag translation of a gesture, in points."""

    dx: float
    dy: float


class AssignRequest(BaseModel):
    name: str = Field(min_length=1, description="Contact name, matched ignoring case")


class SearchRequest(BaseModel):
    query: str = ""


class ContactsResponse(BaseModel):
    contacts: list[ContactOut]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    detector_loaded: bool
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
