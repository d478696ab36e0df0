"""API route definitions."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from facetagger.api.dependencies import get_pool, get_session, get_settings, get_tagger, verify_api_key
from facetagger.api.schemas import (
    AdvanceRequest,
    AssignRequest,
    ContactOut,
    ContactsResponse,
    ErrorResponse,
    FaceOut,
    HealthResponse,
    NormalizedBox,
    PixelBox,
    SearchRequest,
    SelectRequest,
    SessionResponse,
    SwipeRequest,
)
from facetagger.config import Settings
from facetagger.geometry import outline_rects
from facetagger.ml.inference import InferencePool
from facetagger.ml.preprocessing import ImageTooLargeError, decode_image, encode_png
from facetagger.session import TaggingSession
from facetagger.tagger import Tagger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

SessionDep = Annotated[TaggingSession, Depends(get_session)]


def _session_response(session: TaggingSession) -> SessionResponse:
    size = session.image_size
    faces: list[FaceOut] = []
    if size is not None:
        outlines = outline_rects((face.bounding_box for face in session.faces), size)
        for index, (face, outline) in enumerate(zip(session.faces, outlines, strict=True)):
            box = face.bounding_box
            faces.append(
                FaceOut(
                    id=face.id,
                    index=index,
                    capture_quality=face.capture_quality,
                    contact=ContactOut(id=face.contact.id, name=face.contact.name) if face.contact else None,
                    bounding_box=NormalizedBox(x=box.x, y=box.y, width=box.width, height=box.height),
                    outline=PixelBox(x=outline.x, y=outline.y, width=outline.width, height=outline.height),
                    thumbnail_url=str(router.url_path_for("face_thumbnail", face_id=face.id)),
                )
            )
    return SessionResponse(
        state=session.state,
        generation=session.generation,
        image_width=size.width if size is not None else None,
        image_height=size.height if size is not None else None,
        selected_index=session.selected_index,
        faces=faces,
        search_query=session.search_query,
        filtered_contacts=[ContactOut(id=c.id, name=c.name) for c in session.filtered_contacts],
    )


@router.post(
    "/session/image",
    response_model=SessionResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Start a tagging session for an image",
)
async def upload_image(
    file: UploadFile,
    tagger: Annotated[Tagger, Depends(get_tagger)],
    settings: Annotated[Settings, Depends(get_settings)],
    pool: Annotated[InferencePool, Depends(get_pool)],
) -> SessionResponse:
    """Detect faces in the uploaded image and replace the current session."""
    data = await file.read(settings.max_file_size + 1)
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.max_file_size} bytes",
        )

    try:
        image = await pool.run(decode_image, data, settings.max_image_pixels)
    except ImageTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except TimeoutError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Server busy") from exc

    logger.info("Received %s (%d bytes)", file.filename, len(data))
    session = await tagger.run_pipeline(image)
    return _session_response(session)


@router.get("/session", response_model=SessionResponse, summary="Current tagging session")
async def get_current_session(session: SessionDep) -> SessionResponse:
    return _session_response(session)


@router.delete("/session", response_model=SessionResponse, summary="Dismiss the current image")
async def reset_session(session: SessionDep) -> SessionResponse:
    session.reset()
    return _session_response(session)


@router.post("/session/select", response_model=SessionResponse, summary="Select a face")
async def select_face(body: SelectRequest, session: SessionDep) -> SessionResponse:
    session.select(body.index)
    return _session_response(session)


@router.post("/session/advance", response_model=SessionResponse, summary="Move to the next or previous face")
async def advance_face(body: AdvanceRequest, session: SessionDep) -> SessionResponse:
    session.advance(body.direction)
    return _session_response(session)


@router.post("/session/swipe", response_model=SessionResponse, summary="Navigate with a drag gesture")
async def swipe_face(body: SwipeRequest, session: SessionDep) -> SessionResponse:
    session.swipe(body.dx, body.dy)
    return _session_response(session)


@router.post("/session/assign", response_model=SessionResponse, summary="Tag the selected face")
async def assign_contact(body: AssignRequest, session: SessionDep) -> SessionResponse:
    """Assign a contact by name to the selected face, then select the next face."""
    session.assign_contact(body.name)
    return _session_response(session)


@router.post("/session/search", response_model=SessionResponse, summary="Filter contacts by name")
async def search_contacts(body: SearchRequest, session: SessionDep) -> SessionResponse:
    session.update_search(body.query)
    return _session_response(session)


@router.get(
    "/session/faces/{face_id}/thumbnail",
    responses={
        status.HTTP_200_OK: {"content": {"image/png": {}}},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
    response_class=Response,
    summary="Face thumbnail as PNG",
)
async def face_thumbnail(face_id: str, session: SessionDep) -> Response:
    face = session.face_by_id(face_id)
    if face is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown face: {face_id}")
    return Response(content=encode_png(face.thumbnail), media_type="image/png")


@router.get("/contacts", response_model=ContactsResponse, summary="List all contacts")
async def list_contacts(session: SessionDep) -> ContactsResponse:
    return ContactsResponse(contacts=[ContactOut(id=c.id, name=c.name) for c in session.directory.contacts])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    request: Request,
    pool: Annotated[InferencePool, Depends(get_pool)],
) -> HealthResponse:
    """Return service health status."""
    return HealthResponse(
        status="ok",
        detector_loaded=request.app.state.tagger is not None,
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )
