"""
TravelTales Backend: Travel Story Route Handlers
=================================================

What:  HTTP endpoints for the travel-story resource (mounted under /api).
How:   Extract path/query/body values, resolve the caller's user id, delegate
       to StoryService, and wrap the result in the response envelope.
Who:   Called by the browser client through its axios instance.

Route Inventory:
    POST   /travel-story                 add a story                → 201 {story, message}
    GET    /travel-story                 list my stories             → 200 {stories}
    POST   /travel-story/image-upload    upload an image (field "image") → 201 {imageUrl}
    DELETE /travel-story/image           delete an uploaded image    → 200 {message}
    PUT    /travel-story/{id}            edit a story                → 200 {story, message}
    DELETE /travel-story/{id}            delete a story              → 200 {message}
    PUT    /travel-story/{id}/favorite   set the favorite flag       → 200 {story, message}
    GET    /travel-story/search          substring search            → 200 {stories}
    GET    /travel-story/filter          visited-date range filter   → 200 {stories}

Errors are raised as application exceptions and rendered by the handlers in
main.py as {success: false, statusCode, message}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from traveltales.auth import get_current_user_id
from traveltales.dependencies import get_request_origin, get_story_service
from traveltales.exceptions import NotFoundError
from traveltales.schemas.travel_story import (
    ErrorResponse,
    FavoriteUpdateRequest,
    ImageUploadResponse,
    MessageResponse,
    StoryCreateRequest,
    StoryListResponse,
    StoryResponse,
    StoryUpdateRequest,
)
from traveltales.services.story_service import StoryService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/travel-story",
    tags=["Travel Stories"],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Missing or invalid access token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=StoryResponse,
    summary="Add a travel story",
)
async def add_travel_story(
    payload: StoryCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> StoryResponse:
    story = await service.add_story(
        user_id=user_id,
        title=payload.title,
        story=payload.story,
        visited_location=payload.visited_location,
        image_url=payload.image_url,
        visited_date=payload.visited_date,
    )
    return StoryResponse(story=story, message="Your story is added successfully!")


@router.get(
    "",
    response_model=StoryListResponse,
    summary="List my travel stories (favorites first)",
)
async def get_all_travel_stories(
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> StoryListResponse:
    return StoryListResponse(stories=await service.list_stories(user_id))


@router.post(
    "/image-upload",
    status_code=201,
    response_model=ImageUploadResponse,
    summary="Upload a story image",
    description="Multipart upload with the file in the `image` field. Returns the public URL.",
)
async def image_upload(
    image: Optional[UploadFile] = File(default=None, description="Image file (png, jpg, jpeg, gif, webp)"),
    user_id: str = Depends(get_current_user_id),
    origin: str = Depends(get_request_origin),
    service: StoryService = Depends(get_story_service),
) -> ImageUploadResponse:
    if image is None:
        image_url = await service.upload_image(None, None, origin)
        return ImageUploadResponse(image_url=image_url)

    try:
        content = await image.read()
        logger.info(
            "Received image upload from user %s: filename=%s, size=%d bytes",
            user_id,
            image.filename or "unknown",
            len(content),
        )
        image_url = await service.upload_image(
            filename=image.filename,
            content=content,
            origin=origin,
            content_length=image.size,
        )
    finally:
        await image.close()

    return ImageUploadResponse(image_url=image_url)


@router.delete(
    "/image",
    response_model=MessageResponse,
    responses={404: {"description": "Image not found", "model": ErrorResponse}},
    summary="Delete an uploaded image",
)
async def delete_image(
    image_url: Optional[str] = Query(default=None, alias="imageUrl"),
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> MessageResponse:
    await service.delete_image(image_url)
    return MessageResponse(message="Image deleted successfully!")


@router.get(
    "/search",
    response_model=StoryListResponse,
    responses={404: {"description": "Query missing", "model": ErrorResponse}},
    summary="Search my stories by title, story text or location",
)
async def search_travel_stories(
    query: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> StoryListResponse:
    # A missing query is a 404 on the wire
    if not query:
        raise NotFoundError(resource="query", message="Query is required!")
    return StoryListResponse(stories=await service.search_stories(user_id, query))


@router.get(
    "/filter",
    response_model=StoryListResponse,
    summary="Filter my stories by visited date",
)
async def filter_travel_stories(
    start_date: int = Query(alias="startDate", description="Inclusive start, epoch ms"),
    end_date: int = Query(alias="endDate", description="Inclusive end, epoch ms"),
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> StoryListResponse:
    stories = await service.filter_stories(user_id, start_date, end_date)
    return StoryListResponse(stories=stories)


@router.put(
    "/{story_id}",
    response_model=StoryResponse,
    responses={404: {"description": "Story not found", "model": ErrorResponse}},
    summary="Edit a travel story",
)
async def edit_travel_story(
    story_id: str,
    payload: StoryUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    origin: str = Depends(get_request_origin),
    service: StoryService = Depends(get_story_service),
) -> StoryResponse:
    story = await service.edit_story(
        user_id=user_id,
        story_id=story_id,
        title=payload.title,
        story=payload.story,
        visited_location=payload.visited_location,
        image_url=payload.image_url,
        visited_date=payload.visited_date,
        origin=origin,
    )
    return StoryResponse(story=story, message="Travel story updated successfully!")


@router.delete(
    "/{story_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Story not found", "model": ErrorResponse}},
    summary="Delete a travel story and its image",
)
async def delete_travel_story(
    story_id: str,
    user_id: str = Depends(get_current_user_id),
    origin: str = Depends(get_request_origin),
    service: StoryService = Depends(get_story_service),
) -> MessageResponse:
    await service.delete_story(user_id, story_id, origin)
    return MessageResponse(message="Travel story deleted successfully!")


@router.put(
    "/{story_id}/favorite",
    response_model=StoryResponse,
    responses={404: {"description": "Story not found", "model": ErrorResponse}},
    summary="Mark or unmark a story as favorite",
)
async def update_is_favorite(
    story_id: str,
    payload: FavoriteUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: StoryService = Depends(get_story_service),
) -> StoryResponse:
    story = await service.update_favorite(user_id, story_id, payload.is_favorite)
    return StoryResponse(story=story, message="Updated successfully!")
