"""
TravelTales Backend: Route Dependencies
========================================

Small FastAPI dependencies shared by route modules. Services live on
`app.state` (built by create_app), so they are looked up per request rather
than imported as module globals.
"""

from fastapi import Request

from traveltales.config import Settings
from traveltales.services.story_service import StoryService


def get_story_service(request: Request) -> StoryService:
    return request.app.state.story_service


def get_request_origin(request: Request) -> str:
    """
    Origin used for generated image URLs: PUBLIC_BASE_URL if configured,
    otherwise the scheme and host the request arrived on.
    """
    settings: Settings = request.app.state.settings
    if settings.public_base_url:
        return settings.public_base_url
    return f"{request.url.scheme}://{request.url.netloc}"
