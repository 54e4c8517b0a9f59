# Routes package init
"""
TravelTales Backend: API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - stories.py: /api/travel-story/...   (travel story CRUD, search, filter, images)
    - health.py:  GET /health             (service health check)

Routes stay thin: extract request data, resolve the caller, call StoryService,
shape the response. Business rules live in services/story_service.py.
"""
