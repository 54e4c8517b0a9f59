"""
TravelTales Backend: Application Package
=========================================

What: Backend for a personal travel journal. Authenticated users keep travel
      stories (title, story, visited location, visited date, image), mark
      favorites, search and filter them.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (StoryService, FileStore)│  ← Validation, ownership, images
    ├─────────────────────────────────────┤
    │     Repository (StoryRepository)    │  ← All SQL, scoped by user id
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy engine
    └─────────────────────────────────────┘

    Every collaborator is constructed in main.create_app() and injected;
    nothing below the routes reads global state.
"""

__version__ = "1.0.0"
