# Services package init
"""
TravelTales Backend: Services Layer
====================================

What:  Business logic between routes (HTTP) and the repository (persistence).

Service Inventory:
    - StoryService: travel story rules (required fields, ownership, favorites,
      search, date filter, image cleanup on delete)
    - FileStore: image upload validation, storage and deletion on local disk
"""
