# Routes package init
"""
Foods API Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - foods.py:   /api/v1/foods             (list, create)
                  /api/v1/foods/{id}        (get, update, delete)
                  /api/v1/foods/{id}/photo  (photo upload)
                  /api/v1/foods/photos/...  (photo download)
    - health.py:  GET /health               (service health check)

Routes stay thin: they read the request, call FoodService, and set
headers. Business rules live in app/services.
"""
