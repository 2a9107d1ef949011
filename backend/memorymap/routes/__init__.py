# Routes package init
"""
Memory Map Backend — API Routes Package
=========================================

Route Inventory:
    - messages.py:  GET  /api/v1/messages   (list every message)
                    POST /api/v1/messages   (create a message)
    - map_page.py:  GET  /                  (Leaflet map of all messages)
    - health.py:    GET  /health            (service health check)

Routes stay thin: extract the request data, call the service, return the
result. Validation and persistence live in services/.
"""
