# Routes package init
"""
Student Registry Backend: API Routes Package
==============================================

Route Inventory:
    - students.py:     GET/POST /students, GET/PUT/DELETE /student/{id}
    - health.py:       GET /health
    - form_fields.py:  body decoder shared by POST and PUT

Routes stay thin: decode the request, call the service, return its model.
"""
