# Services package init
"""
Student Registry Backend: Services Layer
==========================================

Service Inventory:
    - validation.py:       decoded body → StudentInput, or ValidationError
    - student_service.py:  one parameterized statement per CRUD operation
"""
