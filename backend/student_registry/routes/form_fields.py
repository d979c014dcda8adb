"""
Student Registry Backend: Request Body Decoder
================================================

What:  Extracts the submitted fields of a create/replace request into a plain dict.
How:   Chooses a parser from the Content-Type header:
           application/x-www-form-urlencoded → request.form()
           multipart/form-data               → request.form() (python-multipart)
           application/json                  → request.json(), must be an object
           anything else / no body           → {} (the validator then reports
                                                the missing names)
Who:   Used as a FastAPI dependency by POST /students and PUT /student/{id}.

Values are passed through untouched; typing and presence checks belong to
services/validation.py.
"""

import logging
from typing import Any, Dict

from fastapi import Request

from student_registry.exceptions import ValidationError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_student_fields(request: Request) -> Dict[str, Any]:
    """
    Decode the request body into a field mapping.

    Raises:
        ValidationError: JSON body that does not parse or is not an object
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        # Repeated keys keep their last value
        fields: Dict[str, Any] = {key: value for key, value in form.multi_items()}
    elif content_type == "application/json" or content_type.endswith("+json"):
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationError(message="Request body is not valid JSON")
        if not isinstance(payload, dict):
            raise ValidationError(
                message="Request body must be a JSON object",
                context={"received_type": type(payload).__name__},
            )
        fields = payload
    else:
        fields = {}

    logger.debug("Received body for %s %s: %s", request.method, request.url.path, fields)
    return fields
