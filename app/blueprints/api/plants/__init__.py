"""
Plants API Module
=================

Plants API organized by concern:
- crud.py: Plant CRUD operations (JSON or multipart with an initial photo)
- growth_log.py: Growth log entries and the events that apply to a plant
"""

from flask import Blueprint
from app.utils.http import error_response

# Create blueprint here to avoid circular imports
plants_api = Blueprint("plants_api", __name__)

# Error handlers
@plants_api.errorhandler(404)
def not_found(error):
    """Handle 404 errors"""
    return error_response("Resource not found", 404)

@plants_api.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors"""
    return error_response("Method not allowed", 405)

# Import submodules to register routes (must be after blueprint creation)
from . import crud, growth_log

__all__ = ['plants_api']
