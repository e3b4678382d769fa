from flask import current_app
from flask_caching import Cache
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
cache = Cache()

COORDINATOR_EXTENSION_KEY = "lazyforms.coordinator"


def get_coordinator():
    """The resolver coordinator owned by the current application."""
    return current_app.extensions[COORDINATOR_EXTENSION_KEY]
