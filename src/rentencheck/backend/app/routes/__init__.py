"""Blueprint registrations for application routes."""

from flask import Flask

from .parameters import blueprint as parameters_blueprint
from .projections import blueprint as projections_blueprint


def register_routes(app: Flask) -> None:
    """Register all Flask blueprints with the provided application."""

    app.register_blueprint(projections_blueprint)
    app.register_blueprint(parameters_blueprint)
