"""WSGI entrypoint for serving the Rentencheck backend behind Passenger."""

from rentencheck.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
