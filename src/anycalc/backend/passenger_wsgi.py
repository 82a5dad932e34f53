"""WSGI entrypoint for deploying the AnyCalc backend behind Passenger."""

from anycalc.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
