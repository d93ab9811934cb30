"""FastAPI application module for BlendRec.

This module contains the FastAPI application factory, route handlers and
the logging, metrics and error handling used at the HTTP boundary.
"""
