"""Pinworks - FastAPI REST API layer.

This package contains the thin HTTP front door over the gateway core.

Modules
-------
main
    FastAPI application with all route handlers, the error handler and the
    ``main()`` CLI entry point.
models
    Pydantic response envelopes.
forms
    Parser for the inbound ``POST /upload`` multipart form.
"""
