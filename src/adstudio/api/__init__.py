"""AdStudio Image Generator - FastAPI relay layer.

This package contains the FastAPI application, the relay service behind it,
the client for the external image API and the response models.

Modules
-------
main
    FastAPI application factory, route handlers and the ``main()`` CLI
    entry point.
relay
    Request flow from validated submission to stored result images.
image_client
    Async client for the OpenAI image edits endpoint.
file_store
    Upload and result file helpers.
models
    Pydantic response models.
prompt_builder
    Generation instruction composition.
"""
