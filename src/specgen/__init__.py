"""specgen -- Generate typed Python models, request types and clients from OpenAPI specs.

This package reads a Swagger 2.0 or OpenAPI 3.x document, normalizes its
schemas and operations into a dialect-independent intermediate
representation, and renders Python source from it: one pydantic model per
definition, a ``request_types`` module with response decoders, and an httpx
client.

Typical workflow::

    specgen generate api.yaml --out-dir generated/ --client

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the intermediate representation.
    config: Generation options and their precedence resolution.
    generator: End-to-end pipeline that renders and writes artifacts.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stderr diagnostics with Rich support.
    runtime: Support library imported by the generated code.
"""

__version__ = "0.1.0"
