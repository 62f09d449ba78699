"""reqbody -- Resolve HTTP request bodies against OpenAPI media types.

Given an incoming request and an operation's declared ``requestBody``
content map, reqbody decides which declared media type the request matches,
selects the first registered body parser capable of handling that type, runs
it, and returns a normalized :class:`~reqbody.models.RequestBodyResult`.

Typical usage::

    resolver = RequestBodyResolver(options=BodyParserOptions(limit="100kb"))
    result = await resolver.load_request_body_if_needed(operation, request)
    result.value, result.media_type, result.schema_

Extension parsers are subclasses of :class:`~reqbody.parsers.base.BodyParser`,
either passed to the resolver directly or registered under the
``reqbody.body_parsers`` entry-point group. They always take priority over
the three built-ins (json, urlencoded, text).

Modules:
    resolver: The request body resolution protocol.
    media_types: Media type normalization and pattern matching.
    options: Layered option resolution for the built-in parsers.
    parsers: Parser interface, built-ins, registry and discovery.
    request: The request protocol and body reading.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with HTTP status and exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"
