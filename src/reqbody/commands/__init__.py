"""Built-in CLI sub-commands for reqbody.

* :mod:`~reqbody.commands.parse` -- parse a body against an OpenAPI operation.
* :mod:`~reqbody.commands.match` -- test a content type against patterns.
* :mod:`~reqbody.commands.list_parsers` -- show the parser registry.
* :mod:`~reqbody.commands.config` -- view and modify global settings.

Single commands export a plain callback registered on the root app; the
``config`` group exports a :class:`typer.Typer` sub-application.
"""
