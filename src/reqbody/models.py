"""Canonical Pydantic models shared across all reqbody modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Operation models** -- the slice of an OpenAPI *Operation Object* the
resolver reads:
    :class:`MediaTypeObject`, :class:`RequestBodyObject`,
    :class:`ReferenceObject`, and :class:`OperationSpec`.

**Result model** -- what a resolution produces:
    :class:`RequestBodyResult`.

**Option and configuration models** -- serialised as JSON in the user's
config directory:
    :class:`FormatParserOptions`, :class:`BodyParserOptions`, the effective
    :class:`JsonOptions`, :class:`UrlencodedOptions` and :class:`TextOptions`,
    :class:`PluginsConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

All models use Pydantic v2. Fields whose natural name collides with a
``BaseModel`` attribute (``schema``, ``json``) carry a trailing underscore and
an alias, so the JSON shape stays the OpenAPI / config shape.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ParserFormat = Literal["json", "urlencoded", "text"]
"""Names of the three built-in body formats."""


# --- Operation models ---


class MediaTypeObject(BaseModel):
    """An OpenAPI *Media Type Object* from a ``requestBody.content`` map.

    Only ``schema`` is used by the resolver. Other keys (``example``,
    ``encoding``...) are preserved in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class RequestBodyObject(BaseModel):
    """An inline OpenAPI *Request Body Object*.

    ``content`` maps media type patterns to :class:`MediaTypeObject` and
    keeps declaration order, which decides which pattern wins when several
    match the same request.
    """

    model_config = ConfigDict(extra="allow")

    description: Optional[str] = None
    required: bool = False
    content: dict[str, MediaTypeObject] = Field(default_factory=dict)


class ReferenceObject(BaseModel):
    """A ``{"$ref": "..."}`` pointer in place of an inline object."""

    model_config = ConfigDict(populate_by_name=True)

    ref: str = Field(alias="$ref")


class OperationSpec(BaseModel):
    """The part of an OpenAPI *Operation Object* needed to load a request body.

    ``request_body`` is ``None`` when the operation declares no body. A
    ``$ref`` pointer validates as :class:`ReferenceObject` (tried first), any
    other mapping as :class:`RequestBodyObject`.

    Example::

        OperationSpec.model_validate({
            "operationId": "createPet",
            "requestBody": {
                "content": {"application/json": {"schema": {"type": "object"}}}
            },
        })
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    operation_id: Optional[str] = Field(default=None, alias="operationId")
    method: Optional[str] = None
    path: Optional[str] = None
    request_body: Optional[Union[ReferenceObject, RequestBodyObject]] = Field(
        default=None, alias="requestBody", union_mode="left_to_right"
    )


# --- Result model ---


class RequestBodyResult(BaseModel):
    """Normalized outcome of loading a request body.

    Parsers return a partial result with only the fields they know about
    (``value`` and, for url-encoded forms, ``coercion_required``); the
    resolver merges exactly the fields a parser explicitly set
    (``model_fields_set``) into the result that already carries the matched
    ``media_type`` and ``schema``.

    Attributes:
        value: The parsed body, or ``None`` when no body was expected.
        coercion_required: ``True`` when the format only yields strings and
            downstream code must coerce values to the schema types.
        media_type: The declared media type pattern that matched the request.
        schema_: The schema declared for that media type (alias ``schema``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: Any = None
    coercion_required: Optional[bool] = None
    media_type: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")

    def merged(self, other: RequestBodyResult) -> RequestBodyResult:
        """Return a copy of this result updated with the fields *other* set explicitly."""
        update = {name: getattr(other, name) for name in other.model_fields_set}
        return self.model_copy(update=update)


# --- Parser options ---


class FormatParserOptions(BaseModel):
    """Options that may apply to any built-in body format.

    Every field defaults to ``None`` meaning "not set here"; the effective
    value is decided by :func:`~reqbody.options.resolve_parser_options`.
    A field only reaches the formats whose effective options declare it.
    """

    model_config = ConfigDict(extra="allow")

    type: Optional[Union[str, list[str]]] = Field(
        default=None, description="Content types the parser accepts to read"
    )
    limit: Optional[Union[int, str]] = Field(
        default=None, description="Maximum body size, bytes or e.g. '100kb'"
    )
    inflate: Optional[bool] = Field(
        default=None, description="Accept gzip/deflate encoded bodies"
    )
    strict: Optional[bool] = Field(
        default=None, description="JSON: only accept objects and arrays"
    )
    extended: Optional[bool] = Field(
        default=None, description="Urlencoded: parse bracket syntax into nested data"
    )
    parameter_limit: Optional[int] = Field(
        default=None, description="Urlencoded: maximum number of parameters"
    )
    default_charset: Optional[str] = Field(
        default=None, description="Text: charset used when the request names none"
    )


class BodyParserOptions(FormatParserOptions):
    """Shared options plus per-format overrides for the built-in parsers.

    Per-format sub-objects take precedence over the shared fields, which take
    precedence over the hard-coded defaults.

    Example::

        BodyParserOptions(limit="2mb", json={"strict": False})
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    json_: Optional[FormatParserOptions] = Field(default=None, alias="json")
    urlencoded: Optional[FormatParserOptions] = None
    text: Optional[FormatParserOptions] = None

    def for_format(self, fmt: ParserFormat) -> Optional[FormatParserOptions]:
        """Return the per-format sub-object for *fmt*, if any."""
        return self.json_ if fmt == "json" else getattr(self, fmt)


class JsonOptions(BaseModel):
    """Effective options of the built-in JSON parser."""

    type: list[str]
    limit: int
    inflate: bool = True
    strict: bool = True


class UrlencodedOptions(BaseModel):
    """Effective options of the built-in url-encoded form parser."""

    type: list[str]
    limit: int
    inflate: bool = True
    extended: bool = True
    parameter_limit: int = 1000


class TextOptions(BaseModel):
    """Effective options of the built-in text parser."""

    type: list[str]
    limit: int
    inflate: bool = True
    default_charset: str = "utf-8"


# --- Configuration ---


class PluginsConfig(BaseModel):
    """Explicit extension parser allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/reqbody/config.json``.

    Loaded and saved by :func:`~reqbody.config.load_global_config` and
    :func:`~reqbody.config.save_global_config`. Fields here have the lowest
    precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~reqbody.config.resolve_config`.
    """

    body_parser: BodyParserOptions = Field(default_factory=BodyParserOptions)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
