"""Pydantic models for sample requests."""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from collection_sample.errors import InvalidRequest
from collection_sample.utils.config import Config


DEFAULT_SORT = [("_id", -1)]

# Option names that may carry the size / chunk size, in either spelling.
_SIZE_KEYS = ("size",)
_CHUNK_SIZE_KEYS = ("chunk_size", "chunkSize")


class SampleRequest(BaseModel):
    """Options of a single sampling operation.

    Accepts both Python-style names and the option names used by the
    MongoDB drivers (``query``, ``fields``, ``maxTimeMS``, ``chunkSize``,
    ``promoteValues``). Unknown options are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    filter: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("filter", "query"),
    )
    projection: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("projection", "fields"),
    )
    size: int = Field(default=5, gt=0)
    sort: List[Tuple[str, Any]] = Field(default_factory=lambda: list(DEFAULT_SORT))
    max_time_ms: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("max_time_ms", "maxTimeMS"),
    )
    raw: bool = False
    chunk_size: int = Field(
        default=1000,
        gt=0,
        validation_alias=AliasChoices("chunk_size", "chunkSize"),
    )
    promote_values: bool = Field(
        default=True,
        validation_alias=AliasChoices("promote_values", "promoteValues"),
    )

    @field_validator("filter", mode="before")
    @classmethod
    def _default_filter(cls, value):
        return {} if value is None else value

    @field_validator("size", "chunk_size", "max_time_ms", mode="before")
    @classmethod
    def _reject_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("must be an integer, not a boolean")
        return value

    @field_validator("sort", mode="before")
    @classmethod
    def _sort_pairs(cls, value):
        if value is None:
            return list(DEFAULT_SORT)
        if isinstance(value, str):
            return [(value, 1)]
        if isinstance(value, Mapping):
            return list(value.items())
        return value

    @property
    def has_filter(self) -> bool:
        return bool(self.filter)

    @property
    def has_projection(self) -> bool:
        return bool(self.projection)

    @classmethod
    def from_options(
        cls,
        options: Optional[Mapping] = None,
        config: Optional[Config] = None,
        **kwargs
    ) -> "SampleRequest":
        """Build a request from an options mapping and/or keyword arguments.

        Keyword arguments win over ``options``. When ``config`` is given its
        ``sampling.size`` and ``sampling.chunk_size`` replace the built-in
        defaults for options the caller left out.

        Raises:
            InvalidRequest: If any option is malformed
        """
        if isinstance(options, SampleRequest) and not kwargs:
            return options
        if isinstance(options, SampleRequest):
            options = options.model_dump()
        if options is not None and not isinstance(options, Mapping):
            raise InvalidRequest(
                f"options must be a mapping, got {type(options).__name__}"
            )

        merged = dict(options or {})
        merged.update(kwargs)

        if config is not None:
            sampling = config.sampling
            if not any(k in merged for k in _SIZE_KEYS) and sampling.size:
                merged["size"] = sampling.size
            if not any(k in merged for k in _CHUNK_SIZE_KEYS) and sampling.chunk_size:
                merged["chunk_size"] = sampling.chunk_size

        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            raise InvalidRequest(f"Invalid sample options: {e}") from e
