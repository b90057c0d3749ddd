from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Any, List, Optional
from .config import RECURSIVE_ENABLED, RECURSIVE_MAX_DEPTH

MIN_RESOLVE_DEPTH = 1
MAX_RESOLVE_DEPTH = 10


class ResolveConfig(BaseModel):
    """Enable flag and decode-round bound for the embedded-JSON resolver."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    enabled: bool = Field(default=True, description="Decode JSON documents embedded in string fields")
    max_depth: int = Field(default=3, alias="maxDepth", description="Maximum decode rounds, clamped to 1-10")

    @field_validator("max_depth", mode="before")
    @classmethod
    def _clamp_depth(cls, value):
        try:
            depth = int(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"max_depth must be an integer: {value!r}") from e
        # Out-of-range depths are clamped, not rejected
        return max(MIN_RESOLVE_DEPTH, min(MAX_RESOLVE_DEPTH, depth))


def default_resolve_config() -> ResolveConfig:
    return ResolveConfig(enabled=RECURSIVE_ENABLED, max_depth=RECURSIVE_MAX_DEPTH)


class ParseOutcome(BaseModel):
    """
    Terminal result of a single parse attempt.

    A valid outcome carries the parsed value (``None`` for both JSON ``null``
    and empty input, told apart by ``empty``). An invalid outcome carries the
    decoder's message and never a partial tree.
    """
    valid: bool
    data: Any = None
    error: Optional[str] = None
    empty: bool = False

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.valid and self.error is not None:
            raise ValueError("valid outcome cannot carry an error")
        if not self.valid and (self.data is not None or not self.error or self.empty):
            raise ValueError("invalid outcome carries only an error message")
        if self.empty and self.data is not None:
            raise ValueError("empty outcome carries no data")
        return self

    @classmethod
    def ok(cls, data: Any) -> "ParseOutcome":
        return cls(valid=True, data=data)

    @classmethod
    def empty_input(cls) -> "ParseOutcome":
        return cls(valid=True, data=None, empty=True)

    @classmethod
    def fail(cls, message: str) -> "ParseOutcome":
        return cls(valid=False, error=message)


class HistoryItem(BaseModel):
    id: str = Field(..., description="Random item identifier")
    timestamp: int = Field(..., description="Save time in epoch milliseconds")
    content: str = Field(..., description="Editor text that was saved")


class SearchMatch(BaseModel):
    path: str = Field(..., description="JSON pointer of the matching node")
    target: str = Field(..., description="'key' or 'value'")
    text: str = Field(..., description="Rendered text that matched")
    occurrences: int = Field(..., ge=1)


class TextRequest(BaseModel):
    text: str = Field(..., description="Raw editor text")


class FormatRequest(TextRequest):
    indent: Optional[int] = Field(default=None, ge=0, le=8, description="Indent width, defaults to JSON_INDENT")


class InspectRequest(TextRequest):
    recursive: Optional[ResolveConfig] = Field(default=None, description="Resolver settings, defaults from environment")
    query: Optional[str] = Field(default=None, description="Search query over keys and values")


class TypesRequest(TextRequest):
    recursive: Optional[ResolveConfig] = None


class TextResponse(BaseModel):
    text: str


class InspectResponse(BaseModel):
    valid: bool
    empty: bool = False
    error: Optional[str] = None
    data: Any = None
    display_text: Optional[str] = Field(None, description="Resolved tree, pretty-printed")
    recursive: ResolveConfig
    matches: List[SearchMatch] = Field(default_factory=list)
    match_count: int = 0
