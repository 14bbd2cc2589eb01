from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Union
from datetime import datetime


class Media(BaseModel):
    """An image or video reference. Two media are the same if their uri is."""

    model_config = ConfigDict(frozen=True)

    uri: str
    width: Optional[int] = None
    height: Optional[int] = None

    def has_dimensions(self) -> bool:
        return (
            self.width is not None
            and self.height is not None
            and self.width >= 0
            and self.height >= 0
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Media):
            return NotImplemented
        return self.uri == other.uri

    def __hash__(self) -> int:
        return hash(self.uri)


class PreviewResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    title: str = ""
    site_name: str = ""
    description: str = ""
    media_type: str = "website"
    images: frozenset[Media] = frozenset()
    videos: frozenset[Media] = frozenset()
    favicons: frozenset[str] = frozenset()


class PreviewMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched_text: str
    result: PreviewResult


class PreviewResponse(BaseModel):
    url: str
    preview: Optional[PreviewResult] = None
    fetched_at: datetime


class MatchesResponse(BaseModel):
    text: str
    matches: List[PreviewMatch] = Field(default_factory=list)
    fetched_at: datetime


class PreviewJob(BaseModel):
    """A queued request: preview ``url`` directly, or scan ``text`` for links."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: Union[int, str] = Field(alias="jobId")
    url: Optional[str] = None
    text: Optional[str] = None
    first: bool = False

    @model_validator(mode="after")
    def require_target(self):
        if self.url is None and self.text is None:
            raise ValueError("A preview job needs either 'url' or 'text'")
        return self
