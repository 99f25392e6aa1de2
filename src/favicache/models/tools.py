from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

_MAX_URL_LENGTH = 2048


def _strip_url(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("url must not be empty")
    return value


class GetFaviconInput(BaseModel):
    url: str = Field(max_length=_MAX_URL_LENGTH)
    size: int | None = Field(default=None, ge=1, le=256)

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, value: str) -> str:
        return _strip_url(value)


class GetFaviconOutput(BaseModel):
    url: str
    domain: str | None
    icon: str | None


class GetFaviconsInput(BaseModel):
    urls: list[str] = Field(min_length=1, max_length=200)
    size: int | None = Field(default=None, ge=1, le=256)

    @field_validator("urls")
    @classmethod
    def urls_not_blank(cls, value: list[str]) -> list[str]:
        stripped = [_strip_url(url) for url in value]
        for url in stripped:
            if len(url) > _MAX_URL_LENGTH:
                raise ValueError(f"url longer than {_MAX_URL_LENGTH} characters")
        return stripped


class GetFaviconsOutput(BaseModel):
    icons: dict[str, str | None]


class CachedFaviconOutput(BaseModel):
    url: str
    cached: bool  # False means never resolved (or expired); icon is then meaningless
    icon: str | None


class ClearCacheOutput(BaseModel):
    cleared_entries: int
