from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repo_digest.core.domain.digest import DEFAULT_MAX_FILE_SIZE_KB, parse_exclude_patterns


class AnalyzeRequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exclude_patterns: list[str] = Field(default_factory=list, alias="excludePatterns")
    max_file_size_kb: int = Field(default=DEFAULT_MAX_FILE_SIZE_KB, alias="maxFileSizeKB", ge=0)

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def split_comma_separated(cls, value: Any) -> Any:
        if isinstance(value, str):
            return list(parse_exclude_patterns(value))
        return value


class ErrorResponseDTO(BaseModel):
    message: str
    error: str | None = None
