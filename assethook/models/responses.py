from pydantic import BaseModel, ConfigDict, Field

from assethook.constants import FILE_STATUS_SUCCESS

__all__ = ["FileStatus", "MutationResponse", "ValidationResponse"]


class FileStatus(BaseModel):
    """Verdict of a webhook service about one file."""

    model_config = ConfigDict(extra="ignore")

    status: str
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == FILE_STATUS_SUCCESS


class ValidationResponse(BaseModel):
    """Body returned by a webhook service that rejected one or more files."""

    model_config = ConfigDict(extra="ignore")

    status: dict[str, FileStatus] = Field(default_factory=dict)


class MutationResponse(BaseModel):
    """Body returned by a mutation webhook service: the new content of each file."""

    model_config = ConfigDict(extra="ignore")

    files: dict[str, str] = Field(default_factory=dict)
