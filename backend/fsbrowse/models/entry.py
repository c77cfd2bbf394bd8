"""Entry descriptors returned by the listing endpoint."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ACCESS_DENIED = "EACCES"

Permissions = Union[list[Literal["read", "write"]], Literal["EACCES"]]


class FileType(str, Enum):
    DIR = "dir"
    SYMLINK = "symlink"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    CODE = "code"
    ARCHIVE = "archive"
    DOCUMENT = "document"
    OTHER = "other"


class EntryTimes(BaseModel):
    create: str
    access: str
    modified: str


class EntryDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    parent_path: str = Field(serialization_alias="parentPath")
    type: FileType
    permissions: Optional[Permissions] = None
    size: Optional[int] = None
    time: Optional[EntryTimes] = None
    children: Optional[list["EntryDescriptor"]] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
