from pydantic import BaseModel, Field
from typing import Optional


class ResourceMeta(BaseModel):
    """Stored record minus its encoded payload."""
    id: str
    name: str
    type: str = ''
    size: int
    uploadDate: str
    tags: list[str] = Field(default_factory=list)
    owner: Optional[str] = None


class ResourceListItem(ResourceMeta):
    category: str
    downloadUrl: str


class UploadResponse(BaseModel):
    success: bool = True
    resource: ResourceMeta


class ResourceListResponse(BaseModel):
    resources: list[ResourceListItem]
    total: int


class TagsResponse(BaseModel):
    tags: list[str]


class DeleteResponse(BaseModel):
    success: bool = True
