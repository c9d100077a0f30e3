"""File operation schemas for photo uploads."""

from typing import Optional
from pydantic import BaseModel, Field, validator
import re


class FileUploadInput(BaseModel):
    """Input validation for file upload operations."""

    folder: str = Field(..., description="Key prefix to store the file under")
    max_size_mb: int = Field(default=10, description="Maximum file size in MB")

    @validator('folder')
    def validate_folder(cls, v):
        """Sanitize a slash separated key prefix."""
        if not v:
            raise ValueError("Folder name cannot be empty")

        segments = [re.sub(r'[^a-zA-Z0-9_-]', '_', s.strip()) for s in v.split("/") if s.strip()]
        segments = [s for s in segments if s.strip("_")]

        if not segments:
            raise ValueError("Folder name must contain valid characters")

        sanitized = "/".join(segments)
        if len(sanitized) > 120:
            raise ValueError("Folder name must be 120 characters or less")

        return sanitized

    @validator('max_size_mb')
    def validate_max_size(cls, v):
        if v < 1:
            raise ValueError("Maximum size must be at least 1 MB")
        if v > 100:
            raise ValueError("Maximum size cannot exceed 100 MB")
        return v


class StoredObject(BaseModel):
    """An image accepted by object storage; only ``key`` is persisted as the photo URL."""

    key: str
    filename: str
    original_name: Optional[str] = None
    mime_type: str
    size: int
