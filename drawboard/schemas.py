from typing import Optional

from pydantic import BaseModel


class UploadRequest(BaseModel):
    # Left optional so a missing field is reported as bad image data, not a 422.
    image: Optional[str] = None


class UploadResponse(BaseModel):
    success: bool
    filename: str
