from pydantic import BaseModel
from typing import List


class ImportErrorDetail(BaseModel):
    row: int
    candidate: str
    error: str


class ImportSummary(BaseModel):
    success: bool
    message: str
    imported: int = 0
    created: int = 0
    updated: int = 0
    duplicates: int = 0
    total: int = 0
    errors: List[ImportErrorDetail] = []
