from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class DrawingMetadata(BaseModel):
    id: Optional[str] = None
    ip: Optional[str] = None
    timestamp: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_blank(self) -> bool:
        return self.id is None and self.ip is None and self.timestamp is None


class DrawingMetadataOut(DrawingMetadata):
    index: int


class AppendResult(BaseModel):
    index: int
    count: int
    metadata: DrawingMetadata


class DeleteResult(BaseModel):
    index: int
    remaining: int
    metadata: DrawingMetadata
    block_requested: bool = False
    blocked_ip: Optional[str] = None
    block_persisted: bool = False


class BlockedIPsOut(BaseModel):
    ips: List[str]
