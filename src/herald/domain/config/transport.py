"""Transport configuration model."""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field


class TransportConfig(BaseModel):
    """Configuration for the transport sender.

    Attributes:
        kind: Transport sender type
        url: Endpoint that receives batches (http only)
        headers: Extra HTTP headers sent with every batch
    """

    kind: Literal["mock", "http"] = "mock"
    url: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
