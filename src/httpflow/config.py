"""Pydantic configuration model for the session agent."""

from typing import Optional

from pydantic import BaseModel, Field


class AgentConfig(BaseModel):
    """Settings applied by an Agent to every transport call."""

    timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Default timeout in seconds when a session is run without one (None = wait forever)",
    )
    stream: bool = Field(
        True,
        description="Ask the transport to defer reading the body so handlers consume it",
    )

    model_config = {"extra": "forbid"}
