"""
Pydantic models for web API responses.
"""

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from podboard.pods.registry import PodSnapshot


class EpisodeView(BaseModel):
    """A single episode link."""
    title: str = Field(..., description="Episode title")
    url: str = Field(..., description="Media URL")


class PodView(BaseModel):
    """A pod and its most recent episodes."""
    name: str = Field(..., description="Pod name")
    last_update: str = Field(..., description="Last refresh time (YYYY-MM-DD HH:MM, UTC)")
    episodes: List[EpisodeView] = Field(default_factory=list, description="Episodes, most recent first")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Go Time",
                "last_update": "2024-01-15 08:00",
                "episodes": [
                    {
                        "title": "Episode 301",
                        "url": "https://cdn.example.com/gotime-301.mp3",
                    }
                ],
            }
        }
    )

    @classmethod
    def from_snapshot(cls, snapshot: PodSnapshot) -> "PodView":
        return cls(
            name=snapshot.name,
            last_update=snapshot.last_update_formatted,
            episodes=[EpisodeView(title=ep.title, url=ep.url) for ep in snapshot.episodes],
        )


class RefreshResponse(BaseModel):
    """Result of a manual refresh."""
    status: Literal["done"] = "done"
    duration_seconds: float = Field(..., ge=0, description="Time spent refreshing")
    episode_counts: Dict[str, int] = Field(default_factory=dict, description="Episodes per pod after refresh")


class HealthResponse(BaseModel):
    """Service health and refresh state."""
    status: Literal["healthy"] = "healthy"
    service: str = "podboard"
    state: Literal["idle", "refreshing"] = Field(..., description="Refresh engine state")
