"""Pull request model."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class PullRequestRef(BaseModel):
    """The fields of an open pull request needed to retarget it."""

    number: int = Field(..., description='Pull request number')
    base_ref: str = Field(..., description='Name of the branch it merges into')

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'PullRequestRef':
        """Build from a pull request object returned by the REST API."""
        return cls(number=data['number'], base_ref=data['base']['ref'])
