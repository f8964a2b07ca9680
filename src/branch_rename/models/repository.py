"""Repository reference model."""

from pydantic import BaseModel, Field


class RepositoryRef(BaseModel):
    """An ``owner/name`` pair identifying one repository."""

    owner: str = Field(..., description='Repository owner (user or organization)')
    name: str = Field(..., description='Repository name')

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def parse(cls, full_name: str) -> 'RepositoryRef':
        """Build a reference from an ``owner/repo`` identifier.

        The identifier is split on the first slash only.

        Raises:
            ValueError: If either side of the slash is empty
        """
        owner, _, name = full_name.partition('/')
        if not owner or not name:
            raise ValueError(f'Invalid repository identifier: {full_name!r}')
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f'{self.owner}/{self.name}'

    def __str__(self) -> str:
        return self.full_name
