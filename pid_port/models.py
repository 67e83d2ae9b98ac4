"""Data models for parsed socket tables."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class SocketRow:
    """One tokenized line of enumeration output."""

    tokens: tuple[str, ...]

    def get(self, index: int) -> str | None:
        """Token at index, or None when the row is too short."""
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None


@dataclass(frozen=True)
class Address:
    """A local address split into normalized host and port."""

    host: str
    port: int | None = None


@dataclass(frozen=True)
class SocketEntry:
    """A socket row after address and PID extraction."""

    host: str
    port: int | None
    pid: int | None


@dataclass(frozen=True)
class Listing:
    """Raw enumeration output plus the columns that interpret it."""

    text: str
    address_column: int
    pid_column: int


@dataclass
class PortTable:
    """All socket rows of a single snapshot."""

    rows: list[SocketRow] = field(default_factory=list)
    address_column: int = 0
    pid_column: int = 0

    def __len__(self) -> int:
        return len(self.rows)


class Binding(BaseModel):
    """One process occupying a port on one interface."""

    model_config = ConfigDict(frozen=True)

    host: str
    pid: int | None = Field(default=None, ge=0)
