"""SQLAlchemy integration for SteamID.

Provides a TypeDecorator and helpers for using SteamIDs as typed columns
that store the canonical 64-bit decimal string as TEXT. TEXT rather than
BIGINT because SteamID64 values use the full unsigned 64-bit range, which
signed database integers cannot hold.

Example:
    from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
    from steamid64 import SteamID
    from steamid64.sqlalchemy import steamid_column

    class Base(DeclarativeBase):
        pass

    class Player(Base):
        __tablename__ = "players"

        id: Mapped[int] = mapped_column(primary_key=True)
        steam_id: Mapped[SteamID] = steamid_column(unique=True)
        clan_id: Mapped[SteamID | None] = steamid_column(nullable=True)

Note:
    SteamIDs are mutable, but the ORM does not track in-place changes made
    through ``set_*``; assign a new SteamID to the attribute instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypedDict, Unpack, cast

from sqlalchemy import Text
from sqlalchemy.orm import mapped_column
from sqlalchemy.types import TypeDecorator

from steamid64 import SteamID, SteamIDType


if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Dialect
    from sqlalchemy.orm import MappedColumn

# An empty SteamID serializes as "0", which the parser does not accept
_EMPTY_UINT64 = "0"


class SteamIDColumnKwargs(TypedDict, total=False):
    """Keyword arguments for steamid_column, matching mapped_column's common options."""

    primary_key: bool
    nullable: bool
    default: object
    default_factory: Callable[[], object]
    index: bool
    unique: bool
    insert_default: object
    onupdate: object


class SteamIDColumn(TypeDecorator[SteamIDType]):
    """SQLAlchemy TypeDecorator for SteamID storage as TEXT.

    Serializes SteamID objects to their 64-bit decimal string on write and
    deserializes back to SteamID objects on read.

    Example:
        steam_id: Mapped[SteamID] = mapped_column(SteamIDColumn())
    """

    impl = Text
    cache_ok = True

    def process_bind_param(
        self,
        value: SteamIDType | str | int | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> str | None:
        """Convert a SteamID to its decimal string for storage.

        Strings and ints are parsed first, so Steam2/Steam3 input is stored
        in canonical form and malformed input fails at write time.
        """
        if value is None:
            return None
        if isinstance(value, SteamIDType):
            return value.to_uint64()
        return SteamID(value).to_uint64()  # Raises SteamIDError if invalid

    def process_result_value(
        self,
        value: str | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> SteamIDType | None:
        """Convert a stored decimal string to a SteamID object."""
        if value is None:
            return None
        steamid = SteamID()
        if value != _EMPTY_UINT64:
            steamid.set_from_uint64(value)
        return steamid


def steamid_column(**kwargs: Unpack[SteamIDColumnKwargs]) -> MappedColumn[Any]:
    """Create a mapped_column for a SteamID (pure SQLAlchemy).

    Args:
        **kwargs: Additional arguments passed to mapped_column.
            Supports: primary_key, nullable, default, default_factory,
            index, unique, insert_default, onupdate.

    Returns:
        A mapped_column configured with a SteamIDColumn.

    Note:
        SteamIDs are unhashable, so they cannot serve as primary keys held
        in the session's identity map.
    """
    return mapped_column(SteamIDColumn(), **kwargs)


class SteamIDFieldKwargs(TypedDict, total=False):
    """Keyword arguments for steamid_field, matching SQLModel Field's common options."""

    default: object
    default_factory: Callable[[], object]
    index: bool
    unique: bool
    nullable: bool


def steamid_field(**kwargs: Unpack[SteamIDFieldKwargs]) -> Any:  # noqa: ANN401 - return type matches SQLModel's Field
    """Create a SQLModel Field for a SteamID.

    Configures sa_type automatically.

    Args:
        **kwargs: Additional arguments passed to Field.
            Supports: default, default_factory, index, unique, nullable.

    Returns:
        A SQLModel Field configured with a SteamIDColumn.

    Example:
        from sqlmodel import SQLModel
        from steamid64 import SteamID
        from steamid64.sqlalchemy import steamid_field

        class Player(SQLModel, table=True):
            id: int | None = Field(default=None, primary_key=True)
            steam_id: SteamID = steamid_field(unique=True)
    """
    # Import here to avoid hard dependency on sqlmodel
    from sqlmodel import Field

    # SQLModel's sa_type is incorrectly typed as type[Any] but accepts TypeEngine instances.
    # Use cast to satisfy the type checker until SQLModel fixes their stubs.
    sa_type = cast("type[Any]", SteamIDColumn())
    return Field(sa_type=sa_type, **kwargs)


__all__ = ["SteamIDColumn", "steamid_column", "steamid_field"]
