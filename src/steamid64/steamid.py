"""SteamID - a 64-bit packed account identifier and its textual renderings."""

from __future__ import annotations

import logging
import operator
import re
from enum import IntEnum, IntFlag
from typing import Any, Protocol, Self, runtime_checkable

from pydantic_core import CoreSchema, core_schema


_logger = logging.getLogger(__name__)

# Bit layout, low bit to high bit:
#   account id  bits 0-31
#   instance    bits 32-51
#   type        bits 52-55
#   universe    bits 56-63
_ACCOUNT_ID_OFFSET = 0
_ACCOUNT_ID_MASK = 0xFFFFFFFF
_INSTANCE_OFFSET = 32
_INSTANCE_MASK = 0xFFFFF
_TYPE_OFFSET = 52
_TYPE_MASK = 0xF
_UNIVERSE_OFFSET = 56
_UNIVERSE_MASK = 0xFF

# The all-ones account id is reserved; both the setter and the parsers stop below it
_ACCOUNT_ID_MAX = _ACCOUNT_ID_MASK - 1

_UINT64_MAX = (1 << 64) - 1

# Textual grammars, matched against the whole input string.
# [0-9] rather than \d so that non-ASCII digits are rejected.
_STEAM2_PATTERN = re.compile(
    r"STEAM_(?P<universe>[0-4]):(?P<auth_server>[0-1]):(?P<account_id>0|[1-9][0-9]{0,9})"
)
_STEAM3_PATTERN = re.compile(
    r"\[(?P<type>[AGMPCgcLTIUai]):(?P<universe>[0-4]):(?P<account_id>0|[1-9][0-9]{0,9})"
    r"(?::(?P<instance>[0-9]+))?\]"
)
_UINT64_PATTERN = re.compile(r"[1-9][0-9]{0,19}")

# Invite codes: hex digits substituted into an alphabet without look-alike characters
_INVITE_TRANSLATION = str.maketrans("0123456789abcdef", "bcdfghjkmnpqetvw")
_INVITE_HYPHEN_THRESHOLD = 3


class Universe(IntEnum):
    """Top-level deployment partition of an account."""

    INVALID = 0
    PUBLIC = 1
    BETA = 2
    INTERNAL = 3
    DEV = 4


class AccountType(IntEnum):
    """Role of the identified entity."""

    INVALID = 0
    INDIVIDUAL = 1
    MULTISEAT = 2
    GAME_SERVER = 3
    ANON_GAME_SERVER = 4
    PENDING = 5
    CONTENT_SERVER = 6
    CLAN = 7
    CHAT = 8
    P2P_SUPER_SEEDER = 9
    ANON_USER = 10


class Instance(IntEnum):
    """Well-known instance values for individual accounts."""

    ALL = 0
    DESKTOP = 1
    CONSOLE = 2
    WEB = 4


class InstanceFlag(IntFlag):
    """Chat instance flags, carved from the top of the 20-bit instance field."""

    CLAN = (_INSTANCE_MASK + 1) >> 1
    LOBBY = (_INSTANCE_MASK + 1) >> 2
    MMS_LOBBY = (_INSTANCE_MASK + 1) >> 3


# Steam3 type characters indexed by account type. P2P super seeders have no
# character of their own and render with the 'i' fallback.
_ACCOUNT_TYPE_CHARS: dict[int, str] = {
    AccountType.INVALID: "I",
    AccountType.INDIVIDUAL: "U",
    AccountType.MULTISEAT: "M",
    AccountType.GAME_SERVER: "G",
    AccountType.ANON_GAME_SERVER: "A",
    AccountType.PENDING: "P",
    AccountType.CONTENT_SERVER: "C",
    AccountType.CLAN: "g",
    AccountType.CHAT: "T",  # lobby chat renders as 'L', clan chat as 'c'
    AccountType.ANON_USER: "a",
}
_ACCOUNT_TYPE_BY_CHAR: dict[str, AccountType] = {
    char: AccountType(code) for code, char in _ACCOUNT_TYPE_CHARS.items()
}
_TYPE_CHAR_ALIASES = {"i": "I"}
_FALLBACK_TYPE_CHAR = "i"


class SteamIDError(ValueError):
    """Raised when SteamID parsing, validation or rendering fails."""


class OutOfRangeError(SteamIDError):
    """A field value or parsed number does not fit its bit width."""

    def __init__(self, field: str, value: int, limit: int) -> None:
        self.field = field
        self.value = value
        self.limit = limit
        super().__init__(f"{field} must be between 0 and {limit}, got {value}")


class InvalidFormatError(SteamIDError):
    """The input matches none of the accepted SteamID formats."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"SteamID must be 'STEAM_X:Y:Z', '[T:U:A]', '[T:U:A:I]' or a positive "
            f"64-bit integer, got {value!r}"
        )


class NotNumericError(SteamIDError):
    """A raw 64-bit value was expected but the input is not a positive integer."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"SteamID64 must be a positive integer, got {value!r}")


class UnsupportedForTypeError(SteamIDError):
    """The requested rendering is not defined for this account type."""

    def __init__(self, account_type: int, rendering: str) -> None:
        self.account_type = account_type
        self.rendering = rendering
        super().__init__(
            f"{rendering} can only be used on individual SteamIDs, "
            f"got account type {_describe_type(account_type)}"
        )


class UnknownTypeCharacterError(SteamIDError):
    """A Steam3 type character has no account type."""

    def __init__(self, char: str) -> None:
        self.char = char
        super().__init__(f"Unknown account type character {char!r}")


@runtime_checkable
class SteamIDType(Protocol):
    """Protocol for anything exposing the SteamID read surface.

    Example:
        def profile_url(steamid: SteamIDType) -> str:
            return f"https://steamcommunity.com/profiles/{steamid.to_uint64()}"
    """

    __slots__ = ()

    @property
    def account_id(self) -> int:
        """The 32-bit account number."""
        ...

    @property
    def account_instance(self) -> int:
        """The 20-bit instance field."""
        ...

    @property
    def account_type(self) -> int:
        """The 4-bit account type code."""
        ...

    @property
    def account_universe(self) -> int:
        """The 8-bit universe code."""
        ...

    def to_uint64(self) -> str:
        """The packed value as an unsigned decimal string."""
        ...


def _describe_type(account_type: int) -> str:
    try:
        return AccountType(account_type).name
    except ValueError:
        return str(account_type)


def _type_code_for_char(char: str) -> AccountType | None:
    """Look up the account type for a Steam3 type character.

    Returns None when the character has no entry; 'c' and 'L' (chat
    variants) are deliberately absent.
    """
    return _ACCOUNT_TYPE_BY_CHAR.get(_TYPE_CHAR_ALIASES.get(char, char))


def _type_char_for_code(account_type: int) -> str:
    """Return the Steam3 type character for an account type, 'i' if it has none."""
    return _ACCOUNT_TYPE_CHARS.get(account_type, _FALLBACK_TYPE_CHAR)


def _hex_to_invite(hex_digits: str) -> str:
    """Substitute lowercase hex digits into the invite alphabet.

    Codes longer than three characters are split with a hyphen at the
    midpoint (floor division).
    """
    code = hex_digits.translate(_INVITE_TRANSLATION)
    if len(code) > _INVITE_HYPHEN_THRESHOLD:
        middle = len(code) // 2
        code = f"{code[:middle]}-{code[middle:]}"
    return code


def _is_uint64_input(value: object) -> bool:
    """Check for a plain positive integer: an int or a decimal string without sign or padding."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, str):
        return _UINT64_PATTERN.fullmatch(value) is not None
    return False


def _to_uint64(value: str | int) -> int:
    number = int(value)
    if number > _UINT64_MAX:
        raise OutOfRangeError("steamid64", number, _UINT64_MAX)
    return number


class SteamID:
    """A SteamID stored as a packed unsigned 64-bit integer.

    The identifier can be built from a Steam2 string (``STEAM_1:0:11101``),
    a Steam3 string (``[U:1:22202]``) or the raw 64-bit value
    (``76561197960287930``, as a string or int). With no argument every
    field is zero, which is not a valid SteamID.

    Example:
        >>> steamid = SteamID("76561197960287930")
        >>> steamid.render_steam2()
        'STEAM_1:0:11101'
        >>> steamid.render_steam3()
        '[U:1:22202]'

    Note:
        SteamIDs are mutable through the ``set_*`` methods and are not safe
        to mutate from several threads at once; callers sharing one instance
        must serialize writes themselves. Being mutable, they are unhashable.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str | int | None = None) -> None:
        """Initialize a SteamID from one of the accepted input formats.

        Formats are tried in order: Steam2, Steam3, raw 64-bit value. The
        first one that matches wins.

        Args:
            value: A Steam2 or Steam3 string, a positive 64-bit integer or
                its decimal string, or None for an empty SteamID.

        Raises:
            OutOfRangeError: If a parsed account id or instance does not fit
                its field, or the raw value exceeds 64 bits.
            UnknownTypeCharacterError: If a Steam3 type character has no
                account type.
            InvalidFormatError: If the input matches no accepted format.
        """
        self._value = 0

        if value is None:
            return

        if isinstance(value, str):
            if match := _STEAM2_PATTERN.fullmatch(value):
                _logger.debug("Parsing %r as a Steam2 id", value)
                self._load_steam2(match)
                return
            if match := _STEAM3_PATTERN.fullmatch(value):
                _logger.debug("Parsing %r as a Steam3 id", value)
                self._load_steam3(match)
                return

        if _is_uint64_input(value):
            _logger.debug("Parsing %r as a SteamID64", value)
            self._value = _to_uint64(value)
            return

        raise InvalidFormatError(value)

    def _load_steam2(self, match: re.Match[str]) -> None:
        account_half = int(match["account_id"])
        if account_half > _ACCOUNT_ID_MAX:
            raise OutOfRangeError("account_id", account_half, _ACCOUNT_ID_MAX)

        universe = int(match["universe"])
        # Old Steam2 ids put 0 in the universe slot for public accounts
        if universe == Universe.INVALID:
            universe = Universe.PUBLIC

        account_id = (account_half << 1) | int(match["auth_server"])

        self.set_account_universe(universe)
        self.set_account_instance(Instance.DESKTOP)
        self.set_account_type(AccountType.INDIVIDUAL)
        self.set_account_id(account_id)

    def _load_steam3(self, match: re.Match[str]) -> None:
        account_id = int(match["account_id"])
        if account_id > _ACCOUNT_ID_MAX:
            raise OutOfRangeError("account_id", account_id, _ACCOUNT_ID_MAX)

        type_char = match["type"]
        instance: int
        if type_char in ("T", "g"):
            instance = Instance.ALL
        elif match["instance"] is not None:
            instance = int(match["instance"])
        elif type_char == "U":
            instance = Instance.DESKTOP
        else:
            instance = Instance.ALL

        if type_char in ("c", "L"):
            # Chat characters carry no table entry; the account type is left as is
            instance = InstanceFlag.CLAN
        else:
            account_type = _type_code_for_char(type_char)
            if account_type is None:
                raise UnknownTypeCharacterError(type_char)
            self.set_account_type(account_type)

        self.set_account_universe(int(match["universe"]))
        self.set_account_instance(instance)
        self.set_account_id(account_id)

    @classmethod
    def from_parts(
        cls,
        account_id: int,
        *,
        instance: int = Instance.DESKTOP,
        account_type: int = AccountType.INDIVIDUAL,
        universe: int = Universe.PUBLIC,
    ) -> Self:
        """Build a SteamID from its individual fields.

        Defaults describe a public, desktop individual account.

        Raises:
            OutOfRangeError: If any field does not fit its bit width.
        """
        return (
            cls()
            .set_account_universe(universe)
            .set_account_type(account_type)
            .set_account_instance(instance)
            .set_account_id(account_id)
        )

    def _get(self, offset: int, mask: int) -> int:
        return (self._value >> offset) & mask

    def _set(self, field: str, offset: int, mask: int, value: int, limit: int) -> Self:
        value = operator.index(value)
        if not 0 <= value <= limit:
            raise OutOfRangeError(field, value, limit)
        self._value = (self._value & ~(mask << offset)) | ((value & mask) << offset)
        return self

    @property
    def account_id(self) -> int:
        """The 32-bit account number."""
        return self._get(_ACCOUNT_ID_OFFSET, _ACCOUNT_ID_MASK)

    @property
    def account_instance(self) -> int:
        """The 20-bit instance field (session kind, or chat flags)."""
        return self._get(_INSTANCE_OFFSET, _INSTANCE_MASK)

    @property
    def account_type(self) -> int:
        """The 4-bit account type code; compare against AccountType."""
        return self._get(_TYPE_OFFSET, _TYPE_MASK)

    @property
    def account_universe(self) -> int:
        """The 8-bit universe code; compare against Universe."""
        return self._get(_UNIVERSE_OFFSET, _UNIVERSE_MASK)

    def set_account_id(self, value: int) -> Self:
        """Set the account number, keeping every other field.

        Raises:
            OutOfRangeError: If value is negative or not below 0xFFFFFFFF.
        """
        return self._set("account_id", _ACCOUNT_ID_OFFSET, _ACCOUNT_ID_MASK, value, _ACCOUNT_ID_MAX)

    def set_account_instance(self, value: int) -> Self:
        """Set the instance, keeping every other field.

        Raises:
            OutOfRangeError: If value does not fit in 20 bits.
        """
        return self._set("account_instance", _INSTANCE_OFFSET, _INSTANCE_MASK, value, _INSTANCE_MASK)

    def set_account_type(self, value: int) -> Self:
        """Set the account type, keeping every other field.

        Only the 4-bit width is enforced; codes outside AccountType are
        stored and make is_valid() return False.

        Raises:
            OutOfRangeError: If value does not fit in 4 bits.
        """
        return self._set("account_type", _TYPE_OFFSET, _TYPE_MASK, value, _TYPE_MASK)

    def set_account_universe(self, value: int) -> Self:
        """Set the universe, keeping every other field.

        Raises:
            OutOfRangeError: If value does not fit in 8 bits.
        """
        return self._set("account_universe", _UNIVERSE_OFFSET, _UNIVERSE_MASK, value, _UNIVERSE_MASK)

    def set_from_uint64(self, value: str | int) -> Self:
        """Replace the whole packed value.

        No field validation is performed; use is_valid() afterwards.

        Raises:
            NotNumericError: If value is not a positive integer or decimal string.
            OutOfRangeError: If value exceeds 64 bits.
        """
        if not _is_uint64_input(value):
            raise NotNumericError(value)
        self._value = _to_uint64(value)
        return self

    def is_valid(self) -> bool:
        """Check that the fields describe a structurally valid SteamID.

        This does not check that the account exists.
        """
        account_type = self.account_type
        if account_type <= AccountType.INVALID or account_type > AccountType.ANON_USER:
            return False

        universe = self.account_universe
        if universe <= Universe.INVALID or universe > Universe.DEV:
            return False

        account_id = self.account_id
        instance = self.account_instance

        # Parsed "[U:1:1]" carries the DESKTOP instance and must stay valid
        if account_type == AccountType.INDIVIDUAL and (
            account_id == 0 or instance > Instance.WEB
        ):
            return False

        if account_type == AccountType.CLAN and (account_id == 0 or instance != 0):
            return False

        return not (account_type == AccountType.GAME_SERVER and account_id == 0)

    def render_steam2(self) -> str:
        """Render as ``STEAM_X:Y:Z``.

        Only individual (and invalid) types have a Steam2 form; any other
        type falls back to the 64-bit decimal string.
        """
        if self.account_type in (AccountType.INVALID, AccountType.INDIVIDUAL):
            account_id = self.account_id
            return f"STEAM_{self.account_universe}:{account_id & 1}:{account_id >> 1}"
        return self.to_uint64()

    def render_steam3(self) -> str:
        """Render as ``[T:U:A]``, or ``[T:U:A:I]`` for multiseat and anonymous game servers."""
        account_type = self.account_type
        instance = self.account_instance
        type_char = _type_char_for_code(account_type)
        render_instance = False

        if account_type == AccountType.CHAT:
            if instance & InstanceFlag.CLAN:
                type_char = "c"
            elif instance & InstanceFlag.LOBBY:
                type_char = "L"
        elif account_type in (AccountType.ANON_GAME_SERVER, AccountType.MULTISEAT):
            render_instance = True

        rendered = f"{type_char}:{self.account_universe}:{self.account_id}"
        if render_instance:
            rendered = f"{rendered}:{instance}"
        return f"[{rendered}]"

    def render_steam_invite(self) -> str:
        """Render the short invite code used by ``s.team/p/`` links.

        Note:
            The midpoint hyphen is placed at floor(length / 2) for codes
            longer than three characters. This matches observed codes for
            typical account numbers but has not been checked for every length.

        Raises:
            UnsupportedForTypeError: If the account type is not individual.
        """
        account_type = self.account_type
        if account_type not in (AccountType.INVALID, AccountType.INDIVIDUAL):
            raise UnsupportedForTypeError(account_type, "Invite codes")
        return _hex_to_invite(format(self.account_id, "x"))

    def to_uint64(self) -> str:
        """The packed value as an unsigned decimal string (canonical storage form)."""
        return str(self._value)

    def __str__(self) -> str:
        """Return the 64-bit decimal representation."""
        return self.to_uint64()

    def __repr__(self) -> str:
        """Return a detailed representation."""
        return f"SteamID({self.render_steam3()!r})"

    def __int__(self) -> int:
        """Return the packed 64-bit value."""
        return self._value

    def __index__(self) -> int:
        """Return the packed 64-bit value for hex(), bin() and slicing."""
        return self._value

    def __eq__(self, other: object) -> bool:
        """Check equality with another SteamID."""
        if isinstance(other, SteamID):
            return self._value == other._value
        return NotImplemented

    # Mutable, so never usable as a dict key
    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: object) -> bool:
        """Compare for sorting by packed value."""
        if isinstance(other, SteamID):
            return self._value < other._value
        return NotImplemented

    def __le__(self, other: object) -> bool:
        """Compare for sorting by packed value."""
        if isinstance(other, SteamID):
            return self._value <= other._value
        return NotImplemented

    def __gt__(self, other: object) -> bool:
        """Compare for sorting by packed value."""
        if isinstance(other, SteamID):
            return self._value > other._value
        return NotImplemented

    def __ge__(self, other: object) -> bool:
        """Compare for sorting by packed value."""
        if isinstance(other, SteamID):
            return self._value >= other._value
        return NotImplemented

    def __copy__(self) -> Self:
        """Return an independent SteamID with the same packed value."""
        return _restore(type(self), self._value)

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        """Return an independent SteamID with the same packed value."""
        return self.__copy__()

    def __reduce__(self) -> tuple[Any, tuple[type[Self], int]]:
        """Support pickling for multiprocessing, caching, etc."""
        return (_restore, (type(self), self._value))

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,  # noqa: ANN401
        handler: Any,  # noqa: ANN401
    ) -> CoreSchema:
        """Pydantic integration for validation and serialization.

        Accepts SteamID instances, strings in any supported format and
        positive integers. Serializes to the 64-bit decimal string, since
        JSON consumers commonly lose precision on integers above 2**53.
        """

        def validate(v: SteamID | str | int) -> SteamID:
            if isinstance(v, SteamID):
                # Detach from the caller's mutable instance
                return v.__copy__()
            if isinstance(v, (str, int)) and not isinstance(v, bool):
                return cls(v)
            raise SteamIDError(f"Expected SteamID, str or int, got {type(v).__name__}")

        return core_schema.json_or_python_schema(
            json_schema=core_schema.chain_schema(
                [
                    core_schema.union_schema(
                        [core_schema.str_schema(), core_schema.int_schema()]
                    ),
                    core_schema.no_info_plain_validator_function(validate),
                ]
            ),
            python_schema=core_schema.no_info_plain_validator_function(validate),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, return_schema=core_schema.str_schema()
            ),
        )


def _restore[T: SteamID](cls: type[T], value: int) -> T:
    """Rebuild a SteamID from its packed value, bypassing parsing."""
    steamid = cls.__new__(cls)
    steamid._value = value  # noqa: SLF001
    return steamid
