"""Shared test fixtures and Hypothesis strategies."""

from __future__ import annotations

from hypothesis import strategies as st

from steamid64 import AccountType, Universe


# =============================================================================
# Well-known identifiers
# =============================================================================

# Individual, public universe, desktop instance, account 22202
KNOWN_STEAM64 = "76561197960287930"
KNOWN_STEAM2 = "STEAM_1:0:11101"
KNOWN_STEAM3 = "[U:1:22202]"
KNOWN_ACCOUNT_ID = 22202

# Clan, public universe, account 4
KNOWN_CLAN_STEAM64 = "103582791429521412"
KNOWN_CLAN_STEAM3 = "[g:1:4]"


# =============================================================================
# Hypothesis Strategies
# =============================================================================

# Account ids accepted by both the setter and the parsers
account_id_strategy = st.integers(min_value=0, max_value=0xFFFFFFFE)

# Universes a valid SteamID can live in
universe_strategy = st.sampled_from(
    [Universe.PUBLIC, Universe.BETA, Universe.INTERNAL, Universe.DEV]
)

# Any value that fits each field's width
instance_strategy = st.integers(min_value=0, max_value=0xFFFFF)
account_type_strategy = st.integers(min_value=0, max_value=0xF)
raw_universe_strategy = st.integers(min_value=0, max_value=0xFF)

# Enumerated account types
enumerated_type_strategy = st.sampled_from(list(AccountType))

# Positive 64-bit packed values
uint64_strategy = st.integers(min_value=1, max_value=(1 << 64) - 1)

# Steam3 type characters whose rendering does not depend on the instance
plain_type_char_strategy = st.sampled_from("IUGPCgTa")
