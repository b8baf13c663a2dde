"""Long map and game type names for Quake3-family games."""

import json
import logging
from collections.abc import Mapping

__all__ = ["NameTable", "load_name_table", "DEFAULT_MAP_NAMES", "DEFAULT_GAME_TYPES"]

logger = logging.getLogger(__name__)

DEFAULT_MAP_NAMES: dict[str, str] = {
    # Quake III Arena
    "q3dm0": "Introduction",
    "q3dm1": "Arena Gate",
    "q3dm2": "House of Pain",
    "q3dm3": "Arena of Death",
    "q3dm4": "The Place of Many Deaths",
    "q3dm5": "The Forgotten Place",
    "q3dm6": "The Camping Grounds",
    "q3dm7": "Temple of Retribution",
    "q3dm8": "Brimstone Abbey",
    "q3dm9": "Hero's Keep",
    "q3dm10": "The Nameless Place",
    "q3dm11": "Deva Station",
    "q3dm12": "The Dredwerkz",
    "q3dm13": "Lost World",
    "q3dm14": "Grim Dungeons",
    "q3dm15": "Demon Keep",
    "q3dm16": "The Bouncy Map",
    "q3dm17": "The Longest Yard",
    "q3dm18": "Space Chamber",
    "q3dm19": "Apocalypse Void",
    "q3tourney1": "Power Station 0218",
    "q3tourney2": "The Proving Grounds",
    "q3tourney3": "Hell's Gate",
    "q3tourney4": "Vertical Vengeance",
    "q3tourney5": "Fatal Instinct",
    "q3tourney6": "The Very End of You",
    "q3ctf1": "Dueling Keeps",
    "q3ctf2": "Troubled Waters",
    "q3ctf3": "The Stronghold",
    "q3ctf4": "Space CTF",
    # Call of Duty 4
    "mp_backlot": "Backlot",
    "mp_bloc": "Bloc",
    "mp_bog": "Bog",
    "mp_cargoship": "Wet Work",
    "mp_citystreets": "District",
    "mp_convoy": "Ambush",
    "mp_countdown": "Countdown",
    "mp_crash": "Crash",
    "mp_crossfire": "Crossfire",
    "mp_farm": "Downpour",
    "mp_overgrown": "Overgrown",
    "mp_pipeline": "Pipeline",
    "mp_shipment": "Shipment",
    "mp_showdown": "Showdown",
    "mp_strike": "Strike",
    "mp_vacant": "Vacant",
}

DEFAULT_GAME_TYPES: dict[str, str] = {
    # Quake III Arena (g_gametype)
    "0": "Free For All",
    "1": "Tournament",
    "2": "Single Player",
    "3": "Team Deathmatch",
    "4": "Capture the Flag",
    # Call of Duty 4
    "dm": "Free for All",
    "war": "Team Deathmatch",
    "sd": "Search and Destroy",
    "sab": "Sabotage",
    "dom": "Domination",
    "koth": "Headquarters",
}


class NameTable:
    """NamingPort backed by in-memory dictionaries.

    Lookups are case-insensitive; unknown codes are returned unchanged.
    """

    def __init__(
        self,
        maps: Mapping[str, str] | None = None,
        game_types: Mapping[str, str] | None = None,
    ) -> None:
        self._maps = {k.lower(): v for k, v in (maps or {}).items()}
        self._game_types = {k.lower(): v for k, v in (game_types or {}).items()}

    def expand_map_name(self, code: str) -> str:
        return self._maps.get(code.lower(), code)

    def expand_game_type(self, code: str) -> str:
        return self._game_types.get(code.lower(), code)


def _read_section(data: dict, key: str, path: str) -> dict[str, str]:
    section = data.get(key, {})
    if not isinstance(section, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in section.items()
    ):
        raise ValueError(f"Names file section '{key}' must map strings to strings: {path}")
    return section


def load_name_table(path: str | None = None) -> NameTable:
    """Build the name table, optionally extended from a JSON file.

    The file has the shape ``{"maps": {...}, "gametypes": {...}}``; its
    entries override the built-in defaults.

    Args:
        path: Optional path to the JSON names file.

    Returns:
        Name table with defaults plus file entries.

    Raises:
        ValueError: If file not found, invalid JSON or wrong format.
    """
    maps = dict(DEFAULT_MAP_NAMES)
    game_types = dict(DEFAULT_GAME_TYPES)

    if path:
        try:
            with open(path) as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ValueError(f"Names file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Names file contains invalid JSON: {path}") from e

        if not isinstance(data, dict):
            raise ValueError("Names file must be a JSON object")

        maps.update(_read_section(data, "maps", path))
        game_types.update(_read_section(data, "gametypes", path))
        logger.debug(f"Loaded names from {path}")

    return NameTable(maps=maps, game_types=game_types)
