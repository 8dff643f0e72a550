"""
Room / Gas Parameter Registry

Room catalog (room types with per-gas requirements) and the versioned
settings configuration that overrides it.

The default catalog ships as data/rooms.yaml. A Configuration never mutates a
catalog: apply() returns a new RoomCatalog with overrides merged over the
defaults.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from medgas.core.config import MEDGAS_PATHS, load_yaml_file
from medgas.core.logging import get_logger
from medgas.gases.base import (
    GAS_TYPES,
    FormulaKind,
    GasKey,
    GasRequirement,
    RoomType,
    UnknownRoomKeyError,
    parse_gas_key,
)

logger = get_logger("medgas.gases.registry")

# Rooms whose oxygen points are covered by the 3-hour critical reserve.
# Keys without a catalog entry are kept so custom catalogs can use them.
DEFAULT_CRITICAL_RESERVE_KEYS = frozenset({
    "operating",
    "small_operating",
    "icu_adults",
    "icu_children",
    "icu_adults_rea",
    "icu_children_rea",
    "adults_rea",
    "children_rea",
    "angiography",
})

GAS_COLORS: Dict[GasKey, str] = {
    GasKey.OXYGEN: "#4282D3",
    GasKey.N2O: "#00C90D",
    GasKey.CO2: "#575757",
    GasKey.AIR5: "#FF9340",
    GasKey.AIR8: "#A63A00",
    GasKey.AGSS: "#FFD773",
    GasKey.VACUUM: "#FD3F49",
}

_REQUIREMENT_FIELDS = {
    "flow_rate": "flow_rate",
    "flowRate": "flow_rate",
    "hours_per_day": "hours_per_day",
    "hoursPerDay": "hours_per_day",
    "usage_factor": "usage_factor",
    "usageFactor": "usage_factor",
}

_DISPLAY_FIELDS = ("label", "short_name", "color", "unit")


class RoomCatalog:
    """Ordered, key-addressable collection of room types."""

    def __init__(self, rooms: Iterable[RoomType] = ()):
        self._rooms: Dict[str, RoomType] = {}
        for room in rooms:
            if room.key in self._rooms:
                raise ValueError(f"Duplicate room key in catalog: {room.key!r}")
            self._rooms[room.key] = room

    def __iter__(self) -> Iterator[RoomType]:
        return iter(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, key: object) -> bool:
        return key in self._rooms

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoomCatalog):
            return NotImplemented
        return list(self) == list(other)

    def get(self, key: str) -> RoomType:
        """Room by key. Raises UnknownRoomKeyError."""
        try:
            return self._rooms[key]
        except KeyError:
            raise UnknownRoomKeyError(key) from None

    def keys(self) -> List[str]:
        return list(self._rooms)

    def linked_rooms(self, gas: GasKey) -> List[str]:
        """Keys of rooms where the gas is applicable."""
        gas = parse_gas_key(gas)
        return [r.key for r in self if gas in r.requirements]

    def subset(self, keys: Iterable[str]) -> "RoomCatalog":
        wanted = set(keys)
        for key in wanted:
            self.get(key)
        return RoomCatalog(r for r in self if r.key in wanted)

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def room_from_dict(data: Mapping[str, Any]) -> RoomType:
    """
    Build a RoomType from a catalog entry.

    Accepts either a mapping of gas key -> parameters under 'gases' /
    'requirements', or the list form [{key: 'oxygen', flowRate: ...}].
    """
    if "key" not in data:
        raise ValueError(f"Room entry has no key: {dict(data)}")

    key = str(data["key"])
    raw = data.get("requirements", data.get("gases")) or {}

    requirements: Dict[GasKey, GasRequirement] = {}
    if isinstance(raw, Mapping):
        items = list(raw.items())
    else:
        items = [(entry["key"], entry) for entry in raw]

    for gas_key, params in items:
        gas = parse_gas_key(gas_key)
        requirements[gas] = GasRequirement.from_dict(params)

    critical = data.get("critical_reserve")
    if critical is None:
        critical = key in DEFAULT_CRITICAL_RESERVE_KEYS

    return RoomType(
        key=key,
        name=str(data.get("name") or key),
        requirements=requirements,
        critical_reserve=bool(critical),
    )


def catalog_from_dicts(entries: Iterable[Mapping[str, Any]]) -> RoomCatalog:
    return RoomCatalog(room_from_dict(e) for e in entries)


def load_catalog(path: Optional[Path] = None) -> RoomCatalog:
    """
    Load a room catalog from a YAML or JSON file.

    Args:
        path: Catalog file (default: catalog.path from config.yaml)

    Returns:
        RoomCatalog in file order
    """
    path = Path(path) if path else MEDGAS_PATHS.catalog
    data = load_yaml_file(path)

    entries = data.get("rooms", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"Catalog file {path} must contain a list of rooms")

    catalog = catalog_from_dicts(entries)
    logger.debug("Loaded %d room types from %s", len(catalog), path)
    return catalog


_default_catalog: Optional[RoomCatalog] = None


def default_catalog(reload: bool = False) -> RoomCatalog:
    """The configured room catalog, loaded once."""
    global _default_catalog

    if _default_catalog is None or reload:
        _default_catalog = load_catalog()
    return _default_catalog


# ---------------------------------------------------------------------------
# Settings configuration
# ---------------------------------------------------------------------------

@dataclass
class Configuration:
    """
    Versioned settings layered over a room catalog.

    Attributes:
        version: Configuration format/revision number
        room_overrides: room key -> gas -> {field: value}
        added_rooms: Custom rooms appended to the catalog
        removed_rooms: Room keys dropped from the catalog
        linked_rooms: gas -> room keys where the gas is applicable
        gas_display: gas -> {label, short_name, color, unit}
    """

    version: int = 1
    room_overrides: Dict[str, Dict[GasKey, Dict[str, float]]] = field(default_factory=dict)
    added_rooms: List[RoomType] = field(default_factory=list)
    removed_rooms: List[str] = field(default_factory=list)
    linked_rooms: Dict[GasKey, List[str]] = field(default_factory=dict)
    gas_display: Dict[GasKey, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Configuration":
        data = data or {}

        room_overrides: Dict[str, Dict[GasKey, Dict[str, float]]] = {}
        for room_key, gases in (data.get("room_overrides") or {}).items():
            per_gas: Dict[GasKey, Dict[str, float]] = {}
            for gas_key, params in (gases or {}).items():
                per_gas[parse_gas_key(gas_key)] = _normalize_fields(params or {})
            room_overrides[str(room_key)] = per_gas

        linked = {
            parse_gas_key(g): [str(k) for k in (keys or [])]
            for g, keys in (data.get("linked_rooms") or {}).items()
        }

        display: Dict[GasKey, Dict[str, str]] = {}
        for gas_key, values in (data.get("gas_display") or {}).items():
            unknown = set(values or {}) - set(_DISPLAY_FIELDS)
            if unknown:
                raise ValueError(f"Unknown display field(s) for {gas_key}: {', '.join(sorted(unknown))}")
            display[parse_gas_key(gas_key)] = {k: str(v) for k, v in (values or {}).items()}

        return cls(
            version=int(data.get("version", 1)),
            room_overrides=room_overrides,
            added_rooms=[room_from_dict(r) for r in data.get("added_rooms") or []],
            removed_rooms=[str(k) for k in data.get("removed_rooms") or []],
            linked_rooms=linked,
            gas_display=display,
        )

    def apply(self, catalog: RoomCatalog) -> RoomCatalog:
        """
        Merge this configuration over a catalog.

        Order: removals, additions, per-field overrides, gas links. A room
        newly linked to a gas takes the catalog's own entry for it when one
        exists, else a blank requirement that contributes no demand. A room
        left out of a gas's link list loses that gas, overrides included.

        Raises:
            UnknownRoomKeyError: If an override, removal or link names a room
                that is not in the resulting catalog.
        """
        for key in self.removed_rooms:
            catalog.get(key)

        removed = set(self.removed_rooms)
        rooms: Dict[str, RoomType] = {r.key: r for r in catalog if r.key not in removed}
        for room in self.added_rooms:
            if room.key in rooms:
                raise ValueError(f"Added room duplicates an existing key: {room.key!r}")
            rooms[room.key] = room

        for key, gases in self.room_overrides.items():
            if key not in rooms:
                raise UnknownRoomKeyError(key)
            room = rooms[key]
            requirements = dict(room.requirements)
            for gas, values in gases.items():
                current = requirements.get(gas) or _blank_requirement(gas)
                requirements[gas] = replace(current, **values)
            rooms[key] = replace(room, requirements=requirements)

        for gas, keys in self.linked_rooms.items():
            for key in keys:
                if key not in rooms:
                    raise UnknownRoomKeyError(key)
            for key, room in list(rooms.items()):
                requirements = dict(room.requirements)
                if key in keys and gas not in requirements:
                    default = catalog.get(key).requirement(gas) if key in catalog else None
                    requirements[gas] = default or _blank_requirement(gas)
                elif key not in keys and gas in requirements:
                    del requirements[gas]
                else:
                    continue
                rooms[key] = replace(room, requirements=requirements)

        logger.debug(
            "Applied configuration v%d: %d rooms (%d added, %d removed)",
            self.version, len(rooms), len(self.added_rooms), len(self.removed_rooms),
        )
        return RoomCatalog(rooms.values())

    def gas_info(self, gas: GasKey) -> Dict[str, str]:
        """Display settings for a gas: overrides merged over the built-in defaults."""
        gas = parse_gas_key(gas)
        gas_type = GAS_TYPES[gas]
        info = {
            "key": gas.value,
            "label": gas_type.label,
            "short_name": gas_type.short_name,
            "unit": gas_type.unit,
            "color": GAS_COLORS[gas],
        }
        info.update(self.gas_display.get(gas, {}))
        return info


def _blank_requirement(gas: GasKey) -> GasRequirement:
    # Daily-volume gases need hours_per_day; zero hours means zero demand
    if GAS_TYPES[gas].kind is FormulaKind.DAILY_VOLUME:
        return GasRequirement(hours_per_day=0.0)
    return GasRequirement()


def _normalize_fields(params: Mapping[str, Any]) -> Dict[str, float]:
    values: Dict[str, float] = {}
    for name, value in params.items():
        if name not in _REQUIREMENT_FIELDS:
            raise ValueError(
                f"Unknown requirement field: {name}. "
                f"Available: flow_rate, hours_per_day, usage_factor"
            )
        field_name = _REQUIREMENT_FIELDS[name]
        if value is None and field_name != "hours_per_day":
            raise ValueError(f"Requirement field {name} cannot be empty")
        values[field_name] = float(value) if value is not None else None
    return values


def load_configuration(path: Path) -> Configuration:
    """Read a Configuration from a YAML/JSON settings file."""
    return Configuration.from_dict(load_yaml_file(path) or {})
