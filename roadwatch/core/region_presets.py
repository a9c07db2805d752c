"""
Region preset resolution.

Maps a preset display name (a federal region or an AASHTO association) to
its fixed list of state codes. Several overlapping tables can be merged into
one resolver; "Manual" is reserved for user-driven selection and never
resolves to anything.

Usage:
    resolver = RegionPresetResolver()
    resolver.resolve("Region 9")  # frozenset({"AZ", "CA", "HI", "NV"})
"""

from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence

from roadwatch import config as cfg
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)


class RegionPresetResolver:
    """
    Resolves region preset names to sets of region codes.

    Unknown names resolve to an empty set rather than raising; callers are
    expected to only offer names from preset_names().
    """

    def __init__(self, *tables: Mapping[str, Sequence[str]]):
        if not tables:
            tables = (cfg.REGION_PRESETS,)

        self._presets: Dict[str, List[str]] = {}
        for table in tables:
            for name, codes in table.items():
                if name == cfg.MANUAL_MODE:
                    raise ValueError(f"'{cfg.MANUAL_MODE}' is reserved and can't be a preset name")
                self._presets[name] = list(codes)

        logger.debug(f"Loaded {len(self._presets)} region presets")

    def resolve(self, preset_name: Optional[str]) -> FrozenSet[str]:
        """
        Resolve a preset name to its region codes.

        :param preset_name: Preset display name
        :return: frozenset of region codes, empty for Manual or unknown names
        """
        if preset_name == cfg.MANUAL_MODE:
            return frozenset()

        codes = self._presets.get(preset_name)
        if codes is None:
            logger.warning(f"Unknown region preset requested: {preset_name!r}")
            return frozenset()
        return frozenset(codes)

    def members(self, preset_name: str) -> List[str]:
        """Ordered region codes for a preset (empty list if unknown)."""
        return list(self._presets.get(preset_name, []))

    def is_preset(self, preset_name: Optional[str]) -> bool:
        return preset_name in self._presets

    def preset_names(self) -> List[str]:
        """Published names in table order, Manual first (for dropdowns)."""
        return [cfg.MANUAL_MODE] + list(self._presets)

    def __len__(self) -> int:
        return len(self._presets)
