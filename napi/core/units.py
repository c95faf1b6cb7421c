"""
Unit Parser

Turns `systemctl list-units` output into Unit records.

Example input (header and legend lines are skipped because their first
field does not contain the unit suffix):

    UNIT                 LOAD   ACTIVE SUB     DESCRIPTION
    dbus.service         loaded active running D-Bus User Message Bus
    pipewire.socket      loaded active listening PipeWire Multimedia System Socket
"""

from dataclasses import dataclass
from typing import Any, Dict, List


SERVICE_SUFFIX = ".service"
SOCKET_SUFFIX = ".socket"

MIN_FIELDS = 5


@dataclass(frozen=True)
class Unit:
    """One service-manager unit as reported by the listing"""
    name: str
    load: str
    active: str
    sub: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with the column names systemctl prints"""
        return {
            "UNIT": self.name,
            "LOAD": self.load,
            "ACTIVE": self.active,
            "SUB": self.sub,
            "DESCRIPTION": self.description,
        }


def parse_units(raw_listing: str, unit_suffix: str) -> List[Unit]:
    """Parse a listing into units whose name contains unit_suffix.

    Lines with fewer than five fields, or whose first field lacks the
    suffix, are skipped. Source order is preserved.
    """
    units = []
    for line in raw_listing.splitlines():
        fields = line.split()
        if len(fields) < MIN_FIELDS:
            continue
        if unit_suffix not in fields[0]:
            continue
        units.append(
            Unit(
                name=fields[0],
                load=fields[1],
                active=fields[2],
                sub=fields[3],
                description=" ".join(fields[4:]),
            )
        )
    return units
