"""Registry of named places that can be used as route endpoints."""

import logging
from typing import Dict, Iterable, List, Optional

from .errors import UnknownAliasError
from .models import Coordinates, KnownLocation

logger = logging.getLogger(__name__)


def _loc(id, name, lat, lon, aliases, category):
    return KnownLocation(
        id=id,
        name=name,
        coordinates=Coordinates(lat=lat, lon=lon),
        aliases=aliases,
        category=category,
    )


# Major transit hubs, stations and landmarks in Israel (metro 1)
ISRAEL_KNOWN_LOCATIONS: List[KnownLocation] = [
    # Tel Aviv
    _loc("tel-aviv-central", "Tel Aviv Central Bus Station", 32.0561, 34.7794,
         ["tahana-merkazit-tel-aviv", "ta-cbs"], "bus-station"),
    _loc("tel-aviv-savidor", "Tel Aviv Savidor Center Railway Station", 32.1040, 34.8080,
         ["savidor", "tel-aviv-merkaz"], "train-station"),
    _loc("tel-aviv-hashalom", "Tel Aviv HaShalom Railway Station", 32.0725, 34.7917,
         ["hashalom", "azrieli-station"], "train-station"),
    _loc("tel-aviv-university", "Tel Aviv University Railway Station", 32.1133, 34.8044,
         ["tau-station"], "train-station"),
    _loc("azrieli-mall", "Azrieli Center", 32.0744, 34.7921, ["azrieli"], "landmark"),
    _loc("dizengoff-center", "Dizengoff Center", 32.0755, 34.7755, ["dizengoff"], "landmark"),
    _loc("rabin-square", "Rabin Square", 32.0804, 34.7810, ["kikar-rabin"], "landmark"),
    # Jerusalem
    _loc("jerusalem-central", "Jerusalem Central Bus Station", 31.7891, 35.2032,
         ["tahana-merkazit-yerushalayim", "jlm-cbs"], "bus-station"),
    _loc("jerusalem-navon", "Jerusalem Yitzhak Navon Railway Station", 31.7880, 35.2030,
         ["navon-station", "jerusalem-station"], "train-station"),
    _loc("jerusalem-old-city", "Jerusalem Old City - Jaffa Gate", 31.7767, 35.2276,
         ["old-city", "jaffa-gate"], "landmark"),
    _loc("western-wall", "Western Wall", 31.7767, 35.2343, ["kotel", "wailing-wall"], "landmark"),
    _loc("mahane-yehuda", "Mahane Yehuda Market", 31.7851, 35.2122, ["shuk", "the-shuk"], "landmark"),
    # Haifa
    _loc("haifa-hof-hacarmel", "Haifa Hof HaCarmel Railway Station", 32.7942, 34.9576,
         ["hof-hacarmel"], "train-station"),
    _loc("haifa-merkaz-hashmona", "Haifa Merkaz HaShmona Railway Station", 32.8040, 34.9953,
         ["haifa-merkaz"], "train-station"),
    _loc("haifa-bat-galim", "Haifa Bat Galim Railway Station", 32.8238, 34.9686,
         ["bat-galim"], "train-station"),
    _loc("haifa-central", "Haifa Central Bus Station", 32.7956, 34.9946, ["haifa-cbs"], "bus-station"),
    # Beer Sheva
    _loc("beer-sheva-central", "Beer Sheva Central Railway Station", 31.2433, 34.7983,
         ["beer-sheva-merkaz"], "train-station"),
    _loc("beer-sheva-north", "Beer Sheva North Railway Station", 31.2620, 34.8082,
         ["beer-sheva-tzafon"], "train-station"),
    # Airport
    _loc("ben-gurion-airport", "Ben Gurion International Airport", 32.0055, 34.8854,
         ["tls", "natbag", "airport"], "airport"),
    # Coastal and central cities
    _loc("netanya-station", "Netanya Railway Station", 32.3260, 34.8561, ["netanya"], "train-station"),
    _loc("herzliya-station", "Herzliya Railway Station", 32.1553, 34.8358, ["herzliya"], "train-station"),
    _loc("rishon-lezion-moshe-dayan", "Rishon LeZion Moshe Dayan Railway Station", 31.9897, 34.7703,
         ["rishon-moshe-dayan"], "train-station"),
    _loc("rishon-lezion-harishonim", "Rishon LeZion HaRishonim Railway Station", 31.9647, 34.8060,
         ["rishon-harishonim"], "train-station"),
    _loc("petah-tikva-kiryat-arye", "Petah Tikva Kiryat Arye Railway Station", 32.0894, 34.8461,
         ["kiryat-arye"], "train-station"),
    _loc("rehovot-station", "Rehovot Railway Station", 31.8931, 34.8117, ["rehovot"], "train-station"),
    _loc("ashdod-ad-halom", "Ashdod Ad Halom Railway Station", 31.7930, 34.6426, ["ashdod"], "train-station"),
    _loc("ashkelon-station", "Ashkelon Railway Station", 31.6655, 34.5747, ["ashkelon"], "train-station"),
    _loc("modiin-central", "Modiin Central Railway Station", 31.8989, 35.0106, ["modiin"], "train-station"),
    # North
    _loc("nahariya-station", "Nahariya Railway Station", 33.0089, 35.0922, ["nahariya"], "train-station"),
    _loc("akko-station", "Akko Railway Station", 32.9289, 35.0747, ["akko", "acre"], "train-station"),
]


class LocationRegistry:
    """
    Case-insensitive lookup of known locations by id, name or alias.

    Every key in the alias index points at an id present in the location
    index. Not thread-safe.
    """

    def __init__(self, initial_locations: Optional[Iterable[KnownLocation]] = None):
        self.locations: Dict[str, KnownLocation] = {}
        self.alias_map: Dict[str, str] = {}  # lower-cased key -> location id

        if initial_locations is None:
            initial_locations = ISRAEL_KNOWN_LOCATIONS
        for location in initial_locations:
            self.register(location)

    def register(self, location: KnownLocation) -> None:
        """Add or replace a location and index its id, name and aliases."""
        self.locations[location.id] = location
        self.alias_map[location.id.lower()] = location.id
        self.alias_map[location.name.lower()] = location.id
        for alias in location.aliases or []:
            self.alias_map[alias.lower()] = location.id
        logger.debug(f"Registered location {location.id}")

    def register_alias(self, alias: str, location_id: str) -> None:
        """
        Point an extra alias at an already registered location.

        Raises:
            UnknownAliasError: If location_id is not registered.
        """
        if location_id not in self.locations:
            raise UnknownAliasError(location_id)
        self.alias_map[alias.lower()] = location_id

    def get(self, id_or_alias: str) -> Optional[KnownLocation]:
        location_id = self.alias_map.get(id_or_alias.lower())
        if location_id is None:
            return None
        return self.locations.get(location_id)

    def has(self, id_or_alias: str) -> bool:
        return id_or_alias.lower() in self.alias_map

    def list(self) -> List[KnownLocation]:
        return list(self.locations.values())

    def get_coordinates(self, id_or_alias: str) -> Optional[Coordinates]:
        location = self.get(id_or_alias)
        return location.coordinates if location else None

    def search(self, query: str) -> List[KnownLocation]:
        """Substring match over id, name and aliases, in registration order."""
        needle = query.lower()
        results: List[KnownLocation] = []
        for location in self.locations.values():
            if (
                needle in location.name.lower()
                or needle in location.id.lower()
                or any(needle in alias.lower() for alias in location.aliases or [])
            ):
                results.append(location)
        return results

    def get_by_category(self, category: str) -> List[KnownLocation]:
        return [loc for loc in self.locations.values() if loc.category == category]

    def __len__(self) -> int:
        return len(self.locations)

    def __contains__(self, id_or_alias: str) -> bool:
        return self.has(id_or_alias)
