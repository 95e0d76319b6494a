"""Location parsing and great-circle distance.

Locations are resolved against a table of known cities, US states and
countries (no geocoding service). Distances are haversine miles rounded to
0.1. An unknown location yields None rather than an error; callers keep
such companies and sort them after the known ones.
"""

import logging
import math
import re

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8

# lowercase "city, region" -> (latitude, longitude)
KNOWN_LOCATIONS: dict[str, tuple[float, float]] = {
    # US: Major Cities
    "boston, massachusetts": (42.3601, -71.0589),
    "cambridge, massachusetts": (42.3736, -71.1097),
    "new york, new york": (40.7128, -74.0060),
    "san francisco, california": (37.7749, -122.4194),
    "los angeles, california": (34.0522, -118.2437),
    "chicago, illinois": (41.8781, -87.6298),
    "seattle, washington": (47.6062, -122.3321),
    "austin, texas": (30.2672, -97.7431),
    "denver, colorado": (39.7392, -104.9903),
    "portland, oregon": (45.5152, -122.6784),
    "miami, florida": (25.7617, -80.1918),
    "atlanta, georgia": (33.7490, -84.3880),
    "dallas, texas": (32.7767, -96.7970),
    "houston, texas": (29.7604, -95.3698),
    "philadelphia, pennsylvania": (39.9526, -75.1652),
    "phoenix, arizona": (33.4484, -112.0740),
    "san diego, california": (32.7157, -117.1611),
    "detroit, michigan": (42.3314, -83.0458),
    "minneapolis, minnesota": (44.9778, -93.2650),
    "washington, district of columbia": (38.9072, -77.0369),
    "columbus, ohio": (39.9612, -82.9988),
    "kansas city, missouri": (39.0997, -94.5786),
    "kansas city, kansas": (39.1142, -94.6275),
    "pittsburgh, pennsylvania": (40.4406, -79.9959),
    "cleveland, ohio": (41.4993, -81.6944),
    "nashville, tennessee": (36.1627, -86.7816),
    "indianapolis, indiana": (39.7684, -86.1581),
    "charlotte, north carolina": (35.2271, -80.8431),
    "raleigh, north carolina": (35.7796, -78.6382),
    "baltimore, maryland": (39.2904, -76.6122),
    "milwaukee, wisconsin": (43.0389, -87.9065),
    "salt lake city, utah": (40.7608, -111.8910),

    # US: University Cities & College Towns
    "ann arbor, michigan": (42.2808, -83.7430),
    "berkeley, california": (37.8715, -122.2730),
    "stanford, california": (37.4275, -122.1697),
    "palo alto, california": (37.4419, -122.1430),
    "ithaca, new york": (42.4440, -76.5019),
    "durham, north carolina": (35.9940, -78.8986),
    "chapel hill, north carolina": (35.9132, -79.0558),
    "princeton, new jersey": (40.3573, -74.6672),
    "new haven, connecticut": (41.3083, -72.9279),
    "providence, rhode island": (41.8240, -71.4128),
    "evanston, illinois": (42.0451, -87.6877),
    "bloomington, indiana": (39.1653, -86.5264),
    "college station, texas": (30.6280, -96.3344),
    "charlottesville, virginia": (38.0293, -78.4767),
    "urbana, illinois": (40.1106, -88.2073),
    "champaign, illinois": (40.1164, -88.2434),
    "madison, wisconsin": (43.0731, -89.4012),
    "west lafayette, indiana": (40.4259, -86.9081),
    "state college, pennsylvania": (40.7934, -77.8600),
    "gainesville, florida": (29.6516, -82.3248),
    "tallahassee, florida": (30.4383, -84.2807),

    # US: Tech Hubs & Business Centers
    "san jose, california": (37.3382, -121.8863),
    "mountain view, california": (37.3861, -122.0839),
    "sunnyvale, california": (37.3688, -122.0363),
    "cupertino, california": (37.3230, -122.0322),
    "santa clara, california": (37.3541, -121.9552),
    "redmond, washington": (47.6740, -122.1215),
    "bellevue, washington": (47.6101, -122.2015),
    "reston, virginia": (38.9586, -77.3570),
    "arlington, virginia": (38.8816, -77.0910),
    "plano, texas": (33.0198, -96.6989),
    "irvine, california": (33.6846, -117.8265),

    # US: Additional Metro Areas
    "st. louis, missouri": (38.6270, -90.1994),
    "omaha, nebraska": (41.2565, -95.9345),
    "buffalo, new york": (42.8864, -78.8784),
    "rochester, new york": (43.1566, -77.6088),
    "syracuse, new york": (43.0481, -76.1474),
    "albany, new york": (42.6526, -73.7562),
    "louisville, kentucky": (38.2527, -85.7585),
    "memphis, tennessee": (35.1495, -90.0490),
    "new orleans, louisiana": (29.9511, -90.0715),
    "baton rouge, louisiana": (30.4515, -91.1871),
    "oklahoma city, oklahoma": (35.4676, -97.5164),
    "tulsa, oklahoma": (36.1539, -95.9928),
    "albuquerque, new mexico": (35.0844, -106.6504),
    "tucson, arizona": (32.2226, -110.9747),
    "las vegas, nevada": (36.1699, -115.1398),
    "reno, nevada": (39.5296, -119.8138),
    "boise, idaho": (43.6150, -116.2023),
    "sacramento, california": (38.5816, -121.4944),
    "fresno, california": (36.7378, -119.7871),
    "oakland, california": (37.8044, -122.2712),
    "riverside, california": (33.9533, -117.3962),
    "tampa, florida": (27.9506, -82.4572),
    "orlando, florida": (28.5383, -81.3792),
    "jacksonville, florida": (30.3322, -81.6557),
    "fort lauderdale, florida": (26.1224, -80.1373),

    # Canada
    "toronto, ontario": (43.6532, -79.3832),
    "toronto, canada": (43.6532, -79.3832),
    "vancouver, british columbia": (49.2827, -123.1207),
    "vancouver, canada": (49.2827, -123.1207),
    "montreal, quebec": (45.5017, -73.5673),
    "montreal, canada": (45.5017, -73.5673),
    "ottawa, ontario": (45.4215, -75.6972),
    "ottawa, canada": (45.4215, -75.6972),
    "calgary, alberta": (51.0447, -114.0719),
    "calgary, canada": (51.0447, -114.0719),
    "edmonton, alberta": (53.5461, -113.4938),
    "waterloo, ontario": (43.4643, -80.5204),

    # United Kingdom
    "london, england": (51.5074, -0.1278),
    "london, united kingdom": (51.5074, -0.1278),
    "london, uk": (51.5074, -0.1278),
    "cambridge, england": (52.2053, 0.1218),
    "cambridge, united kingdom": (52.2053, 0.1218),
    "oxford, england": (51.7520, -1.2577),
    "oxford, united kingdom": (51.7520, -1.2577),
    "manchester, england": (53.4808, -2.2426),
    "manchester, united kingdom": (53.4808, -2.2426),
    "edinburgh, scotland": (55.9533, -3.1883),
    "edinburgh, united kingdom": (55.9533, -3.1883),
    "glasgow, scotland": (55.8642, -4.2518),
    "birmingham, england": (52.4862, -1.8904),
    "bristol, england": (51.4545, -2.5879),

    # Australia
    "sydney, australia": (-33.8688, 151.2093),
    "sydney, new south wales": (-33.8688, 151.2093),
    "melbourne, australia": (-37.8136, 144.9631),
    "melbourne, victoria": (-37.8136, 144.9631),
    "brisbane, australia": (-27.4698, 153.0251),
    "brisbane, queensland": (-27.4698, 153.0251),
    "perth, australia": (-31.9505, 115.8605),
    "perth, western australia": (-31.9505, 115.8605),
    "adelaide, australia": (-34.9285, 138.6007),
    "canberra, australia": (-35.2809, 149.1300),

    # India
    "bangalore, india": (12.9716, 77.5946),
    "bengaluru, india": (12.9716, 77.5946),
    "mumbai, india": (19.0760, 72.8777),
    "delhi, india": (28.7041, 77.1025),
    "new delhi, india": (28.6139, 77.2090),
    "hyderabad, india": (17.3850, 78.4867),
    "chennai, india": (13.0827, 80.2707),
    "pune, india": (18.5204, 73.8567),
    "kolkata, india": (22.5726, 88.3639),
    "ahmedabad, india": (23.0225, 72.5714),

    # Other Major Cities
    "singapore": (1.3521, 103.8198),
    "singapore, singapore": (1.3521, 103.8198),
    "dublin, ireland": (53.3498, -6.2603),
    "amsterdam, netherlands": (52.3676, 4.9041),
    "berlin, germany": (52.5200, 13.4050),
    "munich, germany": (48.1351, 11.5820),
    "paris, france": (48.8566, 2.3522),
    "zurich, switzerland": (47.3769, 8.5417),
    "stockholm, sweden": (59.3293, 18.0686),
    "copenhagen, denmark": (55.6761, 12.5683),
    "oslo, norway": (59.9139, 10.7522),
    "helsinki, finland": (60.1699, 24.9384),
    "tokyo, japan": (35.6762, 139.6503),
    "seoul, south korea": (37.5665, 126.9780),
    "shanghai, china": (31.2304, 121.4737),
    "beijing, china": (39.9042, 116.4074),
    "hong kong": (22.3193, 114.1694),
    "dubai, united arab emirates": (25.2048, 55.2708),
    "tel aviv, israel": (32.0853, 34.7818),
    "mexico city, mexico": (19.4326, -99.1332),
    "buenos aires, argentina": (-34.6037, -58.3816),
    "sao paulo, brazil": (-23.5505, -46.6333),

    # US states (geographic center)
    "massachusetts": (42.4072, -71.3824),
    "california": (36.7783, -119.4179),
    "new york": (42.1657, -74.9481),
    "texas": (31.9686, -99.9018),
    "florida": (27.6648, -81.5158),
    "illinois": (40.6331, -89.3985),
    "pennsylvania": (41.2033, -77.1945),
    "ohio": (40.4173, -82.9071),
    "georgia": (32.1656, -82.9001),
    "north carolina": (35.7596, -79.0193),
    "michigan": (44.3148, -85.6024),
    "washington": (47.7511, -120.7401),
    "colorado": (39.5501, -105.7821),
    "oregon": (43.8041, -120.5542),
    "arizona": (34.0489, -111.0937),
    "tennessee": (35.5175, -86.5804),
    "missouri": (37.9643, -91.8318),
    "maryland": (39.0458, -76.6413),
    "wisconsin": (43.7844, -88.7879),
    "minnesota": (46.7296, -94.6859),
    "indiana": (40.2672, -86.1349),
    "utah": (39.3210, -111.0937),
    "kansas": (39.0119, -98.4842),
    "nevada": (38.8026, -116.4194),
    "virginia": (37.4316, -78.6569),
    "connecticut": (41.6032, -73.0877),
    "new jersey": (40.0583, -74.4057),
    "rhode island": (41.5801, -71.4774),
    "kentucky": (37.8393, -84.2700),
    "louisiana": (30.9843, -91.9623),
    "oklahoma": (35.0078, -97.0929),
    "new mexico": (34.5199, -105.8701),
    "idaho": (44.0682, -114.7420),
    "nebraska": (41.4925, -99.9018),
    "alabama": (32.3182, -86.9023),
    "south carolina": (33.8361, -81.1637),

    # US abbreviations
    "boston, ma": (42.3601, -71.0589),
    "new york, ny": (40.7128, -74.0060),
    "san francisco, ca": (37.7749, -122.4194),
    "los angeles, ca": (34.0522, -118.2437),
    "chicago, il": (41.8781, -87.6298),
    "seattle, wa": (47.6062, -122.3321),
    "austin, tx": (30.2672, -97.7431),
    "denver, co": (39.7392, -104.9903),
    "miami, fl": (25.7617, -80.1918),
    "atlanta, ga": (33.7490, -84.3880),
    "philadelphia, pa": (39.9526, -75.1652),
    "kansas city, mo": (39.0997, -94.5786),
    "columbus, oh": (39.9612, -82.9988),

    # Countries
    "united states": (37.0902, -95.7129),
    "usa": (37.0902, -95.7129),
    "canada": (56.1304, -106.3468),
    "united kingdom": (55.3781, -3.4360),
    "uk": (55.3781, -3.4360),
    "australia": (-25.2744, 133.7751),
    "india": (20.5937, 78.9629),
    "germany": (51.1657, 10.4515),
    "france": (46.2276, 2.2137),
    "japan": (36.2048, 138.2529),
    "china": (35.8617, 104.1954),
}


def _contains_term(text: str, term: str) -> bool:
    return re.search(r"(?<![a-z])" + re.escape(term) + r"(?![a-z])", text) is not None


def parse_location(location: str | None) -> tuple[float, float] | None:
    """Resolve a free-form location string to coordinates.

    Tries, in order: exact key, "city, region" from the first two parts,
    partial match (a known key inside the string on word boundaries, or the
    string as a fragment of a key), the region alone, then the
    first part alone.
    """
    normalized = (location or "").strip().lower()
    if not normalized:
        return None

    if normalized in KNOWN_LOCATIONS:
        return KNOWN_LOCATIONS[normalized]

    parts = [p.strip() for p in normalized.split(",")]
    if len(parts) >= 2:
        city_state = f"{parts[0]}, {parts[1]}"
        if city_state in KNOWN_LOCATIONS:
            return KNOWN_LOCATIONS[city_state]

    for key, coords in KNOWN_LOCATIONS.items():
        if _contains_term(normalized, key) or (len(normalized) >= 3 and normalized in key):
            logger.debug("Partial location match: %r -> %r", location, key)
            return coords

    if len(parts) >= 2:
        if parts[1] in KNOWN_LOCATIONS:
            logger.debug("Using region-level coordinates for %r -> %r", location, parts[1])
            return KNOWN_LOCATIONS[parts[1]]

    return KNOWN_LOCATIONS.get(parts[0])


def haversine_miles(a: tuple[float, float], b: tuple[float, float]) -> float:
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    d_lat, d_lon = lat2 - lat1, lon2 - lon1
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return round(EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h)), 1)


def distance_between(a: str | None, b: str | None) -> float | None:
    """Miles between two location strings, or None when either cannot be resolved."""
    coords_a, coords_b = parse_location(a), parse_location(b)
    if coords_a is None or coords_b is None:
        logger.debug("Cannot compute distance between %r and %r", a, b)
        return None
    return haversine_miles(coords_a, coords_b)


def format_distance(miles: float | None) -> str:
    if miles is None:
        return "Unknown"
    if miles < 1:
        return "<1 mile"
    return f"{miles:.1f} miles"
