"""
Static registry data: Pakistani cities and zone rate cards.

Order matters: postal-prefix lookup returns the first city carrying a
prefix (Jhang and Chiniot share "35").
"""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType

from tally.zones._types import City, ShippingZone, ZoneRates

METRO = ShippingZone.METRO
URBAN = ShippingZone.URBAN
RURAL = ShippingZone.RURAL


ZONE_RATES = MappingProxyType({
    METRO: ZoneRates(
        name="Metro Cities",
        description="Major metropolitan areas with fastest delivery",
        base_rate=Decimal("150"),
        free_shipping_threshold=Decimal("2500"),
        estimated_days=1,
    ),
    URBAN: ZoneRates(
        name="Urban Areas",
        description="City centers and urban districts",
        base_rate=Decimal("200"),
        free_shipping_threshold=Decimal("3000"),
        estimated_days=2,
    ),
    RURAL: ZoneRates(
        name="Rural Areas",
        description="Remote and rural locations",
        base_rate=Decimal("300"),
        free_shipping_threshold=Decimal("4000"),
        estimated_days=4,
    ),
})


# Orders that never leave the origin city.
LOCAL_RATES = ZoneRates(
    name="Local Delivery",
    description="Within the origin city",
    base_rate=Decimal("100"),
    free_shipping_threshold=Decimal("1500"),
    estimated_days=1,
)


CITIES: tuple[City, ...] = (
    # id, name, province, prefix, major, zone, days
    City("pk-lhr", "Lahore", "Punjab", "54", True, METRO, 1),
    City("pk-kar", "Karachi", "Sindh", "75", True, METRO, 1),
    City("pk-isl", "Islamabad", "Federal Capital Territory", "44", True, METRO, 1),
    City("pk-rwp", "Rawalpindi", "Punjab", "46", True, METRO, 1),
    City("pk-fsd", "Faisalabad", "Punjab", "38", True, METRO, 2),
    City("pk-mul", "Multan", "Punjab", "60", True, URBAN, 2),
    City("pk-hyd", "Hyderabad", "Sindh", "71", True, URBAN, 2),
    City("pk-guj", "Gujranwala", "Punjab", "52", True, URBAN, 2),
    City("pk-pes", "Peshawar", "Khyber Pakhtunkhwa", "25", True, URBAN, 2),
    City("pk-que", "Quetta", "Balochistan", "87", True, URBAN, 3),
    City("pk-skt", "Sialkot", "Punjab", "51", True, URBAN, 2),
    City("pk-bwp", "Bahawalpur", "Punjab", "63", True, URBAN, 3),
    City("pk-sar", "Sargodha", "Punjab", "40", False, URBAN, 2),
    City("pk-skr", "Sukkur", "Sindh", "65", False, URBAN, 3),
    City("pk-lrk", "Larkana", "Sindh", "77", False, URBAN, 3),
    City("pk-shk", "Sheikhupura", "Punjab", "39", False, URBAN, 2),
    City("pk-jhg", "Jhang", "Punjab", "35", False, URBAN, 2),
    City("pk-rah", "Rahim Yar Khan", "Punjab", "64", False, URBAN, 3),
    City("pk-glt", "Gilgit", "Gilgit-Baltistan", "15", False, RURAL, 5),
    City("pk-mrd", "Mardan", "Khyber Pakhtunkhwa", "23", False, URBAN, 3),
    City("pk-mng", "Mingora", "Khyber Pakhtunkhwa", "19", False, RURAL, 4),
    City("pk-abb", "Abbottabad", "Khyber Pakhtunkhwa", "22", False, URBAN, 3),
    City("pk-ksk", "Kasur", "Punjab", "55", False, URBAN, 2),
    City("pk-okr", "Okara", "Punjab", "56", False, URBAN, 2),
    City("pk-wah", "Wah Cantonment", "Punjab", "47", False, URBAN, 2),
    City("pk-ding", "Dera Ghazi Khan", "Punjab", "32", False, URBAN, 3),
    City("pk-sahiwal", "Sahiwal", "Punjab", "57", False, URBAN, 2),
    City("pk-nwshera", "Nowshera", "Khyber Pakhtunkhwa", "24", False, URBAN, 3),
    City("pk-mirpur", "Mirpur", "Azad Kashmir", "10", False, RURAL, 4),
    City("pk-chiniot", "Chiniot", "Punjab", "35", False, URBAN, 2),
    City("pk-mzg", "Muzaffargarh", "Punjab", "34", True, URBAN, 2),
)

ORIGIN_CITY_ID = "pk-mzg"

PROVINCES: tuple[str, ...] = (
    "Punjab",
    "Sindh",
    "Khyber Pakhtunkhwa",
    "Balochistan",
    "Federal Capital Territory",
    "Gilgit-Baltistan",
    "Azad Kashmir",
)

CITIES_BY_ID = MappingProxyType({city.id: city for city in CITIES})

CITIES_BY_PREFIX = MappingProxyType({
    prefix: next(c for c in CITIES if c.postal_code_prefix == prefix)
    for prefix in dict.fromkeys(c.postal_code_prefix for c in CITIES)
})


__all__ = (
    "ZONE_RATES",
    "CITIES",
    "CITIES_BY_ID",
    "CITIES_BY_PREFIX",
    "LOCAL_RATES",
    "ORIGIN_CITY_ID",
    "PROVINCES",
)
