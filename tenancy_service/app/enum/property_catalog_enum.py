from enum import Enum


class PropertyType(str, Enum):
    PG = "PG"
    HOSTEL = "HOSTEL"
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    VILLA = "VILLA"
    COLIVE = "COLIVE"
    OTHER = "OTHER"


class SharingOption(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    FOUR = "FOUR"
    FIVE = "FIVE"
    OTHER = "OTHER"


# nominal bed count per sharing type
SHARING_OPTION_BEDS = {
    SharingOption.SINGLE: 1,
    SharingOption.DOUBLE: 2,
    SharingOption.TRIPLE: 3,
    SharingOption.FOUR: 4,
    SharingOption.FIVE: 5,
}

# labels older clients still send
SHARING_OPTION_ALIASES = {
    "FOURSHARING": SharingOption.FOUR,
    "FIVESHARING": SharingOption.FIVE,
    "SINGLE_SHARING": SharingOption.SINGLE,
    "DOUBLE_SHARING": SharingOption.DOUBLE,
    "TRIPLE_SHARING": SharingOption.TRIPLE,
}


def normalize_sharing_option(value) -> str | None:
    if value is None:
        return None
    raw = str(value).strip().upper()
    if not raw:
        return None
    if raw in SHARING_OPTION_ALIASES:
        return SHARING_OPTION_ALIASES[raw].value
    return raw
