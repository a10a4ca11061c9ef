"""
Make/model catalog used to seed search suggestions.
"""

POPULAR_MAKES: tuple[str, ...] = (
    "HONDA",
    "TOYOTA",
    "FORD",
    "CHEVROLET",
    "NISSAN",
    "HYUNDAI",
    "KIA",
    "MAZDA",
    "SUBARU",
    "VOLKSWAGEN",
)

MAKE_MODELS: dict[str, tuple[str, ...]] = {
    "HONDA": ("ACCORD", "CIVIC", "CR-V", "PILOT", "ODYSSEY", "FIT", "HR-V"),
    "TOYOTA": ("CAMRY", "COROLLA", "RAV4", "PRIUS", "HIGHLANDER", "SIENNA", "TACOMA"),
    "FORD": ("F-150", "ESCAPE", "FOCUS", "FUSION", "EXPLORER", "EDGE", "MUSTANG"),
    "CHEVROLET": ("SILVERADO", "EQUINOX", "MALIBU", "CRUZE", "TAHOE", "SUBURBAN", "IMPALA"),
    "NISSAN": ("ALTIMA", "SENTRA", "ROGUE", "PATHFINDER", "FRONTIER", "TITAN", "VERSA"),
}


def popular_makes() -> list[str]:
    return list(POPULAR_MAKES)


def models_for_make(make: str) -> list[str]:
    """Common models for a make; empty for makes we have no list for."""
    return list(MAKE_MODELS.get(make.strip().upper(), ()))
