"""Static public holiday datasets used when the holiday API is unavailable."""

from services.attendance_service.schemas import PublicHoliday


def _holiday(date: str, local_name: str, name: str, country_code: str = "IN") -> dict:
    return {
        "date": date,
        "localName": local_name,
        "name": name,
        "countryCode": country_code,
        "fixed": False,
        "global": True,
        "counties": None,
        "launchYear": None,
        "types": ["Public"],
    }


INDIA_2024 = [
    _holiday("2024-01-26", "Republic Day", "Republic Day of India"),
    _holiday("2024-03-08", "Mahashivratri", "Maha Shivaratri"),
    _holiday("2024-03-25", "Holi", "Holi"),
    _holiday("2024-03-29", "Good Friday", "Good Friday"),
    _holiday("2024-04-11", "Eid al-Fitr", "Id-ul-Fitr"),
    _holiday("2024-05-23", "Buddha Purnima", "Buddha Purnima"),
    _holiday("2024-08-15", "Independence Day", "Independence Day of India"),
    _holiday("2024-08-19", "Raksha Bandhan", "Raksha Bandhan"),
    _holiday("2024-10-02", "Gandhi Jayanti", "Mahatma Gandhi Jayanti"),
    _holiday("2024-10-12", "Dussehra", "Vijaya Dashami"),
    _holiday("2024-10-31", "Diwali", "Deepavali/Diwali"),
    _holiday("2024-11-01", "Govardhan Puja", "Govardhan Puja"),
    _holiday("2024-11-03", "Bhai Dooj", "Bhai Duj"),
    _holiday("2024-12-25", "Christmas Day", "Christmas Day"),
]

INDIA_2025 = [
    _holiday("2025-01-26", "Republic Day", "Republic Day of India"),
    _holiday("2025-03-01", "Mahashivratri", "Maha Shivaratri"),
    _holiday("2025-03-14", "Holi", "Holi"),
    _holiday("2025-04-18", "Good Friday", "Good Friday"),
    _holiday("2025-03-31", "Eid al-Fitr", "Id-ul-Fitr"),
    _holiday("2025-05-12", "Buddha Purnima", "Buddha Purnima"),
    _holiday("2025-06-06", "Bakrid", "Id-ul-Zuha (Bakrid)"),
    _holiday("2025-08-15", "Independence Day", "Independence Day of India"),
    _holiday("2025-08-19", "Janmashtami", "Janmashtami"),
    _holiday("2025-10-02", "Gandhi Jayanti", "Mahatma Gandhi Jayanti"),
    _holiday("2025-10-02", "Navaratri Begins", "Navaratri"),
    _holiday("2025-10-21", "Diwali", "Deepavali/Diwali"),
    _holiday("2025-10-22", "Govardhan Puja", "Govardhan Puja"),
    _holiday("2025-10-23", "Bhai Dooj", "Bhai Duj"),
    _holiday("2025-11-01", "Guru Nanak Jayanti", "Guru Nanak Jayanti"),
    _holiday("2025-12-25", "Christmas Day", "Christmas Day"),
]

FALLBACKS: dict[str, dict[int, list[dict]]] = {
    "IN": {
        2024: INDIA_2024,
        2025: INDIA_2025,
    },
}


def get_fallback_holidays(country_code: str, year: int) -> list[PublicHoliday]:
    """Return the static holidays for a country/year, or an empty list."""
    if not country_code or not year:
        return []
    by_year = FALLBACKS.get(country_code.upper(), {})
    return [PublicHoliday.model_validate(item) for item in by_year.get(year, [])]
