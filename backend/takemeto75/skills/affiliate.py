from takemeto75.config import settings
from urllib.parse import urlencode

AWIN_URL = "https://www.awin1.com/cread.php"
BOOKING_SEARCH_URL = "https://www.booking.com/searchresults.html"

def _awin_wrap(target_url: str) -> str:
    return f"{AWIN_URL}?" + urlencode({
        "awinmid": settings.AWIN_ADVERTISER_ID,
        "awinaffid": settings.AWIN_PUBLISHER_ID,
        "ued": target_url,
    })

def build_deep_link(hotel_identifier: str, city: str, check_in, check_out, guests: int = 2) -> str:
    """AWIN-tracked Booking.com search for one hotel. Pure string building."""
    booking_url = f"{BOOKING_SEARCH_URL}?" + urlencode({
        "ss": f"{hotel_identifier}, {city}",
        "checkin": str(check_in),
        "checkout": str(check_out),
        "group_adults": guests,
        "no_rooms": 1,
    })
    return _awin_wrap(booking_url)

def build_city_link(city: str, country: str, check_in, check_out, guests: int = 2) -> str:
    return build_deep_link(city, country, check_in, check_out, guests)
