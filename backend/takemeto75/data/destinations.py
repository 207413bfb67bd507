from takemeto75.models import Airport, Destination
from typing import List

class UnknownAirport(LookupError):
    pass

class UnknownDestination(LookupError):
    pass

# (city, country, airport, lat, lon, region, cost_index, blurb)
_DESTINATION_ROWS = [
    # Caribbean & Central America
    ("San Juan", "Puerto Rico", "SJU", 18.4655, -66.1057, "caribbean", 3, "Old San Juan's colorful streets, world-class beaches, and no passport needed. The piña colada was invented here."),
    ("Cancun", "Mexico", "CUN", 21.1619, -86.8515, "caribbean", 2, "Turquoise Caribbean waters, ancient Mayan ruins, and tacos al pastor at 2am. The Hotel Zone delivers."),
    ("Nassau", "Bahamas", "NAS", 25.0343, -77.3963, "caribbean", 4, "Pink sand beaches, swimming pigs, and that famous Bahamas blue. Just a short hop from Florida."),
    ("Punta Cana", "Dominican Republic", "PUJ", 18.5601, -68.3725, "caribbean", 2, "All-inclusive paradise with 30 miles of white sand. Golf, spa, repeat."),
    ("Aruba", "Aruba", "AUA", 12.5211, -70.0167, "caribbean", 3, "One Happy Island. Consistent trade winds, zero hurricanes, and flamingos on the beach."),
    ("San Jose", "Costa Rica", "SJO", 9.9281, -84.0907, "central_america", 2, "Gateway to cloud forests, volcanoes, and the pura vida lifestyle. Coffee tours mandatory."),
    ("Panama City", "Panama", "PTY", 9.0820, -79.3835, "central_america", 2, "Watch ships transit the Canal, explore Casco Viejo, then escape to San Blas islands."),
    ("Belize City", "Belize", "BZE", 17.5392, -88.3089, "central_america", 2, "The Great Blue Hole awaits. Snorkel the second-largest barrier reef, explore Mayan temples."),

    # US Domestic
    ("San Diego", "USA", "SAN", 32.7157, -117.1611, "us_west", 3, "Perfect weather, craft beer capital, and fish tacos that ruin you for anywhere else."),
    ("Los Angeles", "USA", "LAX", 34.0522, -118.2437, "us_west", 4, "Beach cities, hiking trails, and the best food scene in America. Skip Hollywood."),
    ("Phoenix", "USA", "PHX", 33.4484, -112.0740, "us_southwest", 2, "Desert sunsets, world-class spas, and that dry heat everyone talks about."),
    ("Scottsdale", "USA", "PHX", 33.4942, -111.9261, "us_southwest", 4, "Luxury desert vibes. Golf, spa treatments, and restaurant patios with mountain views."),
    ("Miami", "USA", "MIA", 25.7617, -80.1918, "us_southeast", 4, "Art Deco, Cuban coffee, and beach clubs. The energy is unmatched."),
    ("Key West", "USA", "EYW", 24.5551, -81.7800, "us_southeast", 4, "End of the road. Hemingway bars, sunset at Mallory Square, and six-toed cats."),
    ("Tampa", "USA", "TPA", 27.9506, -82.4572, "us_southeast", 2, "Underrated gem. Ybor City cigars, craft breweries, and Clearwater Beach nearby."),
    ("Savannah", "USA", "SAV", 32.0809, -81.0912, "us_southeast", 2, "Spanish moss, historic squares, and the best fried chicken you've ever had."),
    ("Charleston", "USA", "CHS", 32.7765, -79.9311, "us_southeast", 3, "Southern charm perfected. Cobblestone streets, she-crab soup, and rooftop bars."),
    ("Austin", "USA", "AUS", 30.2672, -97.7431, "us_south", 3, "Live music, breakfast tacos, and Barton Springs. Keep it weird."),
    ("San Antonio", "USA", "SAT", 29.4241, -98.4936, "us_south", 2, "The Riverwalk, historic missions, and Tex-Mex that slaps."),
    ("Honolulu", "USA", "HNL", 21.3069, -157.8583, "hawaii", 4, "Waikiki sunsets, Diamond Head hikes, and poke bowls for days."),
    ("Maui", "USA", "OGG", 20.7984, -156.3319, "hawaii", 5, "Road to Hana, Haleakala sunrise, and beaches that look photoshopped."),

    # South America
    ("Medellin", "Colombia", "MDE", 6.2476, -75.5658, "south_america", 1, "City of eternal spring. Transformed from notorious to must-visit. The metro is art."),
    ("Cartagena", "Colombia", "CTG", 10.3910, -75.4794, "south_america", 2, "Walled city romance. Colonial colors, ceviche, and Caribbean vibes."),
    ("Lima", "Peru", "LIM", -12.0464, -77.0428, "south_america", 2, "The food capital of South America. Ceviche, pisco sours, and Miraflores cliffs."),
    ("Buenos Aires", "Argentina", "EZE", -34.6037, -58.3816, "south_america", 1, "Tango, steak, and Malbec. Paris of South America with better food."),
    ("Santiago", "Chile", "SCL", -33.4489, -70.6693, "south_america", 2, "Wine country doorstep, Andes views, and a food scene on the rise."),

    # Europe
    ("Lisbon", "Portugal", "LIS", 38.7223, -9.1393, "europe", 2, "Pastel de nata, tram 28, and rooftop bars with river views. Affordable and unforgettable."),
    ("Barcelona", "Spain", "BCN", 41.3851, 2.1734, "europe", 3, "Gaudí's masterpieces, beach, and tapas until midnight. La Rambla is a skip."),
    ("Seville", "Spain", "SVQ", 37.3891, -5.9845, "europe", 2, "Flamenco, tapas crawls, and the most beautiful plaza in Spain."),
    ("Rome", "Italy", "FCO", 41.9028, 12.4964, "europe", 3, "Ancient ruins, perfect pasta, and gelato research. Every corner is a postcard."),
    ("Athens", "Greece", "ATH", 37.9838, 23.7275, "europe", 2, "Acropolis views, mezze spreads, and island-hopping potential."),
    ("Dubrovnik", "Croatia", "DBV", 42.6507, 18.0944, "europe", 3, "King's Landing IRL. Walk the walls, swim in the Adriatic, day trip to Montenegro."),

    # Asia & Pacific
    ("Tokyo", "Japan", "NRT", 35.6762, 139.6503, "asia", 4, "The future and tradition collide. Ramen at 3am, temples at dawn."),
    ("Seoul", "South Korea", "ICN", 37.5665, 126.9780, "asia", 3, "K-beauty, Korean BBQ, and palaces. The nightlife is legendary."),
    ("Taipei", "Taiwan", "TPE", 25.0330, 121.5654, "asia", 2, "Night markets, bubble tea origin story, and the best dumplings outside Shanghai."),
    ("Singapore", "Singapore", "SIN", 1.3521, 103.8198, "asia", 4, "Clean, efficient, and the hawker centers are UNESCO-worthy."),
    ("Bali", "Indonesia", "DPS", -8.3405, 115.0920, "asia", 1, "Rice terraces, surf breaks, and $5 massages. Digital nomad central."),
    ("Bangkok", "Thailand", "BKK", 13.7563, 100.5018, "asia", 1, "Street food heaven, rooftop bars, and temples that deliver."),
    ("Sydney", "Australia", "SYD", -33.8688, 151.2093, "oceania", 4, "Opera House, Bondi Beach, and flat whites that changed coffee forever."),

    # Middle East & Africa
    ("Dubai", "UAE", "DXB", 25.2048, 55.2708, "middle_east", 4, "Excess perfected. Desert safaris, indoor skiing, and brunch culture."),
    ("Tel Aviv", "Israel", "TLV", 32.0853, 34.7818, "middle_east", 3, "Mediterranean beaches, incredible food scene, and Bauhaus architecture."),
    ("Marrakech", "Morocco", "RAK", 31.6295, -7.9811, "africa", 2, "Souks, riads, and tagine. The sensory overload you need."),
    ("Cape Town", "South Africa", "CPT", -33.9249, 18.4241, "africa", 2, "Table Mountain, wine country, and penguins. Actually penguins."),
]

DESTINATIONS: List[Destination] = [
    Destination(city=city, country=country, airport=airport, lat=lat, lon=lon, region=region, cost_index=cost_index, blurb=blurb)
    for city, country, airport, lat, lon, region, cost_index, blurb in _DESTINATION_ROWS
]

US_AIRPORTS: List[Airport] = [
    Airport(code="JFK", name="New York JFK", city="New York", lat=40.6413, lon=-73.7781),
    Airport(code="LAX", name="Los Angeles", city="Los Angeles", lat=33.9416, lon=-118.4085),
    Airport(code="ORD", name="Chicago O'Hare", city="Chicago", lat=41.9742, lon=-87.9073),
    Airport(code="DFW", name="Dallas/Fort Worth", city="Dallas", lat=32.8998, lon=-97.0403),
    Airport(code="DEN", name="Denver", city="Denver", lat=39.8561, lon=-104.6737),
    Airport(code="SFO", name="San Francisco", city="San Francisco", lat=37.6213, lon=-122.3790),
    Airport(code="SEA", name="Seattle-Tacoma", city="Seattle", lat=47.4502, lon=-122.3088),
    Airport(code="ATL", name="Atlanta", city="Atlanta", lat=33.6407, lon=-84.4277),
    Airport(code="BOS", name="Boston Logan", city="Boston", lat=42.3656, lon=-71.0096),
    Airport(code="MIA", name="Miami", city="Miami", lat=25.7959, lon=-80.2870),
    Airport(code="PHX", name="Phoenix", city="Phoenix", lat=33.4373, lon=-112.0078),
    Airport(code="IAH", name="Houston", city="Houston", lat=29.9902, lon=-95.3368),
    Airport(code="MSP", name="Minneapolis", city="Minneapolis", lat=44.8848, lon=-93.2223),
    Airport(code="DTW", name="Detroit", city="Detroit", lat=42.2162, lon=-83.3554),
    Airport(code="PHL", name="Philadelphia", city="Philadelphia", lat=39.8729, lon=-75.2437),
    Airport(code="LGA", name="New York LaGuardia", city="New York", lat=40.7769, lon=-73.8740),
    Airport(code="EWR", name="Newark", city="Newark", lat=40.6895, lon=-74.1745),
    Airport(code="SAN", name="San Diego", city="San Diego", lat=32.7338, lon=-117.1933),
    Airport(code="AUS", name="Austin", city="Austin", lat=30.1975, lon=-97.6664),
    Airport(code="PDX", name="Portland", city="Portland", lat=45.5898, lon=-122.5951),
]

def get_airport(code: str) -> Airport:
    clean = (code or "").strip().upper()
    for airport in US_AIRPORTS:
        if airport.code == clean:
            return airport
    raise UnknownAirport(f"Unknown origin airport: {code}")

def get_destination(city: str) -> Destination:
    clean = (city or "").strip().lower()
    for destination in DESTINATIONS:
        if destination.city.lower() == clean:
            return destination
    raise UnknownDestination(f"Unknown destination: {city}")
