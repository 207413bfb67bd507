from datetime import date, datetime, timedelta

from takemeto75.core.packages import get_travel_dates
from takemeto75.models import Destination, FlightOffer, FlightSegment, HotelOffer, SegmentEndpoint, WeatherSnapshot

def make_segment(stops=0, origin="JFK", dest="SJU", depart=datetime(2026, 1, 10, 8, 0), minutes=270):
    return FlightSegment(
        departure=SegmentEndpoint(airport=origin, time=depart),
        arrival=SegmentEndpoint(airport=dest, time=depart + timedelta(minutes=minutes)),
        duration=f"{minutes // 60}h {minutes % 60}m",
        duration_minutes=minutes,
        stops=stops,
        carrier="Test Air",
        flight_number="TA100",
    )

def make_flight(id, price, stops=0, airline="Test Air", **kwargs):
    return FlightOffer(
        id=id,
        source="duffel",
        price=price,
        airline=airline,
        outbound=make_segment(stops=stops),
        inbound=make_segment(stops=stops, origin="SJU", dest="JFK", depart=datetime(2026, 1, 13, 10, 0)),
        **kwargs,
    )

def make_hotel(id, price, review_score=85, name=None, review_count=100, star_rating=3, **kwargs):
    return HotelOffer(
        id=id,
        source="booking",
        name=name or f"Hotel {id}",
        star_rating=star_rating,
        review_score=review_score,
        review_count=review_count,
        price=price,
        **kwargs,
    )

def make_weather(avg_temp=75, is_sunny=True):
    return WeatherSnapshot(avg_temp=avg_temp, condition="Sunny" if is_sunny else "Rain", is_sunny=is_sunny)

def make_destination(city="San Juan", cost_index=3, lat=18.4655, lon=-66.1057, weather=None, airport="SJU"):
    return Destination(
        city=city,
        country="Puerto Rico",
        airport=airport,
        lat=lat,
        lon=lon,
        region="caribbean",
        cost_index=cost_index,
        weather=weather,
    )

def make_dates():
    return get_travel_dates(date(2026, 1, 9))
