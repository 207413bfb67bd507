from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Literal, Optional
from datetime import date, datetime
from enum import Enum

# Pleasant band, inclusive on both ends
PLEASANT_MIN_F = 69
PLEASANT_MAX_F = 78
TARGET_TEMP_F = 75

class Tier(str, Enum):
    BASE = "base"
    PREMIUM = "premium"
    LUXE = "luxe"

class Airport(BaseModel):
    code: str
    name: str
    city: str
    lat: float
    lon: float

class DayForecast(BaseModel):
    date: str  # YYYY-MM-DD
    high: int
    low: int
    condition: str
    is_sunny: bool

class WeatherSnapshot(BaseModel):
    avg_temp: float  # Fahrenheit
    condition: str
    is_sunny: bool
    humidity: Optional[int] = None
    forecast: List[DayForecast] = []

    @computed_field
    @property
    def is_in_range(self) -> bool:
        return PLEASANT_MIN_F <= self.avg_temp <= PLEASANT_MAX_F

class Destination(BaseModel):
    city: str
    country: str
    airport: str
    lat: float
    lon: float
    region: str
    blurb: str = ""
    cost_index: int = Field(3, ge=1, le=5)  # 1 = cheapest

    # Filled per request
    weather: Optional[WeatherSnapshot] = None
    distance: Optional[float] = None  # miles from the traveler's airport

class TravelDates(BaseModel):
    check_in: date
    check_out: date
    check_in_display: str  # e.g. "Fri, Dec 27"
    check_out_display: str
    nights: int

class SegmentEndpoint(BaseModel):
    airport: str
    time: datetime

class FlightSegment(BaseModel):
    departure: SegmentEndpoint
    arrival: SegmentEndpoint
    duration: str  # "4h 30m"
    duration_minutes: int = Field(ge=0)
    stops: int = Field(0, ge=0)
    carrier: str
    flight_number: str

class FlightOffer(BaseModel):
    id: str  # Provider scoped
    source: str  # 'duffel', 'amadeus'
    price: float = Field(gt=0)  # Provider total + tier markup
    base_price: Optional[float] = None  # Provider total, needed to pay for the order
    currency: str = "USD"
    airline: str
    airline_logo: Optional[str] = None
    outbound: FlightSegment
    inbound: Optional[FlightSegment] = None
    cabin_class: str = "economy"
    baggage_included: bool = False
    refundable: bool = False

    @property
    def stops(self) -> int:
        return self.outbound.stops

class HotelOffer(BaseModel):
    id: str
    source: str  # 'booking', 'duffel_stays', 'serpapi'
    name: str
    star_rating: int = Field(3, ge=1, le=5)
    review_score: float = Field(0.0, ge=0, le=100)
    review_count: int = 0
    price: float = Field(gt=0)  # Whole stay, not nightly
    currency: str = "USD"
    address: str = ""
    distance_from_center: str = ""
    photos: List[str] = []
    amenities: List[str] = []
    room_type: str = ""
    product_id: Optional[str] = None
    free_cancellation: bool = False
    breakfast_included: bool = False
    url: str = ""
    is_luxury_brand: bool = False
    nightly_rate: Optional[float] = None

class PriceBreakdown(BaseModel):
    flight: float
    hotel: float
    markup: float

class TripPackage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    tier: Tier
    destination: Destination
    dates: TravelDates
    flight: FlightOffer
    hotel: HotelOffer
    total_price: float
    currency: str
    breakdown: PriceBreakdown
    reasoning: str
    reasoning_source: Literal["advisor", "deterministic"] = "deterministic"
    degraded: bool = False

class Selection(BaseModel):
    flight: FlightOffer
    hotel: HotelOffer
    reasoning: str
    source: Literal["advisor", "deterministic"] = "deterministic"

class PassengerInfo(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    date_of_birth: str = ""  # YYYY-MM-DD
    gender: Literal["male", "female", "other"] = "other"

class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

class Booking(BaseModel):
    id: str
    package: TripPackage
    passenger: PassengerInfo
    flight_order_id: Optional[str] = None
    hotel_order_id: Optional[str] = None
    hotel_checkout_url: Optional[str] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: datetime
    refund_deadline: datetime
    cancelled_at: Optional[datetime] = None

    def refund_available(self, now: datetime) -> bool:
        return self.status == BookingStatus.CONFIRMED and now < self.refund_deadline
