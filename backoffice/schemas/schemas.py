from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List, Dict, Any, Union, Annotated, Literal
from datetime import date as Date, datetime
from enum import Enum

# Enum for food categories
class FoodCategory(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    DESSERTS = "desserts"

# Enum for spice levels
class SpiceLevel(str, Enum):
    MILD = "mild"
    MEDIUM = "medium"
    SPICY = "spicy"
    VERY_SPICY = "very_spicy"

# Enum for bill line categories
class LineCategory(str, Enum):
    ROOM = "room"
    FOOD = "food"
    SERVICE = "service"

# Enum for attendance status
class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"

# Enum for staff status
class StaffStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

# Enum for attendance reporting windows
class StatsPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

# Enum for crash report severity
class CrashSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

# Base schemas
class BaseResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None

# User and session schemas
class SignUpRequest(BaseModel):
    email: EmailStr
    password: str

    @validator('password')
    def password_strength(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters long')
        return v

class UserRead(BaseModel):
    id: int
    email: str
    created_at: datetime

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead

class TokenData(BaseModel):
    user_id: Optional[int] = None
    jti: Optional[str] = None

class SessionStatus(BaseModel):
    authenticated: bool
    user: Optional[UserRead] = None
    hotel_id: Optional[int] = None
    next: str  # /hotel/auth, /hotel/setup or /dashboard

# Hotel schemas
class HotelProfileUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    @validator('name')
    def name_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Hotel name cannot be blank')
        return v.strip() if v else v

class HotelRead(BaseModel):
    id: int
    owner_id: int
    name: str
    address: Optional[str] = None
    logo_url: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    services: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

# Room type schemas
def _dedupe(values: List[str]) -> List[str]:
    seen = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen

class RoomTypeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    base_price: float = Field(..., gt=0)
    max_occupancy: int = Field(2, ge=1)
    amenities: List[str] = []
    available: bool = True
    sort_order: int = 0

    @validator('amenities')
    def unique_amenities(cls, v):
        return _dedupe(v)

class RoomTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    base_price: Optional[float] = Field(None, gt=0)
    max_occupancy: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    available: Optional[bool] = None
    sort_order: Optional[int] = None

    @validator('amenities')
    def unique_amenities(cls, v):
        return _dedupe(v) if v is not None else v

class RoomTypeRead(BaseModel):
    id: int
    hotel_id: int
    name: str
    description: Optional[str] = None
    base_price: float
    max_occupancy: int
    amenities: List[str] = []
    available: bool
    sort_order: int
    created_at: datetime
    updated_at: Optional[datetime] = None

# Food item schemas
class FoodItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    category: FoodCategory
    available: bool = True
    is_vegetarian: bool = False
    is_vegan: bool = False
    spice_level: Optional[SpiceLevel] = None
    preparation_time: Optional[int] = Field(None, ge=0)
    sort_order: int = 0

class FoodItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category: Optional[FoodCategory] = None
    available: Optional[bool] = None
    is_vegetarian: Optional[bool] = None
    is_vegan: Optional[bool] = None
    spice_level: Optional[SpiceLevel] = None
    preparation_time: Optional[int] = Field(None, ge=0)
    sort_order: Optional[int] = None

class FoodItemRead(BaseModel):
    id: int
    hotel_id: int
    name: str
    description: Optional[str] = None
    price: float
    category: FoodCategory
    available: bool
    is_vegetarian: bool
    is_vegan: bool
    spice_level: Optional[SpiceLevel] = None
    preparation_time: Optional[int] = None
    sort_order: int
    created_at: datetime
    updated_at: Optional[datetime] = None

# Service schemas
class ServiceItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    description: Optional[str] = None
    available: bool = True
    sort_order: int = 0

class ServiceItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    available: Optional[bool] = None
    sort_order: Optional[int] = None

class ServiceItemRead(BaseModel):
    id: int
    hotel_id: int
    name: str
    price: float
    description: Optional[str] = None
    available: bool
    sort_order: int
    created_at: datetime
    updated_at: Optional[datetime] = None

# Cart schemas: a catalog selection is tagged by its category
class RoomSelection(BaseModel):
    category: Literal["room"] = "room"
    room_type_id: int
    nights: int = Field(1, ge=1)

class FoodSelection(BaseModel):
    category: Literal["food"] = "food"
    food_item_id: int

class ServiceSelection(BaseModel):
    category: Literal["service"] = "service"
    service_id: int

CatalogSelection = Annotated[
    Union[RoomSelection, FoodSelection, ServiceSelection],
    Field(discriminator="category")
]

class CartItemAdd(BaseModel):
    selection: CatalogSelection
    quantity: int = Field(1, ge=1)

class CartQuantityUpdate(BaseModel):
    # Values below 1 are accepted and ignored by the cart
    quantity: int

class BillLineItem(BaseModel):
    id: str
    name: str
    category: LineCategory
    catalog_id: Optional[int] = None
    original_price: float
    quantity: int = 1
    line_total: float

class CartRead(BaseModel):
    items: List[BillLineItem]
    subtotal: float
    tax_amount: float
    total: float

# Bill schemas
class CheckoutRequest(BaseModel):
    customer_name: str = ""
    customer_phone: Optional[str] = None

class BillCreate(CheckoutRequest):
    items: List[CartItemAdd] = []

class BillItemRead(BaseModel):
    id: int
    bill_id: int
    name: str
    category: LineCategory
    price: float
    quantity: int
    subtotal: float

class BillRead(BaseModel):
    id: int
    hotel_id: int
    bill_number: str
    customer_name: str
    customer_phone: Optional[str] = None
    subtotal: float
    tax_amount: float
    total: float
    payment_method: str
    payment_status: str
    items: List[Dict[str, Any]] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

class BillDetail(BillRead):
    line_items: List[BillItemRead] = []
    hotel: Optional[HotelRead] = None  # receipt header

class BillList(BaseModel):
    bills: List[BillRead]
    total: int

class BillSubmissionResponse(BaseResponse):
    bill: BillRead
    items_recorded: bool

class RecentBill(BaseModel):
    id: int
    bill_number: str
    customer_name: str
    total: float
    created_at: datetime
    payment_status: str

class CategoryBreakdown(BaseModel):
    room: float = 0
    food: float = 0
    service: float = 0

class BillingSummary(BaseModel):
    total_revenue: float
    total_bills: int
    average_bill_amount: float
    today_revenue: float
    today_bills: int
    revenue_growth: float
    bills_growth: float
    category_breakdown: CategoryBreakdown
    recent_bills: List[RecentBill]

class DashboardStats(BaseModel):
    total_revenue: float
    active_staff: int
    bills_today: int
    recent_bills: List[RecentBill]

# Staff and attendance schemas
class AttendanceEntry(BaseModel):
    date: Date
    status: AttendanceStatus

class StaffAttendance(BaseModel):
    """A roster entry with its attendance history, the aggregator's input"""
    id: int
    name: str
    role: str = ""
    status: StaffStatus = StaffStatus.ACTIVE
    attendance: List[AttendanceEntry] = []

class StaffCreate(BaseModel):
    name: str = ""
    role: str = ""
    age: Optional[int] = None
    place: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    emergency_contact: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_verification_notes: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    joining_date: Optional[Date] = None

class StaffRead(StaffAttendance):
    hotel_id: int
    contact: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    place: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_verification_notes: Optional[str] = None
    salary: Optional[float] = None
    joining_date: Optional[Date] = None
    emergency_contact: Optional[str] = None
    additional_info: Dict[str, Any] = {}
    created_at: datetime
    updated_at: Optional[datetime] = None

class StaffList(BaseModel):
    staff: List[StaffRead]
    total: int

class StaffStatusUpdate(BaseModel):
    status: StaffStatus

class AttendanceMark(BaseModel):
    status: AttendanceStatus
    date: Optional[Date] = None  # defaults to today

class BulkAttendanceMark(BaseModel):
    staff_ids: List[int] = Field(..., min_length=1)
    status: AttendanceStatus

class AttendanceStats(BaseModel):
    period: StatsPeriod
    present: int
    absent: int
    late: int
    half_day: int
    total: int
    not_marked: Optional[int] = None  # today only
    average_attendance: Optional[int] = None  # week and month only

class TopPerformer(BaseModel):
    staff_id: int
    name: str
    role: str
    attendance_rate: int
    punctuality_rate: int

class AttendanceTrendDay(BaseModel):
    date: Date
    present: int
    absent: int
    late: int
    half_day: int
    total: int

class MemberAttendanceSummary(BaseModel):
    total: int
    present: int
    absent: int
    late: int
    half_day: int
    present_rate: int
    punctuality_rate: int
    recent: List[AttendanceEntry]

class MonthlyAttendance(BaseModel):
    year: int
    month: int
    present: int
    absent: int
    late: int
    half_day: int
    days: List[AttendanceEntry]

# Inventory schemas
class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)
    quantity: float = Field(0, ge=0)
    unit: str = Field(..., min_length=1)
    minimum_stock: float = Field(0, ge=0)
    price_per_unit: float = Field(0, ge=0)
    supplier: Optional[str] = None

class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    minimum_stock: Optional[float] = Field(None, ge=0)
    price_per_unit: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None

class InventoryItemRead(BaseModel):
    id: int
    hotel_id: int
    name: str
    description: Optional[str] = None
    category: str
    quantity: float
    unit: str
    minimum_stock: float
    price_per_unit: float
    supplier: Optional[str] = None
    low_stock: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

class InventoryList(BaseModel):
    items: List[InventoryItemRead]
    total: int

class InventorySummary(BaseModel):
    total_items: int
    low_stock_items: int
    total_value: float

# Crash report schemas
class CrashReportCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    severity: CrashSeverity = CrashSeverity.MEDIUM

class CrashReportRead(BaseModel):
    id: int
    user_id: int
    hotel_id: Optional[int] = None
    title: str
    description: str
    severity: CrashSeverity
    user_agent: Optional[str] = None
    created_at: datetime
