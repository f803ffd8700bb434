from sqlalchemy import Column, DateTime, JSON, UniqueConstraint
from sqlmodel import SQLModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime, date as Date

from backoffice.utils.helpers import get_current_time

# Base model for common fields
class TimeStampModel(SQLModel):
    created_at: datetime = Field(default_factory=get_current_time, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

# User model for authentication
class User(TimeStampModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    is_active: bool = True

# Hotel model, one per owning user
class Hotel(TimeStampModel, table=True):
    __tablename__ = "hotels"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", unique=True, index=True)
    name: str
    address: Optional[str] = None
    logo_url: Optional[str] = None
    logo_path: Optional[str] = None  # blob store path behind logo_url
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    services: List[str] = Field(default_factory=list, sa_column=Column(JSON))

# Catalog models
class RoomType(TimeStampModel, table=True):
    __tablename__ = "room_types"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    description: Optional[str] = None
    base_price: float
    max_occupancy: int = 2
    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    available: bool = True
    sort_order: int = 0

class FoodItem(TimeStampModel, table=True):
    __tablename__ = "food_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    description: Optional[str] = None
    price: float
    category: str  # breakfast/lunch/dinner/snacks/beverages/desserts
    available: bool = True
    is_vegetarian: bool = False
    is_vegan: bool = False
    spice_level: Optional[str] = None  # mild/medium/spicy/very_spicy
    preparation_time: Optional[int] = None  # minutes
    sort_order: int = 0

class ServiceItem(TimeStampModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    price: float
    description: Optional[str] = None
    available: bool = True
    sort_order: int = 0

# Billing models
class Bill(TimeStampModel, table=True):
    __tablename__ = "bills"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    # Not unique: timestamp + random suffix, collisions are accepted
    bill_number: str = Field(index=True)
    customer_name: str
    customer_phone: Optional[str] = None
    subtotal: float
    tax_amount: float
    total: float
    payment_method: str = "cash"
    payment_status: str = "paid"
    # Legacy embedded copy of the line items, the system of record
    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

class BillItem(TimeStampModel, table=True):
    __tablename__ = "bill_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    bill_id: int = Field(foreign_key="bills.id", index=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    category: str  # room, food, service
    price: float  # unit price
    quantity: int = 1
    subtotal: float

# Staff models
class Staff(TimeStampModel, table=True):
    __tablename__ = "staff"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    role: str
    contact: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    place: Optional[str] = None
    id_type: Optional[str] = None  # Aadhaar Card/PAN Card/Passport/...
    id_number: Optional[str] = None
    id_verification_notes: Optional[str] = None
    salary: Optional[float] = None
    joining_date: Optional[Date] = None
    emergency_contact: Optional[str] = None
    status: str = "active"  # active/inactive
    additional_info: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

class AttendanceRecord(TimeStampModel, table=True):
    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("staff_id", "date", name="uq_attendance_staff_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: int = Field(foreign_key="staff.id", index=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    date: Date
    status: str  # present/absent/late/half_day

# Inventory model
class InventoryItem(TimeStampModel, table=True):
    __tablename__ = "inventory_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    name: str
    description: Optional[str] = None
    category: str
    quantity: float = 0
    unit: str
    minimum_stock: float = 0
    price_per_unit: float = 0
    supplier: Optional[str] = None

# Crash report model
class CrashReport(TimeStampModel, table=True):
    __tablename__ = "crash_reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    hotel_id: Optional[int] = Field(default=None, foreign_key="hotels.id", index=True)
    title: str
    description: str
    severity: str = "medium"  # low/medium/high/critical
    user_agent: Optional[str] = None
