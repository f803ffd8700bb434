import io
import os
import re
import random
import string
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union
from PIL import Image, UnidentifiedImageError

# Date and time helpers
def get_current_time() -> datetime:
    """Get current UTC time, timezone-aware"""
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values; SQLite hands stored timestamps back without an offset"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def get_today() -> date:
    """Current calendar day (UTC)"""
    return get_current_time().date()

def get_date_range(start_date: date, end_date: date) -> List[date]:
    """Get list of dates between start and end date, both included"""
    delta = end_date - start_date
    return [start_date + timedelta(days=i) for i in range(delta.days + 1)]

def start_of_month(value: date) -> date:
    return value.replace(day=1)

def start_of_day(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

# Money and percentage helpers
CENTS = Decimal("0.01")

def to_money(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert to a Decimal rounded half-up to two places"""
    if not isinstance(value, Decimal):
        # via str() so a float 0.1 becomes Decimal("0.1")
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)

def round_half_up(value: Union[int, float, Decimal]) -> int:
    """Round to the nearest integer, halves away from zero (not banker's rounding)"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def percentage(part: Union[int, float, Decimal], whole: Union[int, float, Decimal]) -> int:
    """Whole-number percentage, 0 when whole is 0"""
    if not whole:
        return 0
    return round_half_up(Decimal(str(part)) / Decimal(str(whole)) * 100)

# Identifier helpers
def random_suffix(length: int = 4) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(random.choices(alphabet, k=length))

def epoch_millis(moment: datetime = None) -> int:
    moment = moment or get_current_time()
    return int(as_utc(moment).timestamp() * 1000)

# File helpers
def safe_filename(original_filename: str) -> str:
    """Strip directories and anything outside [A-Za-z0-9._-] from an upload name"""
    name = os.path.basename(original_filename or "").strip()
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name)
    return name or "upload"

# Data validation helpers
def validate_phone_number(phone: str) -> bool:
    """At least 10 characters, as the staff form requires"""
    return len(phone.strip()) >= 10

def validate_email(email: str) -> bool:
    return "@" in email

# Image helpers
LOGO_FORMATS = {"PNG", "JPEG", "GIF", "WEBP"}

def detect_image_format(content: bytes) -> Optional[str]:
    """Pillow's format name for an uploaded image, None when it is not a supported image"""
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError):
        return None
    return image_format if image_format in LOGO_FORMATS else None
