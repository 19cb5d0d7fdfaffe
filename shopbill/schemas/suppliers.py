from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class SupplierIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    product_categories: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None

class SupplierOut(SupplierIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None
