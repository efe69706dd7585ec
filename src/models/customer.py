"""
Customer and address Pydantic models

Request models accept missing fields so that the service layer can report
them with its own validation messages.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class AddressCountFilter(str, Enum):
    """Filter on the number of addresses a customer owns"""
    SINGLE = "single"  # exactly one
    MULTIPLE = "multiple"  # more than one

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["AddressCountFilter"]:
        """Unknown or empty values mean no filter"""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class AddressFields(BaseModel):
    address_details: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pin_code: Optional[str] = None


class AddressCreateRequest(AddressFields):
    customer_id: Optional[int] = Field(None, description="Customer that owns the new address")


class AddressUpdateRequest(AddressFields):
    pass


class CustomerCreateRequest(AddressFields):
    """Customer with its initial address"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None


class CustomerUpdateRequest(AddressFields):
    """Customer fields, optionally with a full address to add"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None


class AddressResponse(BaseModel):
    id: int
    customer_id: int
    address_details: str
    city: str
    state: str
    pin_code: str


class CustomerDetail(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone_number: str
    addresses: List[AddressResponse] = []


class CustomerSummary(CustomerDetail):
    """Listing row, with the number of addresses the customer owns"""
    address_count: int = 0


class CustomerDetailResponse(BaseModel):
    data: CustomerDetail


class CustomerListResponse(BaseModel):
    data: List[CustomerSummary]


class AddressListResponse(BaseModel):
    data: List[AddressResponse]


class CustomerCountResponse(BaseModel):
    count: int
