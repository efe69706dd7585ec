"""
Customer API routes
Validation, transactions and aggregation live in the service layer; errors
raised there are turned into envelopes by utils.error_handling.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Query

from models.customer import (
    AddressCountFilter,
    AddressFields,
    AddressListResponse,
    CustomerCountResponse,
    CustomerCreateRequest,
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerUpdateRequest,
)
from services.customer_service import get_customer_service

router = APIRouter()
logger = logging.getLogger(__name__)

# Static paths are registered before /{customer_id}

@router.get("/search", response_model=CustomerListResponse)
async def search_customers(q: Optional[str] = Query(None, description="Free-text search term")):
    """Search customers by name, phone or any address field; all customers when q is blank"""
    customers = await get_customer_service().search_customers(q)
    return {"data": customers}

@router.get("/count", response_model=CustomerCountResponse)
async def count_customers(
    address_count: Optional[str] = Query(None, alias="addressCount", description="single or multiple"),
    q: Optional[str] = Query(None, description="Free-text search term")
):
    """Count customers using the same filters as the listing"""
    total = await get_customer_service().count_customers(q, AddressCountFilter.parse(address_count))
    return {"count": total}

@router.get("", response_model=CustomerListResponse)
async def list_customers(
    address_count: Optional[str] = Query(None, alias="addressCount", description="single or multiple"),
    q: Optional[str] = Query(None, description="Free-text search term")
):
    """List customers with their addresses, newest first"""
    customers = await get_customer_service().list_customers(q, AddressCountFilter.parse(address_count))
    return {"data": customers}

@router.post("", status_code=201)
async def create_customer(request: CustomerCreateRequest):
    """Create a customer with its initial address"""
    customer_id = await get_customer_service().create_customer(request.model_dump())
    return {
        "message": "Customer and address created successfully.",
        "customerId": customer_id
    }

@router.get("/{customer_id}", response_model=CustomerDetailResponse)
async def get_customer(customer_id: int):
    """Get a customer with all of its addresses"""
    customer = await get_customer_service().get_customer(customer_id)
    return {"data": customer}

@router.put("/{customer_id}")
async def update_customer(customer_id: int, request: CustomerUpdateRequest):
    """Update customer details; a complete address in the body is added as a new address"""
    address_id = await get_customer_service().update_customer(customer_id, request.model_dump())

    if address_id is None:
        return {"message": "Customer updated successfully."}
    return {
        "message": "Customer and address updated successfully.",
        "addressId": address_id
    }

@router.delete("/{customer_id}")
async def delete_customer(customer_id: int):
    """Delete a customer and all associated addresses"""
    deleted_addresses = await get_customer_service().delete_customer(customer_id)
    return {
        "message": "Customer and all associated addresses deleted successfully.",
        "deletedAddresses": deleted_addresses
    }

@router.get("/{customer_id}/addresses", response_model=AddressListResponse)
async def get_customer_addresses(customer_id: int):
    """List the addresses of a customer"""
    addresses = await get_customer_service().get_customer_addresses(customer_id)
    return {"data": addresses}

@router.post("/{customer_id}/addresses", status_code=201)
async def add_customer_address(customer_id: int, request: AddressFields):
    """Add an address to an existing customer"""
    address = await get_customer_service().add_customer_address(customer_id, request.model_dump())
    return {"message": "Address added", "addressId": address["id"]}
