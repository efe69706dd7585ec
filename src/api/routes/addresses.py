"""
Address API routes
"""

import logging
from fastapi import APIRouter

from models.customer import AddressCreateRequest, AddressUpdateRequest
from services.customer_service import get_customer_service

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("", status_code=201)
async def create_address(request: AddressCreateRequest):
    """Create an address for the customer given in the body"""
    address = await get_customer_service().create_address(request.model_dump())
    return {"message": "Address created successfully.", "address": address}

@router.put("/{address_id}")
async def update_address(address_id: int, request: AddressUpdateRequest):
    """Replace the fields of an address"""
    address = await get_customer_service().update_address(address_id, request.model_dump())
    return {"message": "Address updated successfully.", "address": address}

@router.delete("/{address_id}")
async def delete_address(address_id: int):
    """Delete an address"""
    await get_customer_service().delete_address(address_id)
    return {"message": "Address deleted successfully."}
