"""
Customer service - business logic for customers and their addresses

Multi-statement operations (create, update, cascade delete) run on a
dedicated pooled connection inside conn.transaction(); any exception raised
in that block rolls the transaction back and the pool context releases the
connection. Single-statement operations use a pooled connection with no
explicit transaction.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import asyncpg

from database.connection import get_db_pool, affected_rows
from models.customer import AddressCountFilter
from services.exceptions import ConflictError, NotFoundError, StoreError
from services import validation

logger = logging.getLogger(__name__)

# Customer statements
FIND_DUPLICATE_CUSTOMER = """
    SELECT id FROM customers
    WHERE first_name = $1 AND last_name = $2 AND phone_number = $3
    LIMIT 1
"""
INSERT_CUSTOMER = """
    INSERT INTO customers (first_name, last_name, phone_number)
    VALUES ($1, $2, $3)
    RETURNING id
"""
UPDATE_CUSTOMER = """
    UPDATE customers SET first_name = $1, last_name = $2, phone_number = $3
    WHERE id = $4
"""
DELETE_CUSTOMER = "DELETE FROM customers WHERE id = $1"
SELECT_CUSTOMER = """
    SELECT id, first_name, last_name, phone_number
    FROM customers
    WHERE id = $1
"""

# Address statements
INSERT_ADDRESS = """
    INSERT INTO addresses (customer_id, address_details, city, state, pin_code)
    VALUES ($1, $2, $3, $4, $5)
    RETURNING id, customer_id, address_details, city, state, pin_code
"""
UPDATE_ADDRESS = """
    UPDATE addresses SET address_details = $1, city = $2, state = $3, pin_code = $4
    WHERE id = $5
    RETURNING id, customer_id, address_details, city, state, pin_code
"""
DELETE_ADDRESS = "DELETE FROM addresses WHERE id = $1"
DELETE_CUSTOMER_ADDRESSES = "DELETE FROM addresses WHERE customer_id = $1"
SELECT_CUSTOMER_ADDRESSES = """
    SELECT id, customer_id, address_details, city, state, pin_code
    FROM addresses
    WHERE customer_id = $1
    ORDER BY id
"""

# Listing: one row per customer, addresses aggregated into a JSON array
CUSTOMER_LIST_SELECT = """
    SELECT
        c.id,
        c.first_name,
        c.last_name,
        c.phone_number,
        COUNT(a.id) AS address_count,
        COALESCE(
            json_agg(
                json_build_object(
                    'id', a.id,
                    'customer_id', a.customer_id,
                    'address_details', a.address_details,
                    'city', a.city,
                    'state', a.state,
                    'pin_code', a.pin_code
                ) ORDER BY a.id
            ) FILTER (WHERE a.id IS NOT NULL),
            '[]'::json
        ) AS addresses
    FROM customers c
    LEFT JOIN addresses a ON a.customer_id = c.id
"""
CUSTOMER_COUNT_SELECT = """
    SELECT COUNT(*) FROM (
        SELECT c.id
        FROM customers c
        LEFT JOIN addresses a ON a.customer_id = c.id
"""

# SERIAL ids are int4; anything outside 1..MAX_ROW_ID matches no row
MAX_ROW_ID = 2147483647

CUSTOMER_SEARCH_COLUMNS = ("c.first_name", "c.last_name", "c.phone_number")
ADDRESS_SEARCH_COLUMNS = ("s.address_details", "s.city", "s.state", "s.pin_code")

ADDRESS_COUNT_HAVING = {
    AddressCountFilter.SINGLE: "HAVING COUNT(a.id) = 1",
    AddressCountFilter.MULTIPLE: "HAVING COUNT(a.id) > 1",
}


@dataclass
class CustomerFilter:
    """WHERE/HAVING fragments shared by the list and count queries"""
    where: str = ""
    having: str = ""
    params: List[Any] = field(default_factory=list)


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_customer_filter(
    search: Optional[str] = None,
    address_count: Optional[AddressCountFilter] = None
) -> CustomerFilter:
    """
    Build the filter for customer listing and counting

    The search term matches customer columns directly and address columns
    through an EXISTS subquery, so a matching address selects the customer
    without narrowing the aggregated address list or its count.
    """
    customer_filter = CustomerFilter()

    term = (search or "").strip()
    if term:
        customer_filter.params.append(f"%{escape_like(term)}%")
        placeholder = f"${len(customer_filter.params)}"
        customer_match = " OR ".join(f"{col} ILIKE {placeholder}" for col in CUSTOMER_SEARCH_COLUMNS)
        address_match = " OR ".join(f"{col} ILIKE {placeholder}" for col in ADDRESS_SEARCH_COLUMNS)
        customer_filter.where = (
            f"WHERE ({customer_match} OR EXISTS ("
            f"SELECT 1 FROM addresses s WHERE s.customer_id = c.id AND ({address_match})))"
        )

    if address_count is not None:
        customer_filter.having = ADDRESS_COUNT_HAVING[address_count]

    return customer_filter


def build_list_query(customer_filter: CustomerFilter) -> str:
    return (
        f"{CUSTOMER_LIST_SELECT} {customer_filter.where} "
        f"GROUP BY c.id {customer_filter.having} ORDER BY c.id DESC"
    )


def build_count_query(customer_filter: CustomerFilter) -> str:
    return (
        f"{CUSTOMER_COUNT_SELECT} {customer_filter.where} "
        f"GROUP BY c.id {customer_filter.having}) AS filtered_customers"
    )


def aggregate_customer_row(row) -> Dict[str, Any]:
    """Shape a listing row: decode the address array and drop null entries"""
    customer = dict(row)
    addresses = customer.get("addresses")
    if isinstance(addresses, str):
        addresses = json.loads(addresses)
    customer["addresses"] = [address for address in (addresses or []) if address is not None]
    customer["address_count"] = int(customer.get("address_count") or 0)
    return customer


def is_row_id(value: int) -> bool:
    return 1 <= value <= MAX_ROW_ID


def _address_values(data: Dict[str, Any]) -> tuple:
    return tuple(data[name].strip() for name in validation.ADDRESS_FIELDS)


def _customer_values(data: Dict[str, Any]) -> tuple:
    return tuple(data[name].strip() for name in validation.CUSTOMER_FIELDS)


class CustomerService:
    """Service for customer and address operations"""

    # Transactional operations

    async def create_customer(self, data: Dict[str, Any]) -> int:
        """
        Create a customer together with its first address

        Args:
            data: customer fields plus address_details, city, state and pin_code

        Returns:
            id of the new customer
        """
        validation.validate_customer_create(data)
        first_name, last_name, phone_number = _customer_values(data)

        try:
            async with get_db_pool().acquire() as conn:
                async with conn.transaction():
                    duplicate_id = await conn.fetchval(
                        FIND_DUPLICATE_CUSTOMER, first_name, last_name, phone_number
                    )
                    if duplicate_id is not None:
                        raise ConflictError(
                            "Customer with this name and phone number already exists.",
                            field="phone_number"
                        )

                    customer_id = await conn.fetchval(
                        INSERT_CUSTOMER, first_name, last_name, phone_number
                    )
                    await conn.fetchrow(INSERT_ADDRESS, customer_id, *_address_values(data))
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to create customer: {e}")
            raise StoreError("Failed to create customer.") from e

        logger.info(f"Created customer {customer_id} with initial address")
        return customer_id

    async def update_customer(self, customer_id: int, data: Dict[str, Any]) -> Optional[int]:
        """
        Update a customer and, when a full address is supplied, add it

        The address is always inserted as a new row, never used to edit an
        existing one.

        Returns:
            id of the inserted address, or None when no address was supplied
        """
        with_address = validation.validate_customer_update(data)
        if not is_row_id(customer_id):
            raise NotFoundError("Customer not found.")
        address_id = None

        try:
            async with get_db_pool().acquire() as conn:
                async with conn.transaction():
                    status = await conn.execute(UPDATE_CUSTOMER, *_customer_values(data), customer_id)
                    if affected_rows(status) == 0:
                        raise NotFoundError("Customer not found.")

                    if with_address:
                        address = await conn.fetchrow(INSERT_ADDRESS, customer_id, *_address_values(data))
                        address_id = address["id"]
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to update customer {customer_id}: {e}")
            raise StoreError("Failed to update customer.") from e

        logger.info(f"Updated customer {customer_id} (new address: {address_id})")
        return address_id

    async def delete_customer(self, customer_id: int) -> int:
        """
        Delete a customer and all of its addresses atomically

        Returns:
            number of addresses deleted
        """
        if not is_row_id(customer_id):
            raise NotFoundError("Customer not found.")

        try:
            async with get_db_pool().acquire() as conn:
                async with conn.transaction():
                    deleted_addresses = affected_rows(
                        await conn.execute(DELETE_CUSTOMER_ADDRESSES, customer_id)
                    )
                    status = await conn.execute(DELETE_CUSTOMER, customer_id)
                    if affected_rows(status) == 0:
                        raise NotFoundError("Customer not found.")
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to delete customer {customer_id}: {e}")
            raise StoreError("Failed to delete customer.") from e

        logger.info(f"Deleted customer {customer_id} and {deleted_addresses} address(es)")
        return deleted_addresses

    # Reads

    async def get_customer(self, customer_id: int) -> Dict[str, Any]:
        """Customer row with its addresses nested as a list"""
        if not is_row_id(customer_id):
            raise NotFoundError("Customer not found")

        try:
            async with get_db_pool().acquire() as conn:
                row = await conn.fetchrow(SELECT_CUSTOMER, customer_id)
                if row is None:
                    raise NotFoundError("Customer not found")
                addresses = await conn.fetch(SELECT_CUSTOMER_ADDRESSES, customer_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to fetch customer {customer_id}: {e}")
            raise StoreError("Failed to fetch customer.") from e

        customer = dict(row)
        customer["addresses"] = [dict(address) for address in addresses]
        return customer

    async def list_customers(
        self,
        search: Optional[str] = None,
        address_count: Optional[AddressCountFilter] = None
    ) -> List[Dict[str, Any]]:
        """Customers matching the filters, newest first, addresses aggregated"""
        customer_filter = build_customer_filter(search, address_count)
        query = build_list_query(customer_filter)

        try:
            async with get_db_pool().acquire() as conn:
                rows = await conn.fetch(query, *customer_filter.params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to list customers: {e}")
            raise StoreError("Failed to fetch customers.") from e

        return [aggregate_customer_row(row) for row in rows]

    async def search_customers(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.list_customers(search=search)

    async def count_customers(
        self,
        search: Optional[str] = None,
        address_count: Optional[AddressCountFilter] = None
    ) -> int:
        """Number of customers list_customers would return for the same filters"""
        customer_filter = build_customer_filter(search, address_count)
        query = build_count_query(customer_filter)

        try:
            async with get_db_pool().acquire() as conn:
                total = await conn.fetchval(query, *customer_filter.params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to count customers: {e}")
            raise StoreError("Failed to count customers.") from e

        return int(total or 0)

    # Addresses

    async def get_customer_addresses(self, customer_id: int) -> List[Dict[str, Any]]:
        if not is_row_id(customer_id):
            return []

        try:
            async with get_db_pool().acquire() as conn:
                rows = await conn.fetch(SELECT_CUSTOMER_ADDRESSES, customer_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to fetch addresses for customer {customer_id}: {e}")
            raise StoreError("Failed to fetch addresses.") from e

        return [dict(row) for row in rows]

    async def create_address(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create an address for the customer named in data['customer_id']"""
        validation.validate_new_address(data)
        return await self._insert_address(int(data["customer_id"]), data)

    async def add_customer_address(self, customer_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create an address for the customer in the URL"""
        validation.validate_address(data)
        return await self._insert_address(customer_id, data)

    async def _insert_address(self, customer_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        if not is_row_id(customer_id):
            raise NotFoundError("Customer not found.", field="customer_id")

        try:
            async with get_db_pool().acquire() as conn:
                row = await conn.fetchrow(INSERT_ADDRESS, customer_id, *_address_values(data))
        except asyncpg.ForeignKeyViolationError as e:
            logger.warning(f"Address rejected, customer {customer_id} does not exist: {e}")
            raise NotFoundError("Customer not found.", field="customer_id") from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to create address for customer {customer_id}: {e}")
            raise StoreError("Failed to create address.") from e

        logger.info(f"Created address {row['id']} for customer {customer_id}")
        return dict(row)

    async def update_address(self, address_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        validation.validate_address(data)
        if not is_row_id(address_id):
            raise NotFoundError("Address not found.")

        try:
            async with get_db_pool().acquire() as conn:
                row = await conn.fetchrow(UPDATE_ADDRESS, *_address_values(data), address_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to update address {address_id}: {e}")
            raise StoreError("Failed to update address.") from e

        if row is None:
            raise NotFoundError("Address not found.")

        logger.info(f"Updated address {address_id}")
        return dict(row)

    async def delete_address(self, address_id: int):
        if not is_row_id(address_id):
            raise NotFoundError("Address not found.")

        # Delete and inspect the row count; no separate existence check
        try:
            async with get_db_pool().acquire() as conn:
                status = await conn.execute(DELETE_ADDRESS, address_id)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Failed to delete address {address_id}: {e}")
            raise StoreError("Failed to delete address.") from e

        if affected_rows(status) == 0:
            raise NotFoundError("Address not found.")

        logger.info(f"Deleted address {address_id}")


# Global service instance
_customer_service = None

def get_customer_service() -> CustomerService:
    """Get the global customer service instance"""
    global _customer_service
    if _customer_service is None:
        _customer_service = CustomerService()
    return _customer_service
