"""
Filter building and row aggregation for customer listings
"""

import json

import pytest

from models.customer import AddressCountFilter
from services.customer_service import (
    aggregate_customer_row,
    build_count_query,
    build_customer_filter,
    build_list_query,
    escape_like,
)


class TestBuildCustomerFilter:

    def test_no_filters(self):
        customer_filter = build_customer_filter()
        assert customer_filter.where == ""
        assert customer_filter.having == ""
        assert customer_filter.params == []

    @pytest.mark.parametrize("search", [None, "", "   "])
    def test_blank_search_adds_nothing(self, search):
        assert build_customer_filter(search).params == []

    def test_search_is_one_parameter_used_for_every_column(self):
        customer_filter = build_customer_filter("  pune ")
        assert customer_filter.params == ["%pune%"]
        for column in ("c.first_name", "c.last_name", "c.phone_number",
                       "s.address_details", "s.city", "s.state", "s.pin_code"):
            assert f"{column} ILIKE $1" in customer_filter.where
        assert "EXISTS" in customer_filter.where

    def test_like_wildcards_are_escaped(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
        assert build_customer_filter("100%").params == ["%100\\%%"]

    @pytest.mark.parametrize("address_count,having", [
        (AddressCountFilter.SINGLE, "HAVING COUNT(a.id) = 1"),
        (AddressCountFilter.MULTIPLE, "HAVING COUNT(a.id) > 1"),
    ])
    def test_address_count(self, address_count, having):
        assert build_customer_filter(address_count=address_count).having == having

    def test_list_and_count_share_the_filter(self):
        customer_filter = build_customer_filter("rao", AddressCountFilter.MULTIPLE)
        list_query = build_list_query(customer_filter)
        count_query = build_count_query(customer_filter)

        for query in (list_query, count_query):
            assert customer_filter.where in query
            assert "GROUP BY c.id HAVING COUNT(a.id) > 1" in query
        assert list_query.rstrip().endswith("ORDER BY c.id DESC")
        assert count_query.rstrip().endswith("AS filtered_customers")


class TestAddressCountFilterParse:

    @pytest.mark.parametrize("value,expected", [
        ("single", AddressCountFilter.SINGLE),
        ("MULTIPLE", AddressCountFilter.MULTIPLE),
        (None, None),
        ("", None),
        ("all", None),
    ])
    def test_parse(self, value, expected):
        assert AddressCountFilter.parse(value) is expected


class TestAggregateCustomerRow:

    def test_decodes_json_text(self):
        row = {
            "id": 3, "first_name": "A", "last_name": "B", "phone_number": "1234567890",
            "address_count": 1,
            "addresses": json.dumps([{"id": 9, "customer_id": 3, "address_details": "X",
                                      "city": "Y", "state": "Z", "pin_code": "123456"}]),
        }
        customer = aggregate_customer_row(row)
        assert customer["addresses"][0]["id"] == 9
        assert customer["address_count"] == 1

    @pytest.mark.parametrize("addresses", [None, "[]", "[null]", []])
    def test_no_addresses_is_an_empty_list(self, addresses):
        customer = aggregate_customer_row({"id": 1, "address_count": 0, "addresses": addresses})
        assert customer["addresses"] == []
        assert customer["address_count"] == 0
