"""Tests for the level codec."""

import pytest

from orderbook_sim.datafeed.codec import decode_levels, decode_pair, decode_positional
from orderbook_sim.errors import LevelDecodeError, MessageDecodeError
from orderbook_sim.types import PriceLevel


class TestDecodePair:
    def test_two_tuple_is_padded(self):
        assert decode_pair(["100.5", "2"]) == PriceLevel("100.5", "2", "0", "0")

    def test_four_tuple_reserved_fields_replaced(self):
        assert decode_pair(["100.5", "2", "0", "7"]) == PriceLevel("100.5", "2", "0", "0")

    def test_numbers_become_strings(self):
        level = decode_pair([100, 2.5])
        assert level.price == "100"
        assert level.quantity == "2.5"

    def test_missing_quantity_fails(self):
        with pytest.raises(LevelDecodeError):
            decode_pair(["100.5"])

    def test_not_a_list_fails(self):
        with pytest.raises(LevelDecodeError):
            decode_pair("100.5")

    def test_unparseable_strings_pass_through(self):
        # numeric validation happens in the reconciler
        assert decode_pair(["abc", "2"]).price == "abc"


class TestDecodePositional:
    def test_deribit_triplet(self):
        assert decode_positional(["new", 65000.5, 1200]) == PriceLevel("65000.5", "1200", "0", "0")

    def test_delete_action_keeps_zero_amount(self):
        assert decode_positional(["delete", 65000, 0]).quantity == "0"

    def test_short_triplet_fails(self):
        with pytest.raises(LevelDecodeError):
            decode_positional(["new", 65000])

    def test_null_field_fails(self):
        with pytest.raises(LevelDecodeError):
            decode_positional(["new", None, 1])


class TestDecodeLevels:
    def test_none_is_empty(self):
        assert decode_levels(None) == []

    def test_one_bad_level_fails_batch(self):
        with pytest.raises(MessageDecodeError):
            decode_levels([["1", "2"], ["3"]])

    def test_positional_batch(self):
        levels = decode_levels([["new", 1, 2], ["change", 3, 4]], positional=True)
        assert [lvl.price for lvl in levels] == ["1", "3"]
