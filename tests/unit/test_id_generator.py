"""Tests for transfer ID generation and UTC helpers."""

from datetime import UTC, datetime

import pytest

from src.fx_common.datetime_utils import isoformat_or_none, utc_now
from src.fx_common.id_generator import (
    SnowflakeIdGenerator,
    generate_transfer_id,
    is_valid_transfer_id,
)


class TestSnowflake:
    def test_monotonic(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = [gen.next_int() for _ in range(1000)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_machine_id_bounds(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)


class TestTransferId:
    def test_format(self) -> None:
        transfer_id = generate_transfer_id(datetime(2025, 9, 26, 22, 2, tzinfo=UTC))
        assert transfer_id.startswith("TRX-20250926-2202-")
        assert is_valid_transfer_id(transfer_id)

    def test_unique(self) -> None:
        assert generate_transfer_id() != generate_transfer_id()

    @pytest.mark.parametrize("value", ["TRX-2025-1", "trx-20250926-2202-1", "TRX-20250926-2202-"])
    def test_invalid(self, value: str) -> None:
        assert not is_valid_transfer_id(value)


class TestUtc:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_isoformat_or_none(self) -> None:
        assert isoformat_or_none(None) is None
        assert isoformat_or_none(datetime(2025, 1, 1, tzinfo=UTC)) == "2025-01-01T00:00:00+00:00"
