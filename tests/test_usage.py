import pytest

from komcp.kom.usage import (
    ResourceUsageFraction,
    ResourceUsageResult,
    ResourceUsageRow,
    to_table_data,
)
from komcp.utils.quantity import format_resource, parse_quantity


def _result():
    return ResourceUsageResult(
        requests={"cpu": parse_quantity("500m"), "memory": parse_quantity("1Gi")},
        limits={"cpu": parse_quantity("2"), "memory": parse_quantity("2Gi")},
        allocatable={"cpu": parse_quantity("4"), "memory": parse_quantity("8Gi")},
        usage_fractions={
            "cpu": ResourceUsageFraction(request_fraction=12.5, limit_fraction=50.0),
            "memory": ResourceUsageFraction(request_fraction=12.5, limit_fraction=25.0),
        },
    )


def test_none_result_raises():
    with pytest.raises(ValueError):
        to_table_data(None)


def test_rows_in_fixed_order():
    rows = to_table_data(_result())
    assert [r.resource_type for r in rows] == ["cpu", "memory", "ephemeral-storage"]


def test_row_values_are_formatted():
    result = _result()
    memory = to_table_data(result)[1]
    assert memory.total == format_resource(result.allocatable["memory"])
    assert memory.request == format_resource(result.requests["memory"])
    assert memory.limit == format_resource(result.limits["memory"])
    assert float(memory.request_fraction) == 12.5
    assert float(memory.limit_fraction) == 25.0


def test_fraction_has_two_decimals():
    cpu = to_table_data(_result())[0]
    assert cpu.request_fraction.split(".")[1] == "50"
    assert len(cpu.limit_fraction.split(".")[1]) == 2


def test_missing_resource_defaults_to_zero():
    storage = to_table_data(_result())[2]
    assert storage.total == "0"
    assert storage.request == storage.limit == storage.total
    assert float(storage.request_fraction) == 0.0


def test_row_as_dict_uses_json_names():
    row = to_table_data(_result())[0]
    data = row.as_dict()
    assert set(data) == {"resourceType", "total", "request", "requestFraction", "limit", "limitFraction"}
    assert data["resourceType"] == row.resource_type
    assert isinstance(row, ResourceUsageRow)