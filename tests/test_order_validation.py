from datetime import date, datetime, time, timedelta

import pytest

from catering.errors import OrderValidationError
from catering.schemas import CreateOrderIn
from catering.services.orders import (
    bake_deadline,
    min_fulfillment_date,
    parse_time,
    production_deadline,
    validate_order,
)

TODAY = date(2026, 3, 1)  # a Sunday
FLAVORS = ["Cheese", "Spinach Artichoke", "Potato Leek"]


def payload(**overrides):
    data = {
        "customer_name": "Dana",
        "customer_email": "dana@example.com",
        "customer_phone": "212-555-0101",
        "fulfillment_type": "pickup",
        "pickup_date": "2026-03-05",
        "pickup_time": "2:00 PM",
        "order_data": {
            "items": [
                {"type": "big_box", "quantity": 2, "flavors": [{"name": "Cheese", "quantity": 8}]},
            ],
            "addons": [{"name": "Grated Tomato", "quantity": 1, "price_cents": 600}],
        },
    }
    data.update(overrides)
    return CreateOrderIn.model_validate(data)


def items(*item_list):
    return {"items": list(item_list), "addons": []}


def test_valid_pickup_order_values():
    values = validate_order(payload(), FLAVORS, today=TODAY)
    assert values["status"] == "pending"
    assert values["pickup_date"] == date(2026, 3, 5)
    assert values["delivery_fee"] == 0
    # 2 big boxes at the default price + one addon
    assert values["total_price"] == 2 * 7800 + 600
    assert values["order_data"]["items"][0]["price_cents"] == 7800
    assert values["production_deadline"] == date(2026, 3, 4)
    assert values["bake_deadline"] == datetime(2026, 3, 5, 13, 15)


def test_client_price_is_used_when_given():
    data = items({"type": "party_box", "quantity": 1, "price_cents": 20000,
                  "flavors": [{"name": "Cheese", "quantity": 40}]})
    values = validate_order(payload(order_data=data), FLAVORS, today=TODAY)
    assert values["total_price"] == 20000


@pytest.mark.parametrize("field", ["customer_name", "customer_email", "customer_phone"])
def test_missing_contact_field(field):
    with pytest.raises(OrderValidationError, match="required"):
        validate_order(payload(**{field: "  "}), FLAVORS, today=TODAY)


def test_unknown_fulfillment_type():
    with pytest.raises(OrderValidationError, match="fulfillment_type"):
        validate_order(payload(fulfillment_type="shipping"), FLAVORS, today=TODAY)


def test_lead_time_is_three_days_at_date_granularity():
    assert min_fulfillment_date(TODAY) == date(2026, 3, 4)
    validate_order(payload(pickup_date="2026-03-04"), FLAVORS, today=TODAY)
    with pytest.raises(OrderValidationError, match="72 hours"):
        validate_order(payload(pickup_date="2026-03-03"), FLAVORS, today=TODAY)


def test_missing_date():
    with pytest.raises(OrderValidationError, match="pickup_date"):
        validate_order(payload(pickup_date=None), FLAVORS, today=TODAY)


def test_delivery_requires_address():
    p = payload(fulfillment_type="delivery", pickup_date=None, pickup_time=None,
                delivery_date="2026-03-06", delivery_window_start="11:00")
    with pytest.raises(OrderValidationError, match="delivery_address"):
        validate_order(p, FLAVORS, today=TODAY)


def test_delivery_order_values():
    p = payload(fulfillment_type="delivery", pickup_date=None, pickup_time=None,
                delivery_date="2026-03-06", delivery_window_start="11:00", delivery_window_end="12:00",
                delivery_address="1 Main St")
    values = validate_order(p, FLAVORS, today=TODAY)
    assert values["delivery_date"] == date(2026, 3, 6)
    assert values["delivery_address"] == "1 Main St"
    assert values["bake_deadline"] == datetime(2026, 3, 6, 10, 15)
    assert "pickup_date" not in values


def test_unparseable_window_start():
    with pytest.raises(OrderValidationError, match="Invalid time"):
        validate_order(payload(pickup_time="sometime"), FLAVORS, today=TODAY)


def test_order_without_boxes():
    with pytest.raises(OrderValidationError, match="at least one box"):
        validate_order(payload(order_data={"items": [], "addons": []}), FLAVORS, today=TODAY)


def test_party_box_flavor_count():
    four = [{"name": n, "quantity": 10} for n in ("Cheese", "Spinach Artichoke", "Potato Leek", "Cheese")]
    data = items({"type": "party_box", "flavors": four})
    with pytest.raises(OrderValidationError, match="1-3 flavors"):
        validate_order(payload(order_data=data), FLAVORS, today=TODAY)


def test_big_box_allows_four_flavors():
    four = [{"name": n, "quantity": 2} for n in ("Cheese", "Spinach Artichoke", "Potato Leek", "Cheese")]
    validate_order(payload(order_data=items({"type": "big_box", "flavors": four})), FLAVORS, today=TODAY)


def test_box_pieces_must_add_up():
    data = items({"type": "party_box", "flavors": [{"name": "Cheese", "quantity": 39}]})
    with pytest.raises(OrderValidationError, match="exactly 40 pieces"):
        validate_order(payload(order_data=data), FLAVORS, today=TODAY)


@pytest.mark.parametrize("pieces", [7, 9])
def test_big_box_pieces_must_add_up(pieces):
    data = items({"type": "big_box", "flavors": [{"name": "Cheese", "quantity": pieces}]})
    with pytest.raises(OrderValidationError, match="exactly 8 pieces"):
        validate_order(payload(order_data=data), FLAVORS, today=TODAY)


def test_unknown_flavor():
    data = items({"type": "big_box", "flavors": [{"name": "Bacon", "quantity": 8}]})
    with pytest.raises(OrderValidationError, match='Flavor "Bacon" does not exist'):
        validate_order(payload(order_data=data), FLAVORS, today=TODAY)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2:00 PM", time(14, 0)),
        ("2 PM", time(14, 0)),
        ("2:00pm", time(14, 0)),
        ("14:00", time(14, 0)),
        ("12:30 AM", time(0, 30)),
        ("12 pm", time(12, 0)),
    ],
)
def test_parse_time_formats(value, expected):
    assert parse_time(value) == expected


@pytest.mark.parametrize("value", ["", "25:00", "13 PM", "noon", "2:75"])
def test_parse_time_rejects(value):
    with pytest.raises(OrderValidationError):
        parse_time(value)


def test_deadlines():
    d = date(2026, 3, 5)
    assert production_deadline(d) == d - timedelta(days=1)
    assert bake_deadline(d, "2:00 PM") == datetime(2026, 3, 5, 13, 15)
    # early window crosses midnight
    assert bake_deadline(d, "00:30") == datetime(2026, 3, 4, 23, 45)
