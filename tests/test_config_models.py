import pytest
from pydantic import ValidationError

from picklist.config import DetailItem, HealthResponse, ListItem, OrderStub, PickListOrder


def test_detail_item_defaults_to_unresolved_location():
    item = DetailItem(display_name="Blue Album")
    assert item.location == ""
    assert item.image_address == ""


def test_records_are_frozen():
    item = ListItem(display_name="Blue Album")
    with pytest.raises(ValidationError):
        item.display_name = "Red Single"


def test_order_stub_rejects_negative_count():
    with pytest.raises(ValidationError):
        OrderStub(order_number="1", detail_address="/sell/order/1", declared_item_count=-1)


def test_pick_list_order_counts_resolved_items():
    order = PickListOrder(order_number="1", items=[DetailItem(display_name="a"), DetailItem(display_name="a")])
    assert order.item_count == 2
    assert PickListOrder(order_number="2").item_count == 0


def test_health_response():
    health = HealthResponse(status="healthy")
    assert health.status == "healthy"
