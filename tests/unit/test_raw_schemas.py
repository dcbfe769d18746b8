from __future__ import annotations

import pytest
from pydantic import ValidationError

from valuninja.agents.schemas import RawAnalysis, RawAttribute, RawProduct, RawProductBatch, coerce_number
from valuninja.models.analysis import AttributeType


@pytest.mark.parametrize(
    ("value", "expected"),
    [(199, 199.0), ("$1,299.99", 1299.99), ("CAD 45", 45.0), ("n/a", None), (None, None), (True, None)],
)
def test_coerce_number(value, expected) -> None:
    assert coerce_number(value) == expected


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("NUMBER", AttributeType.NUMBER),
        ("boolean", AttributeType.BOOLEAN),
        ("STRING", AttributeType.STRING),
        ("SELECT", AttributeType.STRING),
        ("range", AttributeType.STRING),
        (None, AttributeType.STRING),
    ],
)
def test_attribute_type_is_closed(declared, expected) -> None:
    assert RawAttribute(key="k", type=declared).type is expected


def test_attribute_requires_key() -> None:
    with pytest.raises(ValidationError):
        RawAttribute(key="  ", label="Size")


def test_attribute_tracks_explicit_default() -> None:
    assert RawAttribute(key="wifi", defaultValue=None).has_default is True
    assert RawAttribute(key="wifi").has_default is False


def test_analysis_tolerates_nulls_and_caps_ad_units() -> None:
    raw = RawAnalysis.model_validate(
        {
            "attributes": None,
            "suggestions": ["quiet", None, 3],
            "priceRange": "cheap",
            "adUnits": [{"brand": "A", "headline": None}] * 6,
        }
    )

    assert raw.attributes == []
    assert raw.suggestions == ["quiet", "3"]
    assert raw.priceRange is None
    assert len(raw.adUnits) == 4
    assert raw.adUnits[0].headline == ""


def test_analysis_drops_attributes_without_a_key() -> None:
    raw = RawAnalysis.model_validate(
        {
            "attributes": [
                {"key": "size", "type": "NUMBER", "defaultValue": 10},
                {"label": "Colour"},
                {"key": "  ", "label": "Blank"},
                "wifi",
            ]
        }
    )

    assert [attribute.key for attribute in raw.attributes] == ["size"]


@pytest.mark.parametrize(
    ("payload", "suggestions"),
    [
        ({"suggestions": "compact models"}, ["compact models"]),
        ({"suggestions": {"first": "compact"}}, []),
        ({"suggestions": 7}, []),
    ],
)
def test_analysis_suggestions_fall_back_to_a_list(payload, suggestions) -> None:
    assert RawAnalysis.model_validate(payload).suggestions == suggestions


def test_analysis_non_list_collections_become_empty() -> None:
    raw = RawAnalysis.model_validate({"attributes": {"key": "size"}, "adUnits": "none"})

    assert raw.attributes == []
    assert raw.adUnits == []


def test_product_defaults_for_loose_fields() -> None:
    product = RawProduct.model_validate(
        {
            "brand": " Dyson ",
            "name": "V15",
            "price": "$749.99",
            "specs": "not a map",
            "pros": "light",
            "cons": None,
            "valueScore": 0,
        }
    )

    assert product.brand == "Dyson"
    assert product.price == 749.99
    assert product.specs == {}
    assert product.pros == []
    assert product.cons == []
    assert product.valueScore is None


def test_partial_breakdown_is_filled_with_neutral_scores() -> None:
    product = RawProduct.model_validate({"valueBreakdown": {"performance": 9, "mood": 2, "longevity": "8"}})

    breakdown = product.breakdown().model_dump()

    assert breakdown["performance"] == 9
    assert breakdown["longevity"] == 8
    assert "mood" not in breakdown
    assert all(value == 7 for key, value in breakdown.items() if key not in {"performance", "longevity"})
    assert len(breakdown) == 10


def test_specs_keep_scalars_and_stringify_the_rest() -> None:
    product = RawProduct.model_validate({"specs": {"Weight": 1.2, "Ports": ["HDMI", "USB-C"], "Color": None}})

    assert product.specs == {"Weight": 1.2, "Ports": "['HDMI', 'USB-C']"}


def test_batch_requires_product_list() -> None:
    with pytest.raises(ValidationError):
        RawProductBatch.model_validate({"summary": "x", "products": {"name": "solo"}})
    with pytest.raises(ValidationError):
        RawProductBatch.model_validate({"products": ["just a string"]})
