import pytest

from charity_api.errors import ValidationError
from charity_api.services.post_service import determine_post_type
from charity_api.utils.pagination import paginate, parse_pagination
from charity_api.utils.responses import camelize
from charity_api.utils.validation import Payload
from charity_api.validators.campaign import validate_campaign_create, validate_campaign_update
from charity_api.validators.post import validate_post_create, validate_share


def test_payload_collects_every_error():
    p = Payload({"name": 3, "age": "x"})
    p.string("name", required=True)
    p.number("age")
    p.email("email", required=True)

    with pytest.raises(ValidationError) as exc:
        p.raise_if_invalid()
    assert [e["field"] for e in exc.value.errors] == ["name", "age", "email"]
    assert exc.value.status == 400


def test_query_values_are_coerced():
    p = Payload({"page": "2", "isFeatured": "true", "tags": "a, b,,c"}, coerce=True)

    assert p.number("page") == 2
    assert p.boolean("isFeatured") is True
    assert p.string_list("tags") == ["a", "b", "c"]
    assert p.raise_if_invalid() == {"page": 2, "is_featured": True, "tags": ["a", "b", "c"]}


@pytest.mark.parametrize("raw", ["inf", "-Infinity", "nan", float("inf")])
def test_non_finite_numbers_are_refused(raw):
    p = Payload({"page": raw, "targetAmount": raw}, coerce=True)
    p.number("page")
    p.number("targetAmount", integer=False)

    with pytest.raises(ValidationError) as exc:
        p.raise_if_invalid()
    assert [e["field"] for e in exc.value.errors] == ["page", "targetAmount"]
    assert exc.value.errors[0]["message"] == "page must be a finite number"


def test_pagination_math():
    page, limit, offset = parse_pagination(Payload({"page": "4", "limit": "25"}, coerce=True))
    assert (page, limit, offset) == (4, 25, 75)

    result = paginate([1, 2], total=51, page=2, limit=25)
    assert result["pagination"] == {
        "current": 2,
        "page_size": 25,
        "total": 51,
        "total_pages": 3,
        "has_next": True,
        "has_prev": True,
    }


def test_camelize_nested_and_hidden():
    out = camelize({"user_name": "a", "password_hash": "x", "items": [{"likes_count": 1}]})

    assert out == {"userName": "a", "items": [{"likesCount": 1}]}


def test_campaign_create_maps_legacy_fields():
    values = validate_campaign_create(
        {
            "title": "Well",
            "description": "Water",
            "type": "normal",
            "fundingType": "flexible",
            "targetAmount": 2000,
            "image": "https://img.example.com/well.png",
            "milestones": [{"title": "Dig", "targetAmount": 2000, "durationDays": 14}],
        }
    )

    assert values["cover_image"] == "https://img.example.com/well.png"
    assert values["review_fee"] == 0
    assert values["milestones"] == [{"title": "Dig", "budget": 2000, "duration_days": 14}]


def test_campaign_create_target_bounds():
    with pytest.raises(ValidationError) as exc:
        validate_campaign_create(
            {"title": "t", "description": "d", "type": "normal", "fundingType": "fixed", "targetAmount": 10}
        )
    assert exc.value.errors[0]["field"] == "targetAmount"


def test_empty_update_is_refused():
    with pytest.raises(ValidationError):
        validate_campaign_update({})


def test_post_hashtags_are_normalized():
    values = validate_post_create({"content": {"text": "hi"}, "hashtags": ["#water", "relief", "#"]})

    assert values["hashtags"] == ["water", "relief"]
    assert values["content"] == {"text": "hi"}


def test_share_type_must_be_known():
    with pytest.raises(ValidationError):
        validate_share({"shareType": "retweet"})


@pytest.mark.parametrize(
    "content, expected",
    [
        ({"text": "hello"}, "text"),
        ({"images": [{"url": "a"}]}, "image"),
        ({"videos": [{"url": "v"}]}, "video"),
        ({"images": [{"url": "a"}], "videos": [{"url": "v"}]}, "mixed"),
        ({"text": "see", "links": [{"url": "l"}]}, "link"),
    ],
)
def test_post_type_derivation(content, expected):
    assert determine_post_type(content) == expected
