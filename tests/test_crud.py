# tests/test_crud.py
from carlot import crud


def _listing(**overrides):
    data = {
        "make": "Honda", "model": "Civic", "year": 2019, "price": 14000, "mileage": 40000,
        "condition": "Used - Good", "features": ["Bluetooth"], "images": ["https://x/a.png"],
        "description": "Reliable commuter",
    }
    data.update(overrides)
    return data


def test_create_and_get(db):
    obj = crud.create_listing(db, _listing())
    assert obj.id
    assert obj.created_at is not None
    fetched = crud.get_listing(db, obj.id)
    assert fetched.model == "Civic"
    assert fetched.images == ["https://x/a.png"]
    assert fetched.is_sold is False


def test_list_filters(db):
    crud.create_listing(db, _listing())
    crud.create_listing(db, _listing(make="BMW", model="X5", price=52000, condition="New",
                                     features=["Panoramic roof"]))
    crud.create_listing(db, _listing(make="BMW", model="320i", price=21000, is_sold=True))

    assert crud.list_listings(db, filters={"make": "BMW"})["total"] == 2
    assert crud.list_listings(db, filters={"min_price": 20000, "max_price": 30000})["total"] == 1
    assert crud.list_listings(db, filters={"condition": "New"})["items"][0].model == "X5"
    assert crud.list_listings(db, filters={"sold": False})["total"] == 2
    assert crud.list_listings(db, filters={"search": "panoramic"})["items"][0].model == "X5"
    assert len(crud.list_listings(db, skip=0, limit=2)["items"]) == 2


def test_update_and_delete_missing(db):
    assert crud.update_listing(db, "nope", {"price": 1}) is None
    assert crud.delete_listing(db, "nope") is False


def test_settings_upsert_merges(db):
    assert crud.get_settings(db) is None
    crud.upsert_settings(db, {"whatsapp_number": "+15550100"})
    obj = crud.upsert_settings(db, {"messenger_id": "dealer.page"})
    assert obj.whatsapp_number == "+15550100"
    assert obj.messenger_id == "dealer.page"
    assert obj.facebook_page_link is None


def test_reviews_testimonial_filter(db):
    r1 = crud.create_review(db, {"name": "Ann", "rating": 5, "comment": "Great service"})
    crud.create_review(db, {"name": "Bob", "rating": 2, "comment": "Slow paperwork"})
    assert crud.list_reviews(db) == []
    crud.set_review_testimonial(db, r1.id, True)
    assert [r.name for r in crud.list_reviews(db)] == ["Ann"]
    assert len(crud.list_reviews(db, testimonials_only=False)) == 2
