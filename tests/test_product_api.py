"""
HTTP-level tests for the product routes.
"""

import base64
import os

from app.core.config import settings

PREFIX = settings.api_prefix

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)


async def create_product(client, author_id, **fields):
    payload = {
        "name": "Canvas Tote",
        "description": "A roomy bag",
        "image": ["https://cdn.example.com/tote.png"],
        "author": author_id,
    }
    payload.update(fields)
    response = await client.post(f"{PREFIX}/create-product", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_create_product_returns_defaults(client, author):
    product = await create_product(client, author.id)

    assert product["id"]
    assert product["category"] == "general"
    assert product["price"] == 0
    assert product["quantity"] == 1
    assert product["image"] == ["https://cdn.example.com/tote.png"]


async def test_create_product_missing_fields(client, author):
    response = await client.post(f"{PREFIX}/create-product", json={"name": "Tote", "author": author.id})

    assert response.status_code == 400
    body = response.json()
    assert "description" in body["message"]
    assert "image" in body["message"]

    listing = await client.get(f"{PREFIX}/")
    assert listing.json()["totalProducts"] == 0


async def test_create_product_wrong_types(client, author):
    response = await client.post(
        f"{PREFIX}/create-product",
        json={"name": "Tote", "description": "Bag", "image": "not-a-list", "author": author.id},
    )
    assert response.status_code == 400
    assert "image" in response.json()["message"]


async def test_list_products_shape_and_pagination(client, author):
    for i in range(3):
        await create_product(client, author.id, name=f"Tote {i}", price=10 + i)

    response = await client.get(f"{PREFIX}/", params={"page": "2", "limit": "2"})

    assert response.status_code == 200
    body = response.json()
    assert body["totalProducts"] == 3
    assert body["totalPages"] == 2
    assert len(body["products"]) == 1
    assert body["products"][0]["author"] == {"id": author.id, "email": author.email}


async def test_list_products_price_range_and_garbage_paging(client, author):
    for price in (5, 15, 25):
        await create_product(client, author.id, name=f"Tote {price}", price=price)

    response = await client.get(
        f"{PREFIX}/", params={"minPrice": "10", "maxPrice": "30", "page": "abc", "limit": "ten"}
    )

    body = response.json()
    assert body["totalProducts"] == 2
    assert body["totalPages"] == 1
    assert {p["price"] for p in body["products"]} == {15, 25}


async def test_get_product_with_reviews(client, author, reviewer, add_review):
    product = await create_product(client, author.id)
    review = await add_review(product["id"], reviewer.id, comment="Sturdy")

    response = await client.get(f"{PREFIX}/{product['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["product"]["author"]["username"] == author.username
    assert [r["id"] for r in body["reviews"]] == [review.id]
    assert body["reviews"][0]["user"]["email"] == reviewer.email


async def test_get_missing_product(client):
    response = await client.get(f"{PREFIX}/missing")
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"


async def test_update_requires_token(client, author):
    product = await create_product(client, author.id)

    response = await client.patch(f"{PREFIX}/update-product/{product['id']}", json={"price": 9})
    assert response.status_code in (401, 403)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        json={"price": 9},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


async def test_update_requires_admin(client, author, user_headers):
    product = await create_product(client, author.id)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}", json={"price": 9}, headers=user_headers
    )

    assert response.status_code == 403


async def test_update_with_json(client, author, admin_headers):
    product = await create_product(client, author.id)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        json={"price": 19.99, "color": "green"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Product updated successfully"
    assert body["product"]["price"] == 19.99
    assert body["product"]["color"] == "green"
    assert body["product"]["name"] == product["name"]


async def test_update_with_uploaded_image(client, author, admin_headers):
    product = await create_product(client, author.id)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        data={"quantity": "4"},
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    updated = response.json()["product"]
    assert updated["quantity"] == 4
    assert len(updated["image"]) == 1
    location = updated["image"][0]
    assert location.endswith(".png")
    assert os.path.basename(location).startswith("image-")
    assert os.path.exists(os.path.join(settings.upload_dir, os.path.basename(location)))


async def test_update_rejects_non_image_upload(client, author, admin_headers):
    product = await create_product(client, author.id)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )

    assert response.status_code == 400


async def test_update_invalid_values(client, author, admin_headers):
    product = await create_product(client, author.id)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}", json={"quantity": "many"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert "quantity" in response.json()["message"]

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}", json={"image": []}, headers=admin_headers
    )
    assert response.status_code == 400


async def test_update_missing_product(client, admin_headers):
    response = await client.patch(f"{PREFIX}/update-product/missing", json={"price": 1}, headers=admin_headers)
    assert response.status_code == 404


async def test_delete_product_cascades(client, author, reviewer, add_review):
    product = await create_product(client, author.id)
    await add_review(product["id"], reviewer.id)

    response = await client.delete(f"{PREFIX}/{product['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Product deleted successfully"}

    assert (await client.get(f"{PREFIX}/{product['id']}")).status_code == 404
    assert (await client.delete(f"{PREFIX}/{product['id']}")).status_code == 404


async def test_related_products(client, author):
    target = await create_product(client, author.id, name="Red Shoes Size 10", category="footwear")
    blue = await create_product(client, author.id, name="Blue Shoes", category="apparel")
    hat = await create_product(client, author.id, name="Hat", category="footwear")
    await create_product(client, author.id, name="Teapot", category="kitchen")

    response = await client.get(f"{PREFIX}/related/{target['id']}")

    assert response.status_code == 200
    assert {p["id"] for p in response.json()} == {blue["id"], hat["id"]}


async def test_related_products_errors(client):
    assert (await client.get(f"{PREFIX}/related/")).status_code == 400
    assert (await client.get(f"{PREFIX}/related/unknown")).status_code == 404


async def test_upload_images(client):
    data_uri = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    response = await client.post(
        f"{PREFIX}/uploadImages",
        json={"images": ["https://cdn.example.com/a.jpg", data_uri]},
    )

    assert response.status_code == 200
    locations = response.json()
    assert locations[0] == "https://cdn.example.com/a.jpg"
    assert locations[1].endswith(".png")
    assert os.path.exists(os.path.join(settings.upload_dir, os.path.basename(locations[1])))


async def test_upload_images_rejects_bad_bodies(client):
    assert (await client.post(f"{PREFIX}/uploadImages", json={})).status_code == 400
    assert (await client.post(f"{PREFIX}/uploadImages", json={"images": "x"})).status_code == 400
    response = await client.post(
        f"{PREFIX}/uploadImages",
        json={"images": ["data:text/plain;base64," + base64.b64encode(b"hi").decode()]},
    )
    assert response.status_code == 400
    response = await client.post(f"{PREFIX}/uploadImages", json={"images": ["not an image"]})
    assert response.status_code == 400


async def test_update_rejects_tampered_token(client, author, admin_headers):
    product = await create_product(client, author.id)
    token = admin_headers["Authorization"].split(" ", 1)[1].rsplit(".", 1)[0] + ".tampered"

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        json={"price": 3},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


def stored_files():
    if not os.path.isdir(settings.upload_dir):
        return set()
    return set(os.listdir(settings.upload_dir))


async def test_list_products_limit_above_maximum_is_rejected(client, author, monkeypatch):
    monkeypatch.setattr(settings, "max_page_size", 2)
    for i in range(3):
        await create_product(client, author.id, name=f"Tote {i}")

    response = await client.get(f"{PREFIX}/", params={"limit": "3"})
    assert response.status_code == 400
    assert "limit" in response.json()["message"]

    response = await client.get(f"{PREFIX}/", params={"limit": "2"})
    body = response.json()
    assert len(body["products"]) == 2
    assert body["totalPages"] == 2


async def test_update_missing_product_does_not_store_upload(client, admin_headers):
    before = stored_files()

    response = await client.patch(
        f"{PREFIX}/update-product/missing",
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert stored_files() == before


async def test_update_invalid_payload_does_not_store_upload(client, author, admin_headers):
    product = await create_product(client, author.id)
    before = stored_files()

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        data={"quantity": "many"},
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        data={"price": "-3"},
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert stored_files() == before


async def test_update_rejects_null_for_non_nullable_fields(client, author, admin_headers):
    product = await create_product(client, author.id, price=5)

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        json={"price": None, "color": None},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert "price" in response.json()["message"]
    detail = (await client.get(f"{PREFIX}/{product['id']}")).json()
    assert detail["product"]["price"] == 5


async def test_update_null_color_clears_it(client, author, admin_headers):
    product = await create_product(client, author.id, color="red")

    response = await client.patch(
        f"{PREFIX}/update-product/{product['id']}",
        json={"color": None},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["product"]["color"] is None


async def test_upload_empty_image_list(client):
    response = await client.post(f"{PREFIX}/uploadImages", json={"images": []})

    assert response.status_code == 200
    assert response.json() == []
