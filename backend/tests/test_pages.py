from email.utils import format_datetime
from datetime import timedelta

from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.media_image import MediaImage
from lp_builder.models.page import Page
from lp_builder.models.page_section import PageSection


def _image(user_id):
    image = MediaImage(user_id=user_id, file_path="https://cdn.test/a.png", mime="image/png")
    db.session.add(image)
    db.session.commit()
    return image


def _create(client, headers, **body):
    return client.post("/api/v1/pages", json=body, headers=headers)


def test_list_pages_unauthenticated_is_empty(client):
    res = client.get("/api/v1/pages")

    assert res.status_code == 200
    assert res.get_json() == []


def test_create_page_with_sections(client, user):
    user_id, headers = user
    image = _image(user_id)

    res = _create(client, headers, title="Spring sale", sections=[
        {"role": "hero", "imageId": image.id, "config": {"text": "Hi"}},
        {"role": "cta", "boundaryOffsetTop": 12},
    ])

    assert res.status_code == 201
    page = res.get_json()
    assert page["title"] == "Spring sale"
    assert page["status"] == "draft"
    assert page["slug"].startswith("page-")
    assert [s["order"] for s in page["sections"]] == [0, 1]
    assert page["sections"][0]["image"]["id"] == image.id
    assert page["sections"][0]["config"] == {"text": "Hi"}
    assert page["sections"][1]["boundaryOffsetTop"] == 12


def test_create_page_rejects_unknown_image(client, user):
    _, headers = user

    res = _create(client, headers, sections=[{"imageId": "missing"}])

    assert res.status_code == 400
    assert Page.query.count() == 0


def test_free_plan_page_limit(client, user):
    _, headers = user
    for _ in range(3):
        assert _create(client, headers).status_code == 201

    res = _create(client, headers)

    assert res.status_code == 402
    body = res.get_json()
    assert body["limit"] == 3
    assert body["current"] == 3
    assert body["allowed"] is False


def test_legacy_plan_needs_subscription(client, make_user):
    _, headers = make_user(plan="premium")

    res = _create(client, headers)

    assert res.status_code == 402
    assert res.get_json()["needSubscription"] is True


def test_other_users_page_is_forbidden(client, user, make_user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]
    _, other_headers = make_user()

    assert client.get(f"/api/v1/pages/{page_id}", headers=other_headers).status_code == 403
    assert client.get("/api/v1/pages/unknown", headers=headers).status_code == 404


def test_admin_can_read_any_page(client, user, admin):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]
    _, admin_headers = admin

    assert client.get(f"/api/v1/pages/{page_id}", headers=admin_headers).status_code == 200


def test_put_replaces_sections_in_order(client, user):
    _, headers = user
    page_id = _create(client, headers, sections=[{"role": "a"}, {"role": "b"}]).get_json()["id"]

    res = client.put(f"/api/v1/pages/{page_id}", json={
        "sections": [{"role": "x"}, {"role": "y"}, {"role": "z"}],
        "headerConfig": {"logo": "L"},
        "status": "published",
    }, headers=headers)

    assert res.status_code == 200
    page = res.get_json()["page"]
    assert [s["role"] for s in page["sections"]] == ["x", "y", "z"]
    assert [s["order"] for s in page["sections"]] == [0, 1, 2]
    assert page["headerConfig"] == {"logo": "L"}
    assert page["status"] == "published"
    assert PageSection.query.count() == 3


def test_put_requires_sections(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    res = client.put(f"/api/v1/pages/{page_id}", json={"status": "published"}, headers=headers)

    assert res.status_code == 400


def test_put_rejects_unknown_status(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    res = client.put(f"/api/v1/pages/{page_id}", json={"sections": [], "status": "archived"}, headers=headers)

    assert res.status_code == 400
    assert res.get_json()["error"] == "InvariantViolation"


def test_patch_updates_metadata(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    res = client.patch(f"/api/v1/pages/{page_id}", json={
        "title": "Renamed",
        "slug": "renamed-page",
        "isFavorite": True,
        "status": "published",
    }, headers=headers)

    assert res.status_code == 200
    page = res.get_json()["page"]
    assert page["title"] == "Renamed"
    assert page["slug"] == "renamed-page"
    assert page["isFavorite"] is True
    assert page["status"] == "published"


def test_patch_validates_slug_and_empty_body(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    assert client.patch(f"/api/v1/pages/{page_id}", json={"slug": "Bad Slug"}, headers=headers).status_code == 400
    assert client.patch(f"/api/v1/pages/{page_id}", json={"unknown": 1}, headers=headers).status_code == 400


def test_patch_with_stale_if_unmodified_since_conflicts(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]
    stale = format_datetime(utcnow() - timedelta(hours=1), usegmt=True)

    res = client.patch(
        f"/api/v1/pages/{page_id}",
        json={"title": "Late"},
        headers={**headers, "If-Unmodified-Since": stale},
    )

    assert res.status_code == 409


def test_patch_with_garbage_if_unmodified_since(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    res = client.patch(
        f"/api/v1/pages/{page_id}",
        json={"title": "x"},
        headers={**headers, "If-Unmodified-Since": "not a date"},
    )

    assert res.status_code == 400


def test_delete_page_removes_sections(client, user):
    _, headers = user
    page_id = _create(client, headers, sections=[{"role": "hero"}]).get_json()["id"]

    res = client.delete(f"/api/v1/pages/{page_id}", headers=headers)

    assert res.status_code == 200
    assert db.session.get(Page, page_id) is None
    assert PageSection.query.count() == 0


def test_list_pages_returns_own_pages_without_sections(client, user, make_user):
    _, headers = user
    _create(client, headers, title="Mine")
    _, other_headers = make_user()
    _create(client, other_headers, title="Theirs")

    res = client.get("/api/v1/pages", headers=headers)

    pages = res.get_json()
    assert [p["title"] for p in pages] == ["Mine"]
    assert "sections" not in pages[0]


def test_slug_with_trailing_newline_is_rejected(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]

    res = client.patch(f"/api/v1/pages/{page_id}", json={"slug": "my-page\n"}, headers=headers)

    assert res.status_code == 400
    assert db.session.get(Page, page_id).slug.startswith("page-")
    assert _create(client, headers, slug="x\n").status_code == 400


def test_slug_must_be_unique_across_users(client, user, make_user):
    _, headers = user
    _, other_headers = make_user()
    mine = _create(client, headers).get_json()["id"]
    theirs = _create(client, other_headers).get_json()["id"]

    assert client.patch(f"/api/v1/pages/{mine}", json={"slug": "same"}, headers=headers).status_code == 200
    res = client.patch(f"/api/v1/pages/{theirs}", json={"slug": "same"}, headers=other_headers)

    assert res.status_code == 409
    assert res.get_json()["error"] == "slug is already in use"
    assert _create(client, other_headers, slug="same").status_code == 409


def test_generated_slugs_do_not_collide(client, pro_user):
    _, headers = pro_user

    slugs = {_create(client, headers).get_json()["slug"] for _ in range(5)}

    assert len(slugs) == 5


def test_wrongly_typed_fields_are_bad_requests(client, user):
    _, headers = user
    page_id = _create(client, headers).get_json()["id"]
    url = f"/api/v1/pages/{page_id}"

    assert client.patch(url, json={"status": ["published"]}, headers=headers).status_code == 400
    assert client.put(url, json={"sections": [], "status": ["published"]}, headers=headers).status_code == 400
    assert client.put(url, json={"sections": [{"role": {"x": 1}}]}, headers=headers).status_code == 400
    assert _create(client, headers, sections=[{"imageId": {"x": 1}}]).status_code == 400
    assert _create(client, headers, title=["t"]).status_code == 400


def test_sections_cannot_use_another_users_image(client, user, make_user):
    _, headers = user
    other_id, _ = make_user()
    theirs = _image(other_id)

    res = _create(client, headers, sections=[{"role": "hero", "imageId": theirs.id}])

    assert res.status_code == 400
    assert Page.query.count() == 0


def test_saving_keeps_images_the_page_already_shows(client, user, admin):
    user_id, headers = user
    admin_id, _ = admin
    shared = _image(admin_id)
    page = Page(user_id=user_id, title="From template", slug="from-template")
    page.sections.append(PageSection(role="hero", order=0, image_id=shared.id))
    db.session.add(page)
    db.session.commit()

    res = client.put(
        f"/api/v1/pages/{page.id}",
        json={"sections": [{"role": "hero", "imageId": shared.id}, {"role": "cta"}]},
        headers=headers,
    )

    assert res.status_code == 200
    assert res.get_json()["page"]["sections"][0]["imageId"] == shared.id
