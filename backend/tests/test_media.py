import io
from unittest.mock import patch

from lp_builder.extensions import db
from lp_builder.models.media_image import MediaImage

PUBLIC_URL = "https://proj.supabase.co/storage/v1/object/public/images/1-2-cat.png"


def _upload(client, headers=None, filename="cat.png", content_type="image/png"):
    return client.post(
        "/api/v1/upload",
        data={"file": (io.BytesIO(b"\x89PNGdata"), filename, content_type)},
        content_type="multipart/form-data",
        headers=headers or {},
    )


@patch("lp_builder.clients.storage.upload_bytes", return_value=PUBLIC_URL)
def test_upload_stores_image_for_user(mock_upload, client, user):
    user_id, headers = user

    res = _upload(client, headers)

    assert res.status_code == 201
    body = res.get_json()
    assert body["filePath"] == PUBLIC_URL
    assert body["userId"] == user_id
    assert body["sourceType"] == "upload"
    assert body["fileSize"] == len(b"\x89PNGdata")
    mock_upload.assert_called_once_with(b"\x89PNGdata", "cat.png", "image/png")


@patch("lp_builder.clients.storage.upload_bytes", return_value=PUBLIC_URL)
def test_anonymous_upload_is_claimed_on_first_listing(mock_upload, client, user):
    user_id, headers = user

    assert _upload(client).status_code == 201
    assert MediaImage.query.one().user_id is None

    res = client.get("/api/v1/media", headers=headers)

    assert [m["userId"] for m in res.get_json()] == [user_id]


@patch("lp_builder.clients.storage.upload_bytes", return_value=PUBLIC_URL)
def test_upload_rejects_non_images(mock_upload, client, user):
    _, headers = user

    res = _upload(client, headers, filename="notes.txt", content_type="text/plain")

    assert res.status_code == 400
    mock_upload.assert_not_called()


def test_upload_requires_file(client, user):
    _, headers = user

    res = client.post("/api/v1/upload", data={}, content_type="multipart/form-data", headers=headers)

    assert res.status_code == 400


def test_upload_without_storage_config_is_unavailable(client, user):
    _, headers = user

    res = _upload(client, headers)

    assert res.status_code == 503


def test_media_unauthenticated_is_empty(client):
    assert client.get("/api/v1/media").get_json() == []


def test_media_lists_only_own_images(client, user, make_user):
    user_id, headers = user
    other_id, _ = make_user()
    db.session.add_all([
        MediaImage(user_id=user_id, file_path="https://cdn.test/mine.png", mime="image/png"),
        MediaImage(user_id=other_id, file_path="https://cdn.test/theirs.png", mime="image/png"),
    ])
    db.session.commit()

    res = client.get("/api/v1/media", headers=headers)

    assert [m["filePath"] for m in res.get_json()] == ["https://cdn.test/mine.png"]


def test_storage_helpers(app):
    from lp_builder.clients import storage

    assert storage.sanitize_filename("my cat (1).png") == "my_cat__1_.png"
    assert storage.path_from_public_url(PUBLIC_URL) == "1-2-cat.png"
    assert storage.path_from_public_url("https://elsewhere.test/x.png") is None


def _stored_image(user_id, url=PUBLIC_URL):
    image = MediaImage(user_id=user_id, file_path=url, mime="image/png")
    db.session.add(image)
    db.session.commit()
    return image


@patch("lp_builder.clients.storage.get_client")
def test_delete_media_removes_object_and_row(mock_client, client, user):
    user_id, headers = user
    image = _stored_image(user_id)
    image_id = image.id

    res = client.delete(f"/api/v1/media/{image_id}", headers=headers)

    assert res.status_code == 200
    assert db.session.get(MediaImage, image_id) is None
    mock_client.return_value.storage.from_.assert_called_with("images")
    mock_client.return_value.storage.from_.return_value.remove.assert_called_once_with(["1-2-cat.png"])


@patch("lp_builder.clients.storage.remove")
def test_delete_media_in_use_conflicts(mock_remove, client, user):
    user_id, headers = user
    image = _stored_image(user_id)
    client.post("/api/v1/pages", json={"sections": [{"imageId": image.id}]}, headers=headers)

    res = client.delete(f"/api/v1/media/{image.id}", headers=headers)

    assert res.status_code == 409
    mock_remove.assert_not_called()


@patch("lp_builder.clients.storage.remove")
def test_delete_media_of_another_user_is_forbidden(mock_remove, client, user, make_user):
    _, headers = user
    other_id, _ = make_user()
    image = _stored_image(other_id)

    assert client.delete(f"/api/v1/media/{image.id}", headers=headers).status_code == 403
    assert client.delete("/api/v1/media/unknown", headers=headers).status_code == 404
    mock_remove.assert_not_called()


@patch("lp_builder.clients.storage.get_client")
def test_remove_skips_urls_outside_the_bucket(mock_client, app):
    from lp_builder.clients import storage

    assert storage.remove("https://elsewhere.test/x.png") is False
    mock_client.assert_not_called()
