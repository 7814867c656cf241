from lp_builder.extensions import db
from lp_builder.models.form_submission import FormSubmission
from lp_builder.models.page import Page

URL = "/api/v1/form-submissions"
FIELDS = [
    {"fieldName": "full_name", "fieldLabel": "Your name", "value": "Hanako"},
    {"fieldName": "contact", "fieldLabel": "Email address", "value": "hanako@example.com"},
    {"fieldName": "message", "fieldLabel": "Message", "value": "Hello"},
]


def _page(user_id, slug="landing", status="published"):
    page = Page(user_id=user_id, title="Landing", slug=slug, status=status)
    db.session.add(page)
    db.session.commit()
    return page


def test_visitor_submits_form(client, user):
    user_id, _ = user
    page = _page(user_id)

    res = client.post(URL, json={"pageSlug": "landing", "formFields": FIELDS})

    assert res.status_code == 201
    assert res.get_json()["success"] is True
    submission = FormSubmission.query.one()
    assert submission.page_id == page.id
    assert submission.form_title == "Contact"
    assert submission.sender_email == "hanako@example.com"
    assert submission.sender_name == "Hanako"


def test_japanese_labels_identify_the_sender(client, user):
    user_id, _ = user
    _page(user_id)

    client.post(URL, json={"pageSlug": "landing", "formTitle": "お問い合わせ", "formFields": [
        {"fieldName": "f1", "fieldLabel": "お名前", "value": "花子"},
        {"fieldName": "f2", "fieldLabel": "メールアドレス", "value": "hanako@example.jp"},
    ]})

    submission = FormSubmission.query.one()
    assert (submission.sender_name, submission.sender_email) == ("花子", "hanako@example.jp")
    assert submission.form_title == "お問い合わせ"


def test_submission_validation(client, user):
    user_id, _ = user
    _page(user_id)
    _page(user_id, slug="draft", status="draft")

    assert client.post(URL, json={"formFields": FIELDS}).status_code == 400
    assert client.post(URL, json={"pageSlug": "landing", "formFields": []}).status_code == 400
    assert client.post(URL, json={"pageSlug": "landing", "formFields": [{"fieldName": 1}]}).status_code == 400
    assert client.post(URL, json={"pageSlug": "missing", "formFields": FIELDS}).status_code == 404
    assert client.post(URL, json={"pageSlug": "draft", "formFields": FIELDS}).status_code == 404
    assert FormSubmission.query.count() == 0


def test_owner_lists_submissions_to_own_pages(client, user, make_user, admin):
    user_id, headers = user
    other_id, other_headers = make_user()
    _, admin_headers = admin
    mine = _page(user_id)
    _page(other_id, slug="theirs")
    client.post(URL, json={"pageSlug": "landing", "formFields": FIELDS})
    client.post(URL, json={"pageSlug": "theirs", "formFields": FIELDS})

    res = client.get(URL, headers=headers)
    assert [s["pageSlug"] for s in res.get_json()] == ["landing"]
    assert res.get_json()[0]["fields"] == FIELDS

    assert len(client.get(URL, headers=admin_headers).get_json()) == 2
    assert len(client.get(f"{URL}?pageId={mine.id}", headers=headers).get_json()) == 1
    assert client.get(f"{URL}?pageId={mine.id}", headers=other_headers).status_code == 403
    assert client.get(URL).status_code == 401


def test_deleting_page_removes_its_submissions(client, user):
    user_id, headers = user
    page = _page(user_id)
    client.post(URL, json={"pageSlug": "landing", "formFields": FIELDS})

    assert client.delete(f"/api/v1/pages/{page.id}", headers=headers).status_code == 200
    assert FormSubmission.query.count() == 0
