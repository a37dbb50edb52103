import pytest
import requests

from catering.models.email import EmailSetting, EmailTemplate
from catering.models.order import Order
from catering.notify import dispatcher
from catering.notify.dispatcher import PLACEHOLDER_RE, PLACEHOLDERS, format_price, substitute
from catering.notify.email_notify import EmailMessage, EmailNotifier


def test_substitute_known_and_unknown_names():
    text = "Hi {{customer_name}}, order #{{ order_id }} {{secret_key}}{{total}}"
    out = substitute(text, {"customer_name": "Dana", "order_id": "7"})
    assert out == "Hi Dana, order #7 "


def test_format_price():
    assert format_price(31900) == "$319.00"
    assert format_price(123456) == "$1,234.56"
    assert format_price(None) == "$0.00"


def test_default_templates_leave_no_markers(create_order, db):
    order = db.get(Order, create_order())
    values = dispatcher.order_values(order, production_sheet="<p>sheet</p>")
    assert set(values) == set(PLACEHOLDERS)
    for tpl in dispatcher.DEFAULT_TEMPLATES.values():
        for part in tpl.values():
            assert not PLACEHOLDER_RE.search(substitute(part, values))


def test_disabled_trigger_sends_nothing(create_order, db):
    order = db.get(Order, create_order())
    db.get(EmailSetting, "order_approved").enabled = False
    db.commit()
    assert dispatcher.prepare(db, "order_approved", order) == []


def test_custom_recipients(create_order, db):
    order = db.get(Order, create_order())
    db.get(EmailSetting, "order_paid").recipients = "a@example.com, b@example.com"
    db.commit()
    messages = dispatcher.prepare(db, "order_paid", order)
    assert messages[0].to == ["a@example.com", "b@example.com"]


def test_kitchen_fallback_recipient(create_order, db):
    order = db.get(Order, create_order())
    staff = dispatcher.prepare(db, "order_paid", order)[0]
    assert staff.to == ["kitchen@example.com"]


def test_no_customer_copy_without_customer_template(create_order, db):
    order = db.get(Order, create_order())
    messages = dispatcher.prepare(db, "production_done", order)
    assert len(messages) == 1
    assert messages[0].to == ["admin@example.com"]


def test_items_html_lists_flavors(create_order, db):
    order = db.get(Order, create_order())
    values = dispatcher.order_values(order)
    assert "Cheese" in values["items_html"]
    assert "Extra Spicy Schug" in values["addons_html"]
    assert values["total"] == "$319.00"


def test_dispatch_swallows_template_errors(create_order, db, monkeypatch, outbox):
    order = db.get(Order, create_order())
    outbox.clear()

    def broken(*args, **kwargs):
        raise RuntimeError("bad template")

    monkeypatch.setattr(dispatcher, "order_values", broken)
    assert dispatcher.dispatch(None, db, "order_approved", order) == 0
    assert outbox == []


# ---------- notifier ----------
class FakeResponse:
    def __init__(self, status):
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


def test_notifier_posts_to_provider(monkeypatch):
    calls = []

    def fake_post(url, headers, json, timeout):
        calls.append((url, headers, json))
        return FakeResponse(200)

    monkeypatch.setattr(requests, "post", fake_post)
    n = EmailNotifier(api_key="k", sender="Shop <shop@example.com>", api_url="https://mail.test/emails")
    assert n.send(EmailMessage(to=["x@example.com"], subject="Hi", html="<p>Hi</p>")) is True
    url, headers, body = calls[0]
    assert url == "https://mail.test/emails"
    assert headers["Authorization"] == "Bearer k"
    assert body == {"from": "Shop <shop@example.com>", "to": ["x@example.com"], "subject": "Hi", "html": "<p>Hi</p>"}


def test_notifier_without_key_skips():
    n = EmailNotifier(api_key="", sender="s")
    assert n.send(EmailMessage(to=["x@example.com"], subject="Hi", html="")) is False


def test_deliver_counts_and_logs_failures(monkeypatch, caplog):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(500))
    n = EmailNotifier(api_key="k", sender="s")
    msgs = [EmailMessage(to=["x@example.com"], subject="Hi", html="", trigger="new_order")]
    assert n.deliver(msgs) == 0
    assert "Failed to send new_order email" in caplog.text


# ---------- admin API ----------
def test_settings_api(admin):
    settings = admin.get("/email-settings").json()
    assert len(settings) == 9
    resp = admin.put("/email-settings", json=[{"trigger_name": "new_order", "enabled": False, "recipients": ""}])
    assert resp.json() == {"success": True}
    by_name = {s["trigger_name"]: s for s in admin.get("/email-settings").json()}
    assert by_name["new_order"]["enabled"] is False
    assert admin.put("/email-settings", json=[{"trigger_name": "bogus", "enabled": True}]).status_code == 400


def test_templates_api(admin, db):
    resp = admin.put("/email-templates", json={
        "trigger_name": "order_completed",
        "subject": "Done #{{order_id}}",
        "body_html": "<p>done</p>",
    })
    assert resp.status_code == 200
    template = db.get(EmailTemplate, "order_completed")
    assert template.subject == "Done #{{order_id}}"
    assert template.customer_subject == ""


def test_email_test(admin, outbox):
    assert admin.post("/email-test", json={"to": "", "trigger_name": "new_order"}).status_code == 400
    assert admin.post("/email-test", json={"to": "me@example.com", "trigger_name": "nope"}).status_code == 404

    resp = admin.post("/email-test", json={"to": "me@example.com", "trigger_name": "new_order"})
    assert resp.status_code == 200
    assert all(m.to == ["me@example.com"] for m in outbox)
    assert all(m.subject.startswith("[TEST] ") for m in outbox)
    assert "Sample Customer" in outbox[0].subject


@pytest.mark.parametrize("path", ["/email-settings", "/email-templates"])
def test_email_admin_requires_login(client, path):
    assert client.get(path).status_code == 401


def test_customer_text_is_escaped_in_email_bodies(create_order, order_payload, db, outbox):
    outbox.clear()
    order_id = create_order(
        customer_name='<a href="http://evil.test">Pay here</a>',
        fulfillment_type="delivery", pickup_date=None, pickup_time=None,
        delivery_date=order_payload()["pickup_date"], delivery_window_start="11:00",
        delivery_address="<b>1 Main St</b>",
    )
    staff = outbox[0]
    assert '<a href="http://evil.test">' not in staff.html
    assert "&lt;a href=&#34;http://evil.test&#34;&gt;Pay here&lt;/a&gt;" in staff.html
    assert "&lt;b&gt;1 Main St&lt;/b&gt;" in staff.html
    # rendered parts stay HTML
    assert "<strong>Customer:</strong>" in staff.html
    assert "Cheese" in staff.html
    # subjects are plain text
    assert staff.subject == f'New Catering Request #{order_id} - <a href="http://evil.test">Pay here</a>'


def test_substitute_html_escapes_plain_values_only():
    values = {"customer_name": "Tom & Jerry", "items_html": "<ul><li>Cheese</li></ul>"}
    out = substitute("{{customer_name}}{{items_html}}", values, html=True)
    assert out == "Tom &amp; Jerry<ul><li>Cheese</li></ul>"
