from lp_builder.application import credits
from lp_builder.models.subscription import Subscription
from lp_builder.models.user_settings import UserSettings


def test_upgrade_free_users_command(app, make_user):
    free_id, _ = make_user()
    lapsed_id, _ = make_user()
    starter_id, _ = make_user(plan="starter")
    credits.update_subscription(lapsed_id, stripe_customer_id="cus_lapsed", plan="starter", status="canceled")

    result = app.test_cli_runner().invoke(args=["upgrade-free-users"])

    assert result.exit_code == 0
    assert "Upgraded 2 user(s) to pro" in result.output

    plans = {s.user_id: s.plan for s in UserSettings.query.all()}
    assert plans == {free_id: "pro", lapsed_id: "pro", starter_id: "starter"}

    manual = Subscription.query.filter_by(user_id=free_id).one()
    assert manual.stripe_customer_id == f"manual_upgrade_{free_id}"
    assert manual.status == "active"
    assert (manual.current_period_end - manual.current_period_start).days == 365

    lapsed = Subscription.query.filter_by(user_id=lapsed_id).one()
    assert (lapsed.plan, lapsed.status) == ("pro", "active")
    assert lapsed.stripe_customer_id == "cus_lapsed"


def test_upgrade_with_no_free_users(app, make_user):
    make_user(plan="pro")

    result = app.test_cli_runner().invoke(args=["upgrade-free-users"])

    assert "Upgraded 0 user(s) to pro" in result.output
