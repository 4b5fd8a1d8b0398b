"""Daily chart series combining database and payment halves"""
from app.services.daily_stats import get_daily_stats
from tests.helpers import DAY, FIXED_NOW, TODAY_START, FakeRazorpayClient, device, make_payment, run_with_db, session_row


def test_every_series_has_one_entry_per_day(tmp_path):
    client = FakeRazorpayClient([make_payment("pay_1", created_at=TODAY_START + 60)])

    async def body(factory):
        return {days: await get_daily_stats(factory, client, days=days, now=FIXED_NOW) for days in (1, 7, 30)}

    for days, daily in run_with_db(tmp_path / "db.sqlite", [], body).items():
        for series in (daily.dates, daily.devices, daily.sessions, daily.generations, daily.payments, daily.revenue):
            assert len(series) == days


def test_halves_share_day_labels(tmp_path):
    rows = [
        device("dev-1", created_at=TODAY_START - DAY + 5),
        session_row("sess-1", "dev-1", created_at=TODAY_START + 5, generations=2),
    ]
    client = FakeRazorpayClient([
        make_payment("pay_1", created_at=TODAY_START - DAY + 10, amount=49900),
        make_payment("pay_2", created_at=TODAY_START + 10, status="failed"),
    ])

    async def body(factory):
        return await get_daily_stats(factory, client, days=2, now=FIXED_NOW)

    daily = run_with_db(tmp_path / "db.sqlite", rows, body)
    assert daily.dates == ["09 Mar", "10 Mar"]
    assert daily.devices == [1, 0]
    assert daily.sessions == [0, 1]
    assert daily.generations == [0, 2]
    assert daily.payments == [1, 0]
    assert daily.revenue == [499.0, 0.0]
    assert client.payment_calls == [(TODAY_START - 2 * DAY, False)]
