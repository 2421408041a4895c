from decimal import Decimal

from sahl.extensions import db
from sahl.models import Client, Settings, Warehouse


def test_system_init_is_idempotent(app, db_session):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["system", "init"])
    second = runner.invoke(args=["system", "init"])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert db.session.query(Warehouse).filter_by(is_default=True).count() == 1
    assert db.session.query(Settings).count() == 1


def test_ledger_check_and_repair(app, make_client, make_invoice):
    client = make_client()
    make_invoice(client.id, "sale", balance="30")
    runner = app.test_cli_runner()

    assert runner.invoke(args=["ledger", "check"]).exit_code == 0

    db.session.get(Client, client.id).balance = Decimal("0")
    db.session.commit()

    check = runner.invoke(args=["ledger", "check"])
    assert check.exit_code == 1
    assert "FAIL" in check.output

    repair = runner.invoke(args=["ledger", "repair", "--yes"])
    assert repair.exit_code == 0, repair.output
    assert db.session.get(Client, client.id).balance == Decimal("30.00")


def test_clients_set_balance(app, make_client):
    client = make_client()
    runner = app.test_cli_runner()

    result = runner.invoke(args=["clients", "set-balance", str(client.id), "125.5"])

    assert result.exit_code == 0, result.output
    assert db.session.get(Client, client.id).balance == Decimal("125.50")

    missing = runner.invoke(args=["clients", "set-balance", "9999", "1"])
    assert missing.exit_code != 0
    bad = runner.invoke(args=["clients", "set-balance", str(client.id), "lots"])
    assert bad.exit_code != 0
