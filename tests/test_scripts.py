"""Operational scripts."""

import logging

from sqlmodel import Session, select

from app.models.sweet import Sweet
from app.scripts.grant_admin import main as grant_admin_main
from app.scripts.seed_sweets import STARTER_SWEETS, main as seed_main


def _messages(caplog, logger_name):
    return [r.getMessage() for r in caplog.records if r.name == logger_name]


class TestSeedSweets:
    def test_seeds_empty_catalog_once(self, engine):
        assert seed_main(bind=engine) == len(STARTER_SWEETS)
        assert seed_main(bind=engine) == 0

        with Session(engine) as s:
            sweets = s.exec(select(Sweet)).all()

        assert len(sweets) == len(STARTER_SWEETS)
        lemon = next(sw for sw in sweets if sw.name == "Lemon Drops")
        assert str(lemon.price) == "3.49"
        assert lemon.quantity == 120
        assert lemon.image_url == "/placeholder.svg"

    def test_logs_seeded_count(self, engine, caplog):
        caplog.set_level(logging.INFO, logger="app.scripts.seed_sweets")

        seed_main(bind=engine)

        assert f"Seeded {len(STARTER_SWEETS)} sweets" in _messages(caplog, "app.scripts.seed_sweets")


class TestGrantAdminLogging:
    def test_logs_grant_and_unknown_email(self, engine, customer, caplog):
        caplog.set_level(logging.INFO, logger="app.scripts.grant_admin")

        assert grant_admin_main(["carol@sweetshop.io"], bind=engine) == 0
        assert grant_admin_main(["carol@sweetshop.io"], bind=engine) == 0
        assert grant_admin_main(["nobody@sweetshop.io"], bind=engine) == 1

        assert _messages(caplog, "app.scripts.grant_admin") == [
            "Granted admin to carol@sweetshop.io",
            "carol@sweetshop.io is already an admin",
            "No identity registered for nobody@sweetshop.io",
        ]
