"""Collector and debtor generators."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Iterator

from microloan.generators.base import BaseGenerator
from microloan.models.loan import Collector, Debtor


def _mobile_number(fake) -> str:
    # Colombian mobile numbers: 3XX XXX XXXX
    return fake.numerify("3#########")


class CollectorGenerator(BaseGenerator):
    """Generate synthetic collectors (cobradores)."""

    def generate(self) -> Collector:
        """Generate a single collector."""
        return Collector(
            collector_id=self.fake.uuid4(),
            name=self.fake.name(),
            email=self.fake.email(),
            phone=_mobile_number(self.fake),
            active=random.random() < 0.95,
            created_at=datetime.now() - timedelta(days=random.randint(30, 3 * 365)),
        )

    def generate_batch(self, count: int) -> Iterator[Collector]:
        """Generate multiple collectors."""
        for _ in range(count):
            yield self.generate()


class DebtorGenerator(BaseGenerator):
    """Generate synthetic debtors assigned to collectors."""

    # Share of debtors who never gave an e-mail address
    NO_EMAIL_RATE = 0.4

    def generate(self, collector_id: str | None = None) -> Debtor:
        """Generate a single debtor.

        Parameters
        ----------
        collector_id : str | None
            Collector the debtor is assigned to.

        Returns
        -------
        Debtor
            Generated debtor.
        """
        return Debtor(
            debtor_id=self.fake.uuid4(),
            name=self.fake.name(),
            cedula=self.fake.numerify(random.choice(["########", "##########"])),
            phone=_mobile_number(self.fake),
            email=None if random.random() < self.NO_EMAIL_RATE else self.fake.email(),
            collector_id=collector_id,
            created_at=datetime.now() - timedelta(days=random.randint(0, 2 * 365)),
        )

    def generate_batch(self, count: int, collector_ids: list[str] | None = None) -> Iterator[Debtor]:
        """Generate multiple debtors, spread over ``collector_ids``."""
        for _ in range(count):
            collector_id = random.choice(collector_ids) if collector_ids else None
            yield self.generate(collector_id)
