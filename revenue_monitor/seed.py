"""Demo data set: six operators, six months of revenue reports and random transactions.

Three irregular reporting patterns are planted as pre-labelled anomalies:
a December revenue drop (Lucky Star Casino), round-number revenue
(Monrovia Bet) and late submissions (Safe Play Liberia).

Run directly::

    python -m revenue_monitor.seed --reset
"""

import argparse
import logging
import random
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from revenue_monitor.core.config import Settings
from revenue_monitor.core.database import build_engine, build_session_factory, create_all_tables, drop_all_tables
from revenue_monitor.monitoring.dao import OperatorDAO
from revenue_monitor.monitoring.models import LicenseType, Operator, OperatorStatus, RevenueReport, Transaction

logger = logging.getLogger(__name__)

TAX_RATE = 0.20

REPORT_MONTHS = [date(2024, month, 1) for month in range(7, 13)]

OPERATORS = [
    dict(operator_id=1, name="Bet360 Liberia", license_type=LicenseType.SPORTS_BETTING.value,
         status=OperatorStatus.ACTIVE, risk_score=25, contact_email="ops@bet360.lr",
         license_issue_date=date(2022, 6, 1), last_report_date=date(2024, 12, 26)),
    dict(operator_id=2, name="Lucky Star Casino", license_type=LicenseType.ONLINE_CASINO.value,
         status=OperatorStatus.ACTIVE, risk_score=78, contact_email="ops@luckystar.lr",
         license_issue_date=date(2023, 1, 15), last_report_date=date(2024, 12, 14)),
    dict(operator_id=3, name="Premier Lotto", license_type=LicenseType.LOTTERY.value,
         status=OperatorStatus.ACTIVE, risk_score=40, contact_email="info@premierlotto.lr",
         license_issue_date=date(2021, 3, 10), last_report_date=date(2024, 12, 28)),
    dict(operator_id=4, name="Monrovia Bet", license_type=LicenseType.SPORTS_BETTING.value,
         status=OperatorStatus.UNDER_REVIEW, risk_score=85, contact_email="contact@monroviabt.lr",
         license_issue_date=date(2022, 11, 20), last_report_date=date(2024, 12, 27)),
    dict(operator_id=5, name="Galaxy Gaming", license_type=LicenseType.ONLINE_CASINO.value,
         status=OperatorStatus.SUSPENDED, risk_score=95, contact_email="support@galaxygaming.lr",
         license_issue_date=date(2023, 5, 1), last_report_date=date(2024, 11, 30)),
    dict(operator_id=6, name="Safe Play Liberia", license_type=LicenseType.LOTTERY.value,
         status=OperatorStatus.ACTIVE, risk_score=15, contact_email="hello@safeplay.lr",
         license_issue_date=date(2020, 8, 15), last_report_date=date(2024, 12, 29)),
]

# Monthly gross revenue, July to December; None means no report was filed
MONTHLY_REVENUE: Dict[int, List[Optional[float]]] = {
    1: [8_500_000, 9_200_000, 8_800_000, 9_500_000, 9_100_000, 9_300_000],
    2: [12_100_000, 12_800_000, 11_900_000, 12_500_000, 12_300_000, 6_900_000],
    3: [5_200_000, 5_400_000, 5_100_000, 5_600_000, 5_300_000, 5_500_000],
    4: [7_200_000, 7_500_000, 8_000_000, 8_500_000, 9_000_000, 9_500_000],
    5: [15_000_000, 14_500_000, 14_800_000, None, None, None],
    6: [3_200_000, 3_400_000, 3_300_000, 3_500_000, 3_600_000, 3_800_000],
}

# Hold percentage and average stake used to derive bets and transaction counts
HOLD = {1: 0.12, 2: 0.12, 3: 0.15, 4: 0.12, 5: 0.10, 6: 0.15}
AVERAGE_STAKE = {1: 150, 2: 180, 3: 100, 4: 160, 5: 200, 6: 90}
SUBMISSION_TIME = {1: (9, 15), 2: (10, 20), 3: (8, 45), 4: (11, 30), 5: (14, 20), 6: (16, 45)}

GAME_TYPES = {
    1: ["Football", "Basketball", "Tennis"],
    2: ["Slots", "Blackjack", "Roulette", "Poker"],
    3: ["Daily Draw", "Mega Jackpot", "Quick Pick"],
    4: ["Football", "Basketball"],
    6: ["Daily Draw", "Evening Draw"],
}


def _anomaly_for(operator_id: int, month_index: int, rng: random.Random) -> Dict:
    """Planted irregularities per operator and month."""
    fields = dict(is_late=False, anomaly_flag=False, anomaly_type=None, anomaly_confidence=None)
    period = REPORT_MONTHS[month_index]
    hour, minute = SUBMISSION_TIME[operator_id]
    fields["submission_timestamp"] = datetime(period.year, period.month, period.day, hour, minute)

    if operator_id == 2 and month_index == 5:
        fields.update(is_late=True, anomaly_flag=True, anomaly_type="Revenue Drop", anomaly_confidence=92,
                      submission_timestamp=datetime(2024, 12, 14, 18, 23))
    elif operator_id == 4 and month_index >= 2:
        fields.update(anomaly_flag=True, anomaly_type="Round Numbers Pattern", anomaly_confidence=78)
    elif operator_id == 6:
        late = month_index >= 3
        submission_day = rng.randint(10, 19) if late else 2
        fields["submission_timestamp"] = datetime(period.year, period.month, submission_day, hour, minute)
        if late:
            fields.update(is_late=True, anomaly_flag=True, anomaly_type="Late Submission Pattern",
                          anomaly_confidence=65)
    return fields


def build_reports(rng: random.Random) -> List[RevenueReport]:
    reports = []
    for operator_id, revenues in MONTHLY_REVENUE.items():
        for month_index, revenue in enumerate(revenues):
            if revenue is None:
                continue
            bets = revenue / HOLD[operator_id]
            reports.append(RevenueReport(
                operator_id=operator_id,
                report_date=REPORT_MONTHS[month_index],
                gross_revenue=float(revenue),
                total_bets=bets,
                total_payouts=bets * (1 - HOLD[operator_id]),
                number_of_transactions=int(revenue // AVERAGE_STAKE[operator_id]),
                declared_tax=revenue * TAX_RATE,
                **_anomaly_for(operator_id, month_index, rng),
            ))
    return reports


def build_transactions(rng: random.Random, today: date) -> List[Transaction]:
    """Random wagering activity over the last 30 days for every non-suspended operator."""
    transactions = []
    for operator_id, games in GAME_TYPES.items():
        for _ in range(rng.randint(100, 300)):
            bet = rng.random() * 5000 + 100
            won = rng.random() > 0.55
            transactions.append(Transaction(
                operator_id=operator_id,
                transaction_date=today - timedelta(days=rng.randrange(30)),
                transaction_hour=rng.randrange(24),
                bet_amount=bet,
                payout_amount=bet * (rng.random() * 3 + 1) if won else 0.0,
                game_type=rng.choice(games),
                player_id=f"PLAYER_{rng.randrange(10000)}",
                ip_address=f"41.{rng.randrange(255)}.{rng.randrange(255)}.{rng.randrange(255)}",
                suspicious_flag=rng.random() > 0.97,
            ))
    return transactions


def seed_database(session: Session, random_seed: Optional[int] = None, today: Optional[date] = None) -> bool:
    """Insert the demo data set unless operators already exist. Returns True when data was written."""
    existing = OperatorDAO(session).count()
    if existing > 0:
        logger.info("Sample data already exists (%d operators). Skipping seeding.", existing)
        return False

    rng = random.Random(random_seed)
    today = today or date.today()

    try:
        session.add_all(Operator(**fields) for fields in OPERATORS)
        session.flush()

        reports = build_reports(rng)
        transactions = build_transactions(rng, today)
        session.add_all(reports)
        session.add_all(transactions)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Seeding failed")
        raise

    logger.info(
        "Seeded %d operators, %d revenue reports, %d transactions",
        len(OPERATORS), len(reports), len(transactions),
    )
    return True


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Revenue monitor demo data seeding utility")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    parser.add_argument("--random-seed", type=int, default=None, help="Seed for the transaction generator")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    settings = Settings.from_env()
    engine = build_engine(settings)
    if args.reset:
        drop_all_tables(engine)
    create_all_tables(engine)

    with build_session_factory(engine)() as session:
        seed_database(session, random_seed=args.random_seed)


if __name__ == "__main__":
    main()
