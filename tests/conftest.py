import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from token_locking import Locking, ManualClock, Token  # noqa: E402

ADMIN = "0xAdmin000000000000000000000000000000000001"
USER = "0xUser0000000000000000000000000000000000002"
OTHER = "0xOther000000000000000000000000000000000003"

LOCK_PERIODS = 3
WITHDRAW_PERIODS = 5
PERIOD_TIME = 100_000
MINT_AMOUNT = 100_000
GENESIS = 1_700_000_000


@pytest.fixture
def clock():
    return ManualClock(start_time=GENESIS)


@pytest.fixture
def token():
    return Token(name="MockName", symbol="gen", owner=ADMIN)


@pytest.fixture
def locking(token, clock):
    return Locking(
        ADMIN,
        token,
        lock_period_count=LOCK_PERIODS,
        withdraw_period_count=WITHDRAW_PERIODS,
        period_duration=PERIOD_TIME,
        time_provider=clock.now,
    )


@pytest.fixture
def armed(locking, token, clock):
    """Contract funded with MINT_AMOUNT and armed to start 10000s from now."""
    token.mint(ADMIN, locking.address, MINT_AMOUNT)
    locking.arm(ADMIN, clock.now() + 10_000, USER)
    return locking
