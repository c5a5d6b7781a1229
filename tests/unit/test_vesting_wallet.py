"""Unit tests for the single-schedule vesting wallet"""
import pytest

from vestledger.exceptions import (
    AlreadyInitialized,
    InsufficientVested,
    InvalidConfiguration,
    NotInitialized,
    NotRevocable,
    TransferFailed,
    Unauthorized,
)
from vestledger.services.event_log import EventLog, EventType
from vestledger.services.ledger import NATIVE_ASSET
from vestledger.services.vesting_wallet import VestingWallet

T = 1_700_000_000
OWNER = "owner"
WALLET = "vesting-wallet"
ALICE = "alice"


@pytest.fixture
def funded_wallet(wallet, ledger):
    """Wallet holding 1000 native units vesting to alice over 100 seconds"""
    ledger.mint(WALLET, 1000)
    wallet.initialize(OWNER, ALICE, 1000, T, 100)
    return wallet


class TestInitialize:
    """Tests for VestingWallet.initialize"""

    def test_initialize_creates_schedule(self, wallet):
        schedule = wallet.initialize(OWNER, ALICE, 1000, T, 100, cliff=T + 10, revocable=False)

        assert wallet.is_initialized()
        assert wallet.assets() == [NATIVE_ASSET]
        assert schedule.beneficiary == ALICE
        assert schedule.cliff == T + 10
        assert schedule.revocable is False
        assert wallet.get_vesting_schedule() == schedule
        assert wallet.get_vesting_schedule() is not schedule

    def test_initialize_requires_owner(self, wallet):
        with pytest.raises(Unauthorized):
            wallet.initialize(ALICE, ALICE, 1000, T, 100)
        assert not wallet.is_initialized()

    @pytest.mark.parametrize("amount,duration", [(0, 100), (1000, 0)])
    def test_initialize_rejects_zero(self, wallet, amount, duration):
        with pytest.raises(InvalidConfiguration):
            wallet.initialize(OWNER, ALICE, amount, T, duration)
        assert not wallet.is_initialized()

    def test_initialize_is_one_shot(self, funded_wallet):
        with pytest.raises(AlreadyInitialized):
            funded_wallet.initialize(OWNER, "mallory", 5, T, 1)

        assert funded_wallet.get_vesting_schedule().beneficiary == ALICE

    def test_assets_are_independent(self, funded_wallet, ledger, clock):
        ledger.mint(WALLET, 400, "USDC")
        funded_wallet.initialize(OWNER, "bob", 400, T, 200, asset="USDC")

        clock.advance(50)
        funded_wallet.release(ALICE)

        assert funded_wallet.released() == 500
        assert funded_wallet.released("USDC") == 0
        assert funded_wallet.releasable("USDC") == 100
        assert sorted(funded_wallet.assets()) == ["USDC", NATIVE_ASSET]


class TestReleasable:
    """Tests for releasable/vested views"""

    def test_uninitialized_asset(self, wallet):
        assert wallet.releasable() == 0
        assert wallet.released() == 0
        with pytest.raises(NotInitialized):
            wallet.get_vesting_schedule()

    def test_before_start(self, wallet, clock):
        wallet.initialize(OWNER, ALICE, 1000, T + 10, 100)
        assert wallet.releasable() == 0

    def test_linear_ramp(self, funded_wallet, clock):
        clock.advance(33)
        assert funded_wallet.releasable() == 330

        clock.advance(67)
        assert funded_wallet.releasable() == 1000

        clock.advance(400)
        assert funded_wallet.releasable() == 1000

    def test_cliff_and_start_are_both_required(self, wallet, clock):
        wallet.initialize(OWNER, ALICE, 1000, T, 100, cliff=T + 60)

        clock.advance(59)
        assert wallet.releasable() == 0

        clock.advance(1)
        assert wallet.releasable() == 600

    def test_vested_amount_at_timestamp(self, funded_wallet):
        assert funded_wallet.vested_amount(timestamp=T + 25) == 250
        assert funded_wallet.vested_amount() == 0

    def test_schedule_view_is_a_copy(self, funded_wallet, clock):
        clock.advance(50)
        schedule = funded_wallet.get_vesting_schedule()
        schedule.released = 1000
        schedule.total_amount = 1

        assert funded_wallet.released() == 0
        assert funded_wallet.releasable() == 500
        assert funded_wallet.get_vesting_schedule().total_amount == 1000


class TestRelease:
    """Tests for VestingWallet.release"""

    def test_release_pays_beneficiary(self, funded_wallet, ledger, clock, event_log):
        clock.advance(50)

        amount = funded_wallet.release(ALICE)

        assert amount == 500
        assert funded_wallet.released() == 500
        assert ledger.balance_of(ALICE) == 500
        assert funded_wallet.balance() == 500

        events = event_log.events(EventType.RELEASED)
        assert len(events) == 1
        assert events[0].amount == 500
        assert events[0].account == ALICE

    def test_no_double_pay(self, funded_wallet, ledger, clock):
        clock.advance(100)

        assert funded_wallet.release(ALICE) == 1000
        with pytest.raises(InsufficientVested):
            funded_wallet.release(ALICE)
        assert ledger.balance_of(ALICE) == 1000

    def test_release_nothing_vested(self, funded_wallet):
        with pytest.raises(InsufficientVested):
            funded_wallet.release(ALICE)
        assert funded_wallet.released() == 0

    def test_release_by_owner_pays_beneficiary(self, funded_wallet, ledger, clock):
        clock.advance(10)

        funded_wallet.release(OWNER)

        assert ledger.balance_of(ALICE) == 100
        assert ledger.balance_of(OWNER) == 0

    def test_release_by_stranger_rejected(self, funded_wallet, clock):
        clock.advance(10)
        with pytest.raises(Unauthorized):
            funded_wallet.release("mallory")

    def test_release_uninitialized(self, wallet):
        with pytest.raises(NotInitialized):
            wallet.release(ALICE)

    def test_conservation_over_several_releases(self, funded_wallet, clock):
        for step in (7, 13, 21, 9, 30):
            clock.advance(step)
            funded_wallet.release(ALICE)
            schedule = funded_wallet.get_vesting_schedule()
            now = clock.now()
            assert schedule.released + funded_wallet.releasable() == schedule.vested_amount(now)
            assert schedule.released <= schedule.total_amount

    def test_failed_transfer_rolls_back(self, funded_wallet, ledger, clock, event_log):
        clock.advance(50)
        ledger.freeze(ALICE)

        with pytest.raises(TransferFailed):
            funded_wallet.release(ALICE)

        assert funded_wallet.released() == 0
        assert funded_wallet.balance() == 1000
        assert len(event_log) == 0

        ledger.unfreeze(ALICE)
        assert funded_wallet.release(ALICE) == 500

    def test_underfunded_wallet_fails_cleanly(self, wallet, ledger, clock):
        ledger.mint(WALLET, 100)
        wallet.initialize(OWNER, ALICE, 1000, T, 100)
        clock.advance(50)

        with pytest.raises(TransferFailed):
            wallet.release(ALICE)
        assert wallet.released() == 0


class TestRevoke:
    """Tests for VestingWallet.revoke"""

    def test_revoke_splits_vested_and_refund(self, funded_wallet, ledger, clock, event_log):
        clock.advance(30)

        refund = funded_wallet.revoke(OWNER)

        schedule = funded_wallet.get_vesting_schedule()
        assert refund == 700
        assert schedule.released == 300
        assert schedule.total_amount == 300
        assert schedule.revoked is True
        assert ledger.balance_of(ALICE) == 300
        assert ledger.balance_of(OWNER) == 700
        assert funded_wallet.balance() == 0
        assert schedule.released + refund == 1000
        assert [e.event_type for e in event_log.events()] == [EventType.RELEASED, EventType.REVOKED]

    def test_revoke_after_partial_release(self, funded_wallet, ledger, clock):
        clock.advance(20)
        funded_wallet.release(ALICE)
        clock.advance(20)

        refund = funded_wallet.revoke(OWNER)

        assert refund == 600
        assert funded_wallet.released() == 400
        assert ledger.balance_of(ALICE) == 400

    def test_revoke_freezes_accrual(self, funded_wallet, clock):
        clock.advance(30)
        funded_wallet.revoke(OWNER)

        for step in (1, 50, 1000):
            clock.advance(step)
            assert funded_wallet.releasable() == 0
        with pytest.raises(InsufficientVested):
            funded_wallet.release(ALICE)

    def test_revoke_again_is_noop(self, funded_wallet, ledger, clock, event_log):
        clock.advance(30)
        funded_wallet.revoke(OWNER)
        recorded = len(event_log)

        clock.advance(30)
        assert funded_wallet.revoke(OWNER) == 0
        assert len(event_log) == recorded
        assert ledger.balance_of(OWNER) == 700

    def test_revoke_before_start_refunds_everything(self, funded_wallet, ledger, event_log):
        assert funded_wallet.revoke(OWNER) == 1000
        assert ledger.balance_of(ALICE) == 0
        assert [e.event_type for e in event_log.events()] == [EventType.REVOKED]

    def test_revoke_requires_owner(self, funded_wallet):
        with pytest.raises(Unauthorized):
            funded_wallet.revoke(ALICE)
        assert funded_wallet.get_vesting_schedule().revoked is False

    def test_not_revocable(self, wallet, ledger):
        ledger.mint(WALLET, 1000)
        wallet.initialize(OWNER, ALICE, 1000, T, 100, revocable=False)

        with pytest.raises(NotRevocable):
            wallet.revoke(OWNER)

    def test_failed_refund_rolls_back_payout(self, funded_wallet, ledger, clock, event_log):
        clock.advance(30)
        ledger.freeze(OWNER)

        with pytest.raises(TransferFailed):
            funded_wallet.revoke(OWNER)

        schedule = funded_wallet.get_vesting_schedule()
        assert schedule.total_amount == 1000
        assert schedule.released == 0
        assert schedule.revoked is False
        assert ledger.balance_of(ALICE) == 0
        assert funded_wallet.balance() == 1000
        assert len(event_log) == 0


class TestEvents:
    """Tests for the wallet's event log wiring"""

    def test_uses_injected_empty_log(self, ledger, authorizer, clock):
        log = EventLog()
        wallet = VestingWallet(WALLET, ledger, authorizer, clock, event_log=log)
        assert wallet.event_log is log

        ledger.mint(WALLET, 1000)
        wallet.initialize(OWNER, ALICE, 1000, T, 100)
        clock.advance(10)
        wallet.release(ALICE)

        assert [e.amount for e in log.events(EventType.RELEASED)] == [100]

    def test_failing_subscriber_does_not_break_release(self, funded_wallet, ledger, clock, event_log):
        seen = []

        def broken(event):
            raise RuntimeError("subscriber down")

        event_log.subscribe(broken)
        event_log.subscribe(seen.append)
        clock.advance(40)

        assert funded_wallet.release(ALICE) == 400
        assert funded_wallet.released() == 400
        assert ledger.balance_of(ALICE) == 400
        assert len(event_log) == 1
        assert [e.amount for e in seen] == [400]
