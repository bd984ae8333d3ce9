"""Tests for the voting session."""

from unittest.mock import MagicMock

import pytest

from conftest import make_row, make_rows
from vote4us.config import Vote4UsConfig
from vote4us.constants import STATUS_NOT_FOUND
from vote4us.exceptions import RPCError, Vote4UsError, VoteSelectionError
from vote4us.session import Vote4Us
from vote4us.types import EMPTY_STATISTICS, LoggedAccount

ROWS = make_rows(40) + [make_row('ourbp', '15000.0'), make_row('oldbp', '99999999.0', is_active=0)]
ACTIVE = [row['owner'] for row in ROWS if row['is_active']]


@pytest.fixture
def config():
    return Vote4UsConfig(
        current_producer='ourbp',
        suggested_bps=('bp05', 'bp06'),
        not_suggested_bps=('bp00',),
        expected_bps=len(ROWS),
    )


@pytest.fixture
def transactor():
    wallet = MagicMock()
    wallet.transact.return_value = {'transaction_id': 'abc'}
    return wallet


@pytest.fixture
def session(config, fake_client, transactor, rng, record_sleep):
    fake_client.get_producer_rows.return_value = ROWS
    return Vote4Us(
        config,
        client=fake_client,
        transactor_factory=lambda account: transactor,
        rng=rng,
        sleep=record_sleep,
    )


def _voted(fake_client, producers):
    fake_client.get_account.return_value = {'account_name': 'alice', 'voter_info': {'producers': producers}}


def _login(session):
    session.login(LoggedAccount(name='alice', permission='active'))


def test_start_fetching_statistics_publishes_results(session):
    published = []
    session.store.subscribe(lambda state: published.append(state.statistics))

    stats = session.start_fetching_statistics()

    # ties with bp25 and keeps its place after it in the table
    assert stats.rank == 27
    assert stats.list[26] == 'ourbp'
    assert len(stats.list) == 41
    assert 'oldbp' not in stats.list
    assert session.state.statistics == stats
    assert published[-2:] == [EMPTY_STATISTICS, stats]


def test_statistics_for_unknown_producer(session, fake_client):
    fake_client.get_producer_rows.return_value = make_rows(40)
    assert session.start_fetching_statistics().status == STATUS_NOT_FOUND


def test_stale_statistics_refresh_is_discarded(session, fake_client):
    fresh = session.fetcher.fetch_active_producers
    calls = []

    def fetch(expected_count=None):
        calls.append(expected_count)
        producers = fresh(expected_count)
        if len(calls) == 1:
            # a second refresh starts and completes while the first one is in flight
            fake_client.get_producer_rows.return_value = ROWS[-2:-1] + make_rows(3, prefix='new')
            session.start_fetching_statistics()
        return producers

    session.fetcher.fetch_active_producers = fetch
    session.start_fetching_statistics()

    assert session.state.statistics.list == ('ourbp', 'new00', 'new01', 'new02')


def test_login_without_votes(session, fake_client):
    fake_client.get_account.return_value = {'account_name': 'alice'}
    session.start_fetching_statistics()

    _login(session)

    state = session.state
    assert state.logged.name == 'alice'
    assert state.has_voted_for_us is False
    assert state.selection.room_for_more == 30
    assert state.selection.original == ()
    assert state.show_dialog is True


def test_login_with_vote_for_us(session, fake_client):
    _voted(fake_client, ['bp01', 'ourbp', 'oldbp'])
    session.start_fetching_statistics()

    _login(session)

    state = session.state
    assert state.has_voted_for_us is True
    assert state.selection.original == ('bp01', 'ourbp')
    assert state.selection.room_for_more == 28


def test_account_fetch_failure_counts_as_no_votes(session, fake_client):
    fake_client.get_account.side_effect = RPCError("down")
    session.start_fetching_statistics()

    _login(session)

    assert session.state.selection.room_for_more == 30
    assert session.state.has_voted_for_us is False


def test_vote_with_free_slots_and_recommendations(session, fake_client, transactor):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)

    result = session.vote_for_us()

    assert result == {'transaction_id': 'abc'}
    transaction = transactor.transact.call_args[0][0]
    action = transaction['actions'][0]
    producers = action['data']['producers']
    assert action['name'] == 'voteproducer'
    assert action['authorization'] == [{'actor': 'alice', 'permission': 'active'}]
    assert action['data']['voter'] == 'alice'
    assert len(producers) == 30
    assert {'bp01', 'ourbp', 'bp05', 'bp06'} <= set(producers)
    assert 'bp00' not in producers
    assert producers == sorted(producers)
    assert session.state.thanks is True


def test_vote_without_recommendations(session, fake_client, transactor):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)
    session.set_add_recommended(False)

    session.vote_for_us()

    producers = transactor.transact.call_args[0][0]['actions'][0]['data']['producers']
    assert producers == ['bp01', 'ourbp']


def test_vote_refreshes_statistics_and_selection(session, fake_client):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)
    fetches = fake_client.get_producer_rows.call_count
    _voted(fake_client, ['bp01', 'ourbp'])

    session.vote_for_us()

    assert fake_client.get_producer_rows.call_count == fetches + 1
    assert session.state.has_voted_for_us is True
    assert session.state.selection.original == ('bp01', 'ourbp')


def test_full_selection_requires_replacement(session, fake_client, transactor):
    full = ACTIVE[:30]
    _voted(fake_client, full)
    session.start_fetching_statistics()
    _login(session)
    assert session.state.selection.room_for_more == 0

    with pytest.raises(VoteSelectionError):
        session.vote_for_us()
    transactor.transact.assert_not_called()

    session.drop_bp('bp07')
    assert session.state.selection.modified[7] == 'ourbp'
    assert session.state.selection.original == tuple(full)

    session.vote_for_us()

    producers = transactor.transact.call_args[0][0]['actions'][0]['data']['producers']
    expected = list(full)
    expected[7] = 'ourbp'
    assert producers == sorted(expected)


def test_drop_unknown_producer(session, fake_client):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)

    with pytest.raises(VoteSelectionError):
        session.drop_bp('bp30')


def test_reset_modified_selection(session, fake_client):
    _voted(fake_client, ACTIVE[:30])
    session.start_fetching_statistics()
    _login(session)
    session.drop_bp('bp02')

    session.reset_modified_selection()

    assert session.state.selection.modified == session.state.selection.original


def test_vote_requires_login(session, transactor):
    assert session.vote_for_us() is None
    transactor.transact.assert_not_called()
    assert session.state.error == ''


def test_cancelled_transaction_is_silent(session, fake_client, transactor):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)
    transactor.transact.side_effect = RuntimeError("User cancelled the request")
    account_calls = fake_client.get_account.call_count

    assert session.vote_for_us() is None

    assert session.state.error == ''
    assert session.state.thanks is False
    assert fake_client.get_account.call_count == account_calls + 1


def test_failed_transaction_sets_error(session, fake_client, transactor):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)
    transactor.transact.side_effect = RuntimeError("insufficient CPU")

    session.vote_for_us()

    assert session.state.error == 'insufficient CPU'
    assert session.state.thanks is False


def test_failed_transaction_without_message(session, fake_client, transactor):
    session.start_fetching_statistics()
    _login(session)
    transactor.transact.side_effect = RuntimeError()

    session.vote_for_us()

    assert session.state.error == 'An error occurred while casting your vote.'


def test_default_transactor_is_the_wallet_session(config, fake_client, rng, record_sleep):
    fake_client.get_producer_rows.return_value = ROWS
    fake_client.get_account.return_value = {'account_name': 'alice'}
    wallet = MagicMock()
    session = Vote4Us(config, client=fake_client, rng=rng, sleep=record_sleep)
    session.start_fetching_statistics()
    session.login(LoggedAccount(name='alice', permission='owner', session=wallet))

    session.vote_for_us()

    wallet.transact.assert_called_once()


def test_close_dialog_hides_when_nothing_happened(session):
    session.open_dialog()
    session.close_dialog()

    assert session.state.show_dialog is False


def test_close_dialog_resets_after_vote(session, fake_client):
    fake_client.get_account.return_value = {'account_name': 'alice'}
    session.start_fetching_statistics()
    _login(session)
    session.vote_for_us()
    stats = session.state.statistics

    session.close_dialog()

    state = session.state
    assert state.logged is None
    assert state.thanks is False
    assert state.show_dialog is False
    assert state.selection.room_for_more == 30
    assert state.statistics == stats


def test_preview_vote_does_not_transact(session, fake_client, transactor):
    fake_client.get_account.return_value = {'account_name': 'alice'}
    session.start_fetching_statistics()
    _login(session)
    session.set_add_recommended(False)

    assert session.preview_vote() == ['ourbp']
    transactor.transact.assert_not_called()


def test_vote_without_wallet_session_is_rejected(config, fake_client, rng, record_sleep):
    fake_client.get_producer_rows.return_value = ROWS
    fake_client.get_account.return_value = {'account_name': 'alice'}
    session = Vote4Us(config, client=fake_client, rng=rng, sleep=record_sleep)
    session.start_fetching_statistics()
    session.login(LoggedAccount(name='alice', permission='active'))

    with pytest.raises(Vote4UsError, match='No wallet session'):
        session.vote_for_us()
    assert session.state.error == ''
    assert session.state.thanks is False


def test_failing_subscriber_does_not_interrupt_vote(session, fake_client, transactor):
    _voted(fake_client, ['bp01'])
    session.start_fetching_statistics()
    _login(session)
    seen = []

    def broken(state):
        if state.thanks:
            raise RuntimeError('display broke')

    session.store.subscribe(broken)
    session.store.subscribe(lambda state: seen.append(state))
    _voted(fake_client, ['bp01', 'ourbp'])

    assert session.vote_for_us() == {'transaction_id': 'abc'}

    assert transactor.transact.call_count == 1
    assert session.state.thanks is True
    assert session.state.has_voted_for_us is True
    assert session.state.selection.original == ('bp01', 'ourbp')
    assert seen[-1] is session.state
