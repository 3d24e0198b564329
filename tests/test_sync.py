import requests

from budgetbox.models import BudgetFields, BudgetState, SyncStatus
from budgetbox.store import BudgetStore
from budgetbox.sync import (
    FETCH_EMPTY,
    FETCH_FAILED,
    FETCH_OK,
    LOGIN_FAILED,
    LOGIN_OK,
    SYNC_FAILED,
    SyncCoordinator,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class FakeSession:
    """Returns queued responses and records each request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({'method': method, 'url': url, 'timeout': timeout, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _coordinator(session, state=None):
    store = BudgetStore(state=state or BudgetState(user_email='hire-me@anshumat.org'))
    return store, SyncCoordinator(store, base_url='http://api.test/', session=session, timeout=5)


def test_login_stores_token():
    session = FakeSession(FakeResponse(200, {'token': 'abc', 'email': 'hire-me@anshumat.org'}))
    store, coordinator = _coordinator(session)

    outcome = coordinator.login('hire-me@anshumat.org', 'HireMe@2025!')

    assert outcome.ok and outcome.message == LOGIN_OK
    assert store.state.auth_token == 'abc'
    call = session.calls[0]
    assert call['method'] == 'POST'
    assert call['url'] == 'http://api.test/auth/login'
    assert call['json'] == {'email': 'hire-me@anshumat.org', 'password': 'HireMe@2025!'}
    assert call['timeout'] == 5


def test_login_failure_leaves_budget_untouched():
    session = FakeSession(FakeResponse(401, {'error': 'Invalid credentials'}))
    store, coordinator = _coordinator(session)
    store.update_field('income', 100)
    before = store.state.to_dict()

    outcome = coordinator.login('hire-me@anshumat.org', 'wrong')

    assert not outcome.ok
    assert outcome.message == LOGIN_FAILED
    assert store.state.to_dict() == before


def test_sync_success_marks_synced_with_server_timestamp():
    session = FakeSession(FakeResponse(200, {'success': True, 'timestamp': '2025-03-01T00:00:00.000Z'}))
    store, coordinator = _coordinator(session)
    store.update_field('food', 300)
    store.set_auth_token('tok')

    outcome = coordinator.sync()

    assert outcome.ok
    assert store.sync_status is SyncStatus.SYNCED
    assert store.state.last_synced_at == '2025-03-01T00:00:00.000Z'
    call = session.calls[0]
    assert call['url'] == 'http://api.test/budget/sync'
    assert call['headers'] == {'Authorization': 'Bearer tok'}
    assert call['json']['email'] == 'hire-me@anshumat.org'
    assert call['json']['budget']['food'] == 300


def test_sync_without_token_sends_no_authorization_header():
    session = FakeSession(FakeResponse(200, {'success': True}))
    store, coordinator = _coordinator(session)

    assert coordinator.sync().ok
    assert session.calls[0]['headers'] == {}
    # server omitted the timestamp, local time is used
    assert store.state.last_synced_at is not None


def test_sync_sets_pending_before_request():
    seen = []
    store, coordinator = _coordinator(FakeSession(FakeResponse(200, {'timestamp': 't'})))
    store.subscribe(lambda state: seen.append(state.sync_status))
    coordinator.sync()
    assert seen == [SyncStatus.SYNC_PENDING, SyncStatus.SYNCED]


def test_sync_offline_reverts_to_local_only():
    session = FakeSession(requests.exceptions.ConnectionError('offline'))
    store, coordinator = _coordinator(session, BudgetState(sync_status=SyncStatus.SYNCED))
    store.update_field('food', 1)
    assert store.sync_status is SyncStatus.SYNC_PENDING

    outcome = coordinator.sync()

    assert not outcome.ok
    assert outcome.message == SYNC_FAILED
    assert store.sync_status is SyncStatus.LOCAL_ONLY
    assert store.budget.food == 1


def test_sync_server_error_reverts_to_local_only():
    store, coordinator = _coordinator(FakeSession(FakeResponse(500, {'error': 'boom'})))
    assert not coordinator.sync().ok
    assert store.sync_status is SyncStatus.LOCAL_ONLY


def test_sync_token_mismatch_is_reported():
    store, coordinator = _coordinator(FakeSession(FakeResponse(403, {'error': 'Token does not match email'})))
    outcome = coordinator.sync()
    assert not outcome.ok
    assert 'Token does not match email' in outcome.message
    assert store.sync_status is SyncStatus.LOCAL_ONLY


def test_fetch_latest_hydrates_budget():
    payload = {'budget': {'income': 7000, 'monthlyBills': 2000}, 'updatedAt': '2025-04-01T00:00:00.000Z'}
    session = FakeSession(FakeResponse(200, payload))
    store, coordinator = _coordinator(session)
    store.update_field('food', 999)

    outcome = coordinator.fetch_latest()

    assert outcome.ok and outcome.message == FETCH_OK
    assert store.budget == BudgetFields(income=7000, monthly_bills=2000)
    assert store.sync_status is SyncStatus.SYNCED
    assert store.state.last_synced_at == '2025-04-01T00:00:00.000Z'
    assert session.calls[0]['params'] == {'email': 'hire-me@anshumat.org'}


def test_fetch_latest_without_server_copy_keeps_local_budget():
    store, coordinator = _coordinator(FakeSession(FakeResponse(200, {'budget': None, 'updatedAt': None})))
    store.update_field('food', 12)

    outcome = coordinator.fetch_latest()

    assert outcome.message == FETCH_EMPTY
    assert 'No server copy' in outcome.message
    assert store.budget.food == 12
    assert store.sync_status is SyncStatus.LOCAL_ONLY


def test_fetch_latest_offline_keeps_state():
    store, coordinator = _coordinator(FakeSession(requests.exceptions.Timeout('slow')))
    store.update_field('food', 12)
    before = store.state.to_dict()

    outcome = coordinator.fetch_latest()

    assert not outcome.ok
    assert outcome.message == FETCH_FAILED
    assert 'offline' in outcome.message.lower()
    assert store.state.to_dict() == before


def test_check_health():
    _, coordinator = _coordinator(FakeSession(FakeResponse(200, {'ok': True, 'service': 'budgetbox-backend'})))
    assert coordinator.check_health() is True
    _, coordinator = _coordinator(FakeSession(requests.exceptions.ConnectionError('down')))
    assert coordinator.check_health() is False
