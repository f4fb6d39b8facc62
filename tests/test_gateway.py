import pytest

from voting_backend.extensions import socketio

ADMIN_PASSWORD = "masterkey2024"


def events(client, name):
    return [msg for msg in client.get_received() if msg['name'] == name]


@pytest.fixture
def booth(app):
    client = socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


@pytest.fixture
def admin(app):
    client = socketio.test_client(app)
    ack = client.emit('verifyAdminPassword', ADMIN_PASSWORD, callback=True)
    assert ack == {'success': True}
    client.get_received()
    yield client
    if client.is_connected():
        client.disconnect()


def login(client, username='booth1', password='booth1MITC'):
    return client.emit('login', {'username': username, 'password': password}, callback=True)


def test_request_initial_state(booth, service):
    ack = booth.emit('requestInitialState', callback=True)
    assert ack == service.get_full_state()

    received = events(booth, 'initialState')
    assert len(received) == 1
    assert received[0]['args'][0]['electionStatus'] == 'RUNNING'


def test_login_acknowledges_and_broadcasts(booth, admin):
    ack = login(booth)
    assert ack == {'success': True, 'room': {'id': 'room1', 'name': 'Voting Booth 1'}}

    updates = events(admin, 'stateUpdate')
    assert updates
    room1 = updates[-1]['args'][0]['rooms'][0]
    assert room1 == {'id': 'room1', 'name': 'Voting Booth 1', 'status': 'WAITING'}


def test_login_declined(booth):
    ack = login(booth, password='nope')
    assert ack == {'success': False, 'message': 'Invalid credentials'}


def test_full_voting_round(booth, admin, service, candidate_id):
    assert login(booth)['success'] is True
    booth.get_received()

    admin.emit('allowVote', 'room1')
    assert len(events(booth, 'voteAllowed')) == 1
    assert service.get_room('room1').status.value == 'VOTING_ALLOWED'

    ack = booth.emit('castVote', {'roomId': 'room1', 'candidateId': candidate_id}, callback=True)
    assert ack == {'success': True, 'message': 'Vote cast successfully!'}

    snapshot = events(admin, 'stateUpdate')[-1]['args'][0]
    assert snapshot['rooms'][0]['status'] == 'WAITING'
    assert snapshot['candidates'][0]['votes'] == 1
    assert snapshot['auditLog'][0]['action'] == 'VOTE_CAST'


def test_vote_allowed_only_reaches_its_booth(app, booth, admin):
    other = socketio.test_client(app)
    assert login(booth)['success'] is True
    assert login(other, 'booth2', 'booth2MITC')['success'] is True
    other.get_received()

    admin.emit('allowVote', {'roomId': 'room1'})
    assert len(events(booth, 'voteAllowed')) == 1
    assert events(other, 'voteAllowed') == []
    other.disconnect()


def test_cast_vote_from_other_connection_is_unauthorized(app, booth, admin, candidate_id):
    intruder = socketio.test_client(app)
    login(booth)
    admin.emit('allowVote', 'room1')

    ack = intruder.emit('castVote', {'roomId': 'room1', 'candidateId': candidate_id}, callback=True)
    assert ack == {'success': False, 'message': 'Unauthorized vote attempt.'}
    intruder.disconnect()


def test_admin_election_controls(admin, service):
    admin.emit('pauseElection')
    assert service.election_status.value == 'PAUSED'
    admin.emit('resumeElection')
    assert service.election_status.value == 'RUNNING'
    admin.emit('closeElection')
    assert service.election_status.value == 'CLOSED'
    admin.emit('resumeElection')
    assert service.election_status.value == 'CLOSED'

    assert events(admin, 'stateUpdate')[-1]['args'][0]['electionStatus'] == 'CLOSED'


def test_admin_room_controls(booth, admin, service):
    admin.emit('disableRoom', 'room1')
    assert service.get_room('room1').status.value == 'DISABLED'
    assert login(booth)['message'] == 'This voting booth has been disabled by an administrator'

    admin.emit('enableRoom', 'room1')
    assert service.get_room('room1').status.value == 'OFFLINE'
    assert login(booth)['success'] is True


def test_admin_events_from_unverified_session_are_ignored(booth, service):
    booth.emit('pauseElection')
    booth.emit('disableRoom', 'room2')
    assert service.election_status.value == 'RUNNING'
    assert service.get_room('room2').status.value == 'OFFLINE'


def test_admin_events_open_when_session_check_disabled(app, booth, service):
    app.config['ADMIN_SESSION_REQUIRED'] = False
    booth.emit('pauseElection')
    assert service.election_status.value == 'PAUSED'


def test_verify_admin_password_accepts_object_payload(app):
    client = socketio.test_client(app)
    ack = client.emit('verifyAdminPassword', {'password': 'wrong'}, callback=True)
    assert ack == {'success': False, 'message': 'Invalid admin password.'}
    client.disconnect()


def test_disconnect_takes_room_offline(booth, admin, service):
    login(booth)
    admin.emit('allowVote', 'room1')
    booth.disconnect()

    room = service.get_room('room1')
    assert room.status.value == 'OFFLINE'
    assert room.socket_id is None
    assert 'voteStartTime' not in events(admin, 'stateUpdate')[-1]['args'][0]['rooms'][0]
