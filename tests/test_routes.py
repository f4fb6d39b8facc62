from voting_backend.election.state import RoomStatus


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['overall_ok'] is True
    assert data['db']['ok'] is True
    assert data['election_status'] == 'RUNNING'


def test_state_snapshot(client, service):
    resp = client.get('/api/state')
    assert resp.status_code == 200
    assert resp.get_json() == service.get_full_state()


def test_results(client, service, candidate_id):
    service.login('booth1', 'booth1MITC', 'sid-1')
    service.set_room_status('room1', RoomStatus.VOTING_ALLOWED)
    service.cast_vote('room1', candidate_id, 'sid-1')

    data = client.get('/api/results').get_json()
    assert data['totalVotes'] == 1
    assert [r['candidateNumber'] for r in data['results']] == ['01', '02', '03']
    assert [r['percent'] for r in data['results']] == [100.0, 0, 0]


def test_results_without_votes(client):
    data = client.get('/api/results').get_json()
    assert data['totalVotes'] == 0
    assert all(r['percent'] == 0 for r in data['results'])
