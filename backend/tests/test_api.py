import io
import json


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_add_and_list_rounds(client, make_round):
    data = make_round()
    assert data['current'] == 0
    assert len(data['rounds']) == 1
    rnd = data['rounds'][0]
    assert rnd['hints'] == ['near the library', 'has a fountain', 'north campus']
    assert rnd['reveal'] == {'hint1': False, 'hint2': False, 'hint3': False, 'answer': False}

    # Adding more jumps to the first of the new rounds
    res = client.post('/api/rounds', json={'rounds': [{'image_url': 'b.jpg'}, {'image_url': 'c.jpg'}]})
    assert res.status_code == 201
    data = res.get_json()
    assert data['current'] == 1
    assert [r['image_url'] for r in data['rounds']] == ['https://example.test/quad.jpg', 'b.jpg', 'c.jpg']


def test_hints_are_always_three(client, make_round):
    data = make_round(hints=['only one'])
    assert data['rounds'][0]['hints'] == ['only one', '', '']
    rid = data['rounds'][0]['id']
    res = client.patch(f'/api/rounds/{rid}', json={'hints': ['a', 'b', 'c', 'd']})
    assert res.get_json()['hints'] == ['a', 'b', 'c']


def test_add_rounds_rejects_empty(client):
    res = client.post('/api/rounds', json=[])
    assert res.status_code == 400
    assert 'error' in res.get_json()


def test_hints_must_be_a_list(client, make_round):
    res = client.post('/api/rounds', json={'image_url': 'a.jpg', 'hints': 'abc'})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'hints must be a list'
    assert client.get('/api/rounds').get_json()['rounds'] == []

    make_round()
    res = client.post('/api/rounds/import', json={'rounds': [{'imageUrl': 'b.jpg', 'hints': 'abc'}]})
    assert res.status_code == 400
    # A rejected import leaves the existing rounds alone
    assert len(client.get('/api/rounds').get_json()['rounds']) == 1


def test_upload_images(client, flask_app):
    res = client.post(
        '/api/rounds',
        data={'files': [(io.BytesIO(b'\x89PNG fake'), 'library.png'), (io.BytesIO(b'text'), 'notes.txt')]},
        content_type='multipart/form-data',
    )
    assert res.status_code == 201
    rounds = res.get_json()['rounds']
    assert len(rounds) == 1
    assert rounds[0]['image_name'] == 'library.png'
    assert rounds[0]['image_url'].startswith('/uploads/')
    served = client.get(rounds[0]['image_url'])
    assert served.status_code == 200
    assert served.data == b'\x89PNG fake'


def test_delete_adjusts_current(client, make_round):
    make_round(image_url='a.jpg')
    make_round(image_url='b.jpg')
    data = client.get('/api/rounds').get_json()
    assert data['current'] == 1
    last = data['rounds'][1]['id']
    res = client.delete(f'/api/rounds/{last}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['current'] == 0
    assert len(data['rounds']) == 1
    assert client.delete(f'/api/rounds/{last}').status_code == 404


def test_clear_rounds(client, make_round):
    make_round()
    res = client.delete('/api/rounds')
    assert res.get_json() == {'rounds': [], 'current': 0}
    snap = client.get('/api/presentation/snapshot').get_json()
    assert snap['active'] is False


def test_select_next_prev_are_clamped(client, make_round):
    make_round(image_url='a.jpg')
    make_round(image_url='b.jpg')
    assert client.post('/api/rounds/select', json={'index': 0}).get_json()['current'] == 0
    assert client.post('/api/rounds/prev').get_json()['current'] == 0
    assert client.post('/api/rounds/next').get_json()['current'] == 1
    assert client.post('/api/rounds/next').get_json()['current'] == 1
    assert client.post('/api/rounds/select', json={'index': 99}).get_json()['current'] == 1
    assert client.post('/api/rounds/select', json={'index': 'x'}).status_code == 400
    res = client.post('/api/rounds/select', data='{"index": 1e999}', content_type='application/json')
    assert res.status_code == 400


def test_settings_are_clamped(client):
    res = client.put('/api/settings', json={'duration_sec': 5000, 'start_blur_px': 99, 'start_zoom': 0.5, 'auto_unblur': False})
    assert res.status_code == 200
    assert res.get_json() == {'duration_sec': 300, 'auto_unblur': False, 'start_blur_px': 30, 'start_zoom': 1.0}
    res = client.put('/api/settings', json={'duration_sec': 1})
    assert res.get_json()['duration_sec'] == 10
    assert client.put('/api/settings', json=['nope']).status_code == 400


def test_settings_with_out_of_range_json_numbers(client):
    # 1e999 parses to infinity
    res = client.put('/api/settings', data='{"duration_sec": 1e999, "start_blur_px": 1e999}',
                     content_type='application/json')
    assert res.status_code == 200
    assert res.get_json()['duration_sec'] == 60
    assert res.get_json()['start_blur_px'] == 18

    client.put('/api/settings', json={'duration_sec': 90, 'start_blur_px': 25})
    res = client.post('/api/rounds/import', data='{"rounds": [], "settings": {"duration": 1e999, "startBlur": 1e999}}',
                      content_type='application/json')
    assert res.status_code == 200
    settings = client.get('/api/settings').get_json()
    assert settings['duration_sec'] == 60
    assert settings['start_blur_px'] == 18


def test_settings_feed_the_clock(client, presenter):
    client.put('/api/settings', json={'duration_sec': 90})
    assert presenter.timer_state.duration == 90


def test_teams_scoreboard(client):
    teams = client.get('/api/teams').get_json()
    assert [t['key'] for t in teams] == ['A', 'B', 'C', 'D']
    team_id = teams[0]['id']
    assert client.post(f'/api/teams/{team_id}/score', json={'delta': 3}).get_json()['score'] == 3
    # Scores never drop below zero
    assert client.post(f'/api/teams/{team_id}/score', json={'delta': -5}).get_json()['score'] == 0
    assert client.post(f'/api/teams/{team_id}/score', json={'delta': 'x'}).status_code == 400
    res = client.post(f'/api/teams/{team_id}/score', data='{"delta": 1e999}', content_type='application/json')
    assert res.status_code == 400
    assert client.patch(f'/api/teams/{team_id}', json={'name': 'Owls'}).get_json()['name'] == 'Owls'
    client.post(f'/api/teams/{team_id}/score', json={'delta': 2})
    reset = client.post('/api/teams/reset').get_json()
    assert all(t['score'] == 0 for t in reset)


def test_export_import_pack(client, make_round):
    make_round()
    client.get('/api/teams')
    pack = client.get('/api/rounds/export').get_json()
    assert pack['meta']['version'] == 1
    assert pack['rounds'][0]['imageUrl'] == 'https://example.test/quad.jpg'
    assert pack['settings']['duration'] == 60

    pack['rounds'].append({'imageUrl': 'two.jpg', 'answer': 'Gym'})
    pack['teams'] = [{'id': 'X', 'name': 'Xylophones', 'score': 4}]
    pack['settings'] = {'duration': 45, 'autoUnblur': False}
    res = client.post('/api/rounds/import', json=pack)
    assert res.status_code == 200
    data = res.get_json()
    assert data['imported'] == {'rounds': 2, 'teams': 1}
    assert data['current'] == 0
    assert data['rounds'][1]['hints'] == ['', '', '']

    settings = client.get('/api/settings').get_json()
    assert settings['duration_sec'] == 45
    assert settings['auto_unblur'] is False
    assert settings['start_blur_px'] == 18
    assert client.get('/api/teams').get_json()[0]['name'] == 'Xylophones'


def test_import_file_with_bad_json(client):
    res = client.post(
        '/api/rounds/import',
        data={'file': (io.BytesIO(b'{not json'), 'pack.json')},
        content_type='multipart/form-data',
    )
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Import failed: invalid JSON'


def test_import_file(client):
    pack = {'rounds': [{'imageUrl': 'a.jpg', 'hints': ['x']}]}
    res = client.post(
        '/api/rounds/import',
        data={'file': (io.BytesIO(json.dumps(pack).encode()), 'pack.json')},
        content_type='multipart/form-data',
    )
    assert res.status_code == 200
    assert res.get_json()['rounds'][0]['hints'] == ['x', '', '']


def test_start_without_round_is_rejected(client):
    res = client.post('/api/presentation/start')
    assert res.status_code == 409
    assert res.get_json()['error'] == 'No active round'


def test_presentation_flow(client, make_round, presenter, fake_time):
    rid = make_round()['rounds'][0]['id']

    # Reveals survive until the round is started
    client.post('/api/presentation/reveal/hint3')
    assert client.get(f'/api/rounds/{rid}').get_json()['reveal']['hint3'] is True

    snap = client.post('/api/presentation/start').get_json()
    assert snap['running'] is True
    assert snap['blur_px'] == 18
    assert snap['zoom'] == 2.0
    assert snap['reveal'] == {'hint1': False, 'hint2': False, 'hint3': False, 'answer': False}
    assert client.get(f'/api/rounds/{rid}').get_json()['reveal']['hint3'] is False

    fake_time.advance(30)
    presenter.tick()
    snap = client.get('/api/presentation/snapshot').get_json()
    assert snap['blur_px'] == 9
    assert snap['zoom'] == 1.5
    assert snap['timer_text'] == '0:30'
    assert snap['timer']['elapsed'] == 30

    snap = client.post('/api/presentation/pause').get_json()
    assert snap['running'] is False
    assert snap['zoom'] == 1.0

    fake_time.advance(10)
    snap = client.post('/api/presentation/resume').get_json()
    assert snap['running'] is True
    assert snap['remaining_seconds'] == 30

    fake_time.advance(30)
    assert presenter.tick() is False
    snap = client.get('/api/presentation/snapshot').get_json()
    assert snap['running'] is False
    assert snap['blur_px'] == 0
    assert snap['zoom'] == 1.0
    assert snap['remaining_seconds'] == 0

    snap = client.post('/api/presentation/reset').get_json()
    assert snap['remaining_seconds'] == 60


def test_reveal_toggles_and_reset(client, make_round):
    make_round()
    snap = client.post('/api/presentation/reveal/answer').get_json()
    assert snap['reveal'] == {'hint1': False, 'hint2': False, 'hint3': False, 'answer': True}
    snap = client.post('/api/presentation/reveal/hint2').get_json()
    assert snap['reveal'] == {'hint1': False, 'hint2': True, 'hint3': False, 'answer': True}
    snap = client.post('/api/presentation/reveal/answer').get_json()
    assert snap['reveal']['answer'] is False
    assert client.post('/api/presentation/reveal/hint9').status_code == 400
    snap = client.post('/api/presentation/reveal/reset').get_json()
    assert not any(snap['reveal'].values())


def test_preview_override(client, make_round):
    make_round()
    snap = client.post('/api/presentation/preview').get_json()
    assert snap['blur_px'] == 0
    assert snap['zoom'] == 1.0
    snap = client.post('/api/presentation/preview', json={'enabled': False}).get_json()
    assert snap['blur_px'] == 18


def test_open_display_without_round(client):
    res = client.post('/api/presentation/display')
    assert res.status_code == 409
    assert res.get_json()['error'] == 'No active round to display'


def test_display_lifecycle(client, make_round, presenter, fake_time):
    make_round()
    res = client.post('/api/presentation/display')
    assert res.status_code == 201
    token = res.get_json()['token']
    assert res.get_json()['frame']['image_url'] == 'https://example.test/quad.jpg'

    client.post('/api/presentation/start')
    fake_time.advance(30)
    presenter.tick()
    presenter.display(token).poll_once()
    frame = client.get(f'/api/presentation/display/{token}').get_json()['frame']
    assert frame['timer_text'] == '0:30'
    assert frame['blur_px'] == 9

    assert client.delete(f'/api/presentation/display/{token}').get_json() == {'closed': True}
    assert client.get(f'/api/presentation/display/{token}').status_code == 404
    assert client.delete(f'/api/presentation/display/{token}').status_code == 404
