import importlib
import json
import sys

import pytest

# Import run.py as a module and drive main() with temp files so the JSON
# in/out paths are exercised end to end.


@pytest.fixture()
def run_module():
    # Ensure a clean import each time (run.py reads VERSION once)
    if 'run' in sys.modules:
        del sys.modules['run']
    return importlib.import_module('run')


@pytest.fixture()
def map_file(run_module, tmp_path):
    out = tmp_path / 'map.json'
    code = run_module.main(['--quiet', 'generate', '--seed', 'cli-seed', '--width', '40', '--height', '40', '--out', str(out)])
    assert code == 0
    return out


def test_version_flag_outputs_version(run_module, capsys):
    ver = run_module.__version__
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(['--version'])
    assert exc.value.code == 0
    captured = capsys.readouterr().out
    assert ver in captured
    assert 'Mapsmith' in captured


def test_missing_command_exits_with_usage(run_module):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args([])
    assert exc.value.code == 2


def test_generate_writes_a_valid_document(map_file):
    doc = json.loads(map_file.read_text())
    assert doc['metadata']['seed'] == 'cli-seed'
    assert doc['width'] == 40
    assert len(doc['rooms']) >= 2


def test_generate_to_stdout_with_banner(run_module, capsys):
    code = run_module.main(['generate', '--seed', 'stdout-seed', '--metrics'])
    assert code == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out)['metadata']['seed'] == 'stdout-seed'
    assert 'Mapsmith' in captured.err
    assert 'rooms_placed' in captured.err


def test_check_reports_ok(run_module, map_file, capsys):
    assert run_module.main(['--quiet', 'check', '--map', str(map_file)]) == 0
    assert '[OK]' in capsys.readouterr().out


def test_check_flags_dangling_references(run_module, map_file, capsys):
    doc = json.loads(map_file.read_text())
    doc['doors'].append({'id': 'door-x', 'x': 0, 'y': 0, 'corridorId': 'nowhere'})
    map_file.write_text(json.dumps(doc))
    assert run_module.main(['--quiet', 'check', '--map', str(map_file)]) == 1
    assert 'door-x' in capsys.readouterr().err


def test_regenerate_scope(run_module, map_file, tmp_path):
    out = tmp_path / 'regen.json'
    code = run_module.main(['--quiet', 'regenerate', '--map', str(map_file), '--scope', 'TRAPS', '--out', str(out)])
    assert code == 0
    history = json.loads(out.read_text())['metadata']['passHistory']
    assert [e['pass'] for e in history] == ['LAYOUT', 'TRAPS']
    assert history[-1]['seed'] == 'cli-seed'


def test_patch_with_report(run_module, map_file, tmp_path, capsys):
    actions = tmp_path / 'actions.json'
    actions.write_text(json.dumps({'actions': [
        {'type': 'RENUMBER_ROOMS', 'mode': 'AUTO'},
        {'type': 'REMOVE_ROOM', 'roomId': 'missing'},
    ]}))
    out = tmp_path / 'patched.json'
    code = run_module.main(['--quiet', 'patch', '--map', str(map_file), '--actions', str(actions), '--report', '--out', str(out)])
    assert code == 0
    err = capsys.readouterr().err
    # log lines precede the indented JSON report on stderr
    report = json.loads(err[err.index('[\n'):])
    assert [o['status'] for o in report] == ['APPLIED', 'NOOP']
    assert report[1]['reason'] == 'room not found'
    patched = json.loads(out.read_text())
    assert sorted(r['roomNumber'] for r in patched['rooms']) == list(range(1, len(patched['rooms']) + 1))


def test_player_view_drops_secret_rooms(run_module, map_file, capsys):
    doc = json.loads(map_file.read_text())
    doc['rooms'][0]['isSecret'] = True
    map_file.write_text(json.dumps(doc))
    assert run_module.main(['player-view', '--map', str(map_file)]) == 0
    view = json.loads(capsys.readouterr().out)
    assert all(not r['isSecret'] for r in view['rooms'])
    assert len(view['rooms']) == len(doc['rooms']) - 1


def test_invalid_config_returns_error_code(run_module, tmp_path, capsys):
    cfg = tmp_path / 'cfg.json'
    cfg.write_text(json.dumps({'layout': {'minRoomSize': 9, 'maxRoomSize': 5}}))
    assert run_module.main(['--quiet', 'generate', '--config', str(cfg)]) == 2
    assert 'maxRoomSize' in capsys.readouterr().err


def test_env_file_argument(run_module, tmp_path, monkeypatch, map_file):
    env_file = tmp_path / '.env'
    env_file.write_text('MAPSMITH_MAX_PATCH_ACTIONS=1\n')
    # register the key so the value loaded from the file is removed at teardown
    monkeypatch.setenv('MAPSMITH_MAX_PATCH_ACTIONS', '100')
    monkeypatch.delenv('MAPSMITH_MAX_PATCH_ACTIONS')
    actions = tmp_path / 'actions.json'
    actions.write_text(json.dumps([{'type': 'RENUMBER_ROOMS'}, {'type': 'RENUMBER_ROOMS'}]))
    code = run_module.main(['--env-file', str(env_file), '--quiet', 'patch', '--map', str(map_file), '--actions', str(actions)])
    assert code == 2


def test_invalid_setting_returns_error_code(run_module, monkeypatch, capsys):
    monkeypatch.setenv('MAPSMITH_HISTORY_LIMIT', '0')
    assert run_module.main(['--quiet', 'generate', '--seed', 'bad-limit']) == 2
    assert 'MAPSMITH_HISTORY_LIMIT' in capsys.readouterr().err
