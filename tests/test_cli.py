"""
Tests for the transfer, check-keys and config CLI commands.
"""

import json
import pytest
from click.testing import CliRunner
from unittest.mock import patch

from transferrer.cli import cli
from transferrer.commands.transfer import build_service
from transferrer.config import get_default_config, apply_env_overrides, merge_configs
from transferrer.credentials import resolve_secrets
from transferrer.domain import VersionTag
from transferrer.exit_codes import (
    API_ERROR, AUTH_ERROR, CONFIG_ERROR, DATA_ERROR, ConfigError, SubmissionError,
)
from transferrer.infra import GitHubClient, RegistryClient


def parse_jsonl(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith('{')]


@pytest.fixture
def workspace(tmp_path):
    """Legacy snapshot, metadata checkout and config rooted in tmp_path."""
    legacy_file = tmp_path / 'bower-packages.json'
    legacy_file.write_text(json.dumps({
        'purescript-foo': 'https://github.com/OldOwner/purescript-foo',
        'purescript-bar': 'https://github.com/owner/purescript-bar',
    }))

    metadata_dir = tmp_path / 'metadata'
    metadata_dir.mkdir()
    (metadata_dir / 'foo.json').write_text(json.dumps({
        'location': {'githubOwner': 'OldOwner', 'githubRepo': 'purescript-foo'},
        'published': {'1.0.0': {'ref': 'v1.0.0'}},
    }))
    (metadata_dir / 'bar.json').write_text(json.dumps({
        'location': {'githubOwner': 'owner', 'githubRepo': 'purescript-bar'},
        'published': {'2.0.0': {'ref': 'v2.0.0'}},
    }))

    config = get_default_config()
    config['paths'] = {
        'legacy_file': str(legacy_file),
        'metadata_dir': str(metadata_dir),
        'log_dir': str(tmp_path / 'logs'),
    }
    return config, tmp_path


TAGS = {
    ('OldOwner', 'purescript-foo'): [
        VersionTag('v1.0.0', 'https://api.github.com/repos/NewOwner/purescript-foo/commits/abc'),
    ],
    ('owner', 'purescript-bar'): [
        VersionTag('v2.0.0', 'https://api.github.com/repos/Owner/Purescript-Bar/commits/def'),
    ],
}


def fake_list_tags(self, owner, name):
    return TAGS.get((owner, name))


class TestTransferCommand:
    """Tests for transfer command through CLI runner."""

    def invoke(self, config, args, env):
        runner = CliRunner()
        with patch('transferrer.commands.transfer.load_config', return_value=config):
            return runner.invoke(cli, ['transfer'] + args, env=env)

    def test_transfers_moved_package(self, workspace, secret_env):
        config, tmp_path = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer', return_value={}) as mock_submit:
            result = self.invoke(config, ['--no-table'], secret_env)

        assert result.exit_code == 0, result.output
        assert parse_jsonl(result.output) == [{
            'name': 'purescript-foo',
            'old': 'https://github.com/OldOwner/purescript-foo',
            'new': 'https://github.com/NewOwner/purescript-foo.git',
            'dry_run': False,
        }]

        mock_submit.assert_called_once()
        envelope = mock_submit.call_args[0][0]
        assert envelope.payload.name == 'foo'
        assert envelope.payload.new_location.owner == 'NewOwner'

        # Snapshot untouched without --write
        snapshot = json.loads((tmp_path / 'bower-packages.json').read_text())
        assert snapshot['purescript-foo'] == 'https://github.com/OldOwner/purescript-foo'

        logs = list((tmp_path / 'logs').glob('transfer-*.log'))
        assert len(logs) == 1

    def test_write_saves_snapshot(self, workspace, secret_env):
        config, tmp_path = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer', return_value={}):
            result = self.invoke(config, ['--no-table', '--write'], secret_env)

        assert result.exit_code == 0, result.output
        snapshot = json.loads((tmp_path / 'bower-packages.json').read_text())
        assert snapshot == {
            'purescript-foo': 'https://github.com/NewOwner/purescript-foo.git',
            'purescript-bar': 'https://github.com/owner/purescript-bar',
        }

    def test_dry_run_does_not_submit_or_write(self, workspace, secret_env):
        config, tmp_path = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer') as mock_submit:
            result = self.invoke(config, ['--no-table', '--write', '--dry-run'], secret_env)

        assert result.exit_code == 0, result.output
        mock_submit.assert_not_called()
        assert parse_jsonl(result.output)[0]['dry_run'] is True
        snapshot = json.loads((tmp_path / 'bower-packages.json').read_text())
        assert snapshot['purescript-foo'] == 'https://github.com/OldOwner/purescript-foo'

    def test_quiet_suppresses_output(self, workspace, secret_env):
        config, _ = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer', return_value={}):
            result = self.invoke(config, ['--no-table', '-q'], secret_env)

        assert result.exit_code == 0
        assert parse_jsonl(result.output) == []

    def test_table_output(self, workspace, secret_env):
        config, _ = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer', return_value={}), \
                patch('transferrer.commands.transfer.render_transfer_table') as mock_render:
            result = self.invoke(config, ['--table'], secret_env)

        assert result.exit_code == 0, result.output
        changes, = mock_render.call_args[0]
        assert list(changes) == ['purescript-foo']
        assert mock_render.call_args.kwargs == {'dry_run': False}

    def test_missing_secret_exits_with_config_error(self, workspace, secret_env):
        config, _ = workspace
        env = dict(secret_env, TRANSFER_BOT_ED25519=None)

        with patch.object(RegistryClient, 'submit_transfer') as mock_submit:
            result = self.invoke(config, ['--no-table'], env)

        assert result.exit_code == CONFIG_ERROR
        error = parse_jsonl(result.output)[0]
        assert error['type'] == 'MissingConfigError'
        assert 'TRANSFER_BOT_ED25519' in error['error']
        mock_submit.assert_not_called()

    def test_bad_token_exits_with_config_error(self, workspace, secret_env):
        config, _ = workspace
        env = dict(secret_env, GITHUB_TOKEN='gho_oauth')

        result = self.invoke(config, ['--no-table'], env)

        assert result.exit_code == CONFIG_ERROR
        assert 'gho_oauth' in parse_jsonl(result.output)[0]['error']

    def test_missing_metadata_exits_with_data_error(self, workspace, secret_env):
        config, tmp_path = workspace
        (tmp_path / 'metadata' / 'bar.json').unlink()

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer') as mock_submit:
            result = self.invoke(config, ['--no-table'], secret_env)

        assert result.exit_code == DATA_ERROR
        assert parse_jsonl(result.output)[0]['type'] == 'MetadataAbsentError'
        mock_submit.assert_not_called()

        log_file, = (tmp_path / 'logs').glob('transfer-*.log')
        log_text = log_file.read_text()
        assert 'purescript-bar has tags but no registry metadata' in log_text
        assert 'ERROR' in log_text

    def test_rejected_submission_exits_with_api_error(self, workspace, secret_env):
        config, tmp_path = workspace

        with patch.object(GitHubClient, 'list_tags', fake_list_tags), \
                patch.object(RegistryClient, 'submit_transfer',
                             side_effect=SubmissionError("rejected", status_code=403)):
            result = self.invoke(config, ['--no-table', '--write'], secret_env)

        assert result.exit_code == API_ERROR
        snapshot = json.loads((tmp_path / 'bower-packages.json').read_text())
        assert snapshot['purescript-foo'] == 'https://github.com/OldOwner/purescript-foo'

    def test_legacy_file_option_overrides_config(self, workspace, secret_env, tmp_path):
        config, _ = workspace
        other = tmp_path / 'other.json'
        other.write_text(json.dumps({}))

        with patch.object(RegistryClient, 'submit_transfer') as mock_submit:
            result = self.invoke(config, ['--no-table', '--legacy-file', str(other)], secret_env)

        assert result.exit_code == 0, result.output
        assert parse_jsonl(result.output) == []
        mock_submit.assert_not_called()


class TestBuildService:
    """Tests for wiring clients from configuration values."""

    def test_numeric_settings_are_cast(self, secret_env, tmp_path):
        config = merge_configs(get_default_config(), {
            'github': {'max_retries': '5', 'base_delay_seconds': '0.5', 'max_delay_seconds': 8},
            'registry': {'timeout_seconds': '12.5'},
        })

        service = build_service(config, resolve_secrets(secret_env), tmp_path)

        client = service.reconciler.tag_lister.client
        assert client.max_retries == 5
        assert client.base_delay == 0.5
        assert client._backoff(1) == 1.0
        assert client.max_delay == 8.0
        assert service.registry.timeout == 12.5

    def test_non_numeric_setting_is_config_error(self, secret_env, tmp_path):
        config = merge_configs(get_default_config(), {'github': {'base_delay_seconds': 'soon'}})

        with pytest.raises(ConfigError) as exc:
            build_service(config, resolve_secrets(secret_env), tmp_path)
        assert 'github.base_delay_seconds' in str(exc.value)

    def test_env_float_override_reaches_transfer(self, workspace, secret_env):
        config, _ = workspace
        env = dict(secret_env, TRANSFERRER_GITHUB_BASE_DELAY_SECONDS='0.5')
        seen = {}

        def record_client(self, owner, name):
            seen['delay'] = self._backoff(0)
            return fake_list_tags(self, owner, name)

        with patch('transferrer.commands.transfer.load_config',
                   side_effect=lambda: apply_env_overrides(config)), \
                patch.object(GitHubClient, 'list_tags', record_client), \
                patch.object(RegistryClient, 'submit_transfer', return_value={}):
            result = CliRunner().invoke(cli, ['transfer', '--no-table'], env=env)

        assert result.exit_code == 0, result.output
        assert seen['delay'] == 0.5

class TestCheckKeysCommand:
    """Tests for check-keys command through CLI runner."""

    def test_valid_keys(self, secret_env):
        result = CliRunner().invoke(cli, ['check-keys'], env=secret_env)

        assert result.exit_code == 0, result.output
        report = parse_jsonl(result.output)[0]
        assert report['verified'] is True
        assert report['slots'] == [
            'GITHUB_TOKEN',
            'TRANSFER_BOT_TOKEN',
            'TRANSFER_BOT_ED25519',
            'TRANSFER_BOT_ED25519_PUB',
        ]

    def test_mismatched_keys(self, secret_env, other_keypair):
        env = dict(secret_env, TRANSFER_BOT_ED25519_PUB=other_keypair.public_env)
        result = CliRunner().invoke(cli, ['check-keys'], env=env)

        assert result.exit_code == AUTH_ERROR
        assert parse_jsonl(result.output)[0]['type'] == 'SigningError'

    def test_missing_key(self, secret_env):
        env = dict(secret_env, TRANSFER_BOT_ED25519_PUB=None)
        result = CliRunner().invoke(cli, ['check-keys'], env=env)
        assert result.exit_code == CONFIG_ERROR


class TestConfigCommand:
    """Tests for config show and config init."""

    @pytest.fixture
    def env(self, tmp_path):
        return {'HOME': str(tmp_path), 'TRANSFERRER_CONFIG': None}

    def test_show_path_defaults_to_home(self, env, tmp_path):
        result = CliRunner().invoke(cli, ['config', 'show', '--path'], env=env)

        assert result.exit_code == 0, result.output
        shown = parse_jsonl(result.output)[0]
        assert shown == {'config_path': str(tmp_path / '.transferrer' / 'config.json')}

    def test_show_applies_env_overrides(self, env):
        env = dict(env, TRANSFERRER_GITHUB_MAX_RETRIES='9')
        result = CliRunner().invoke(cli, ['config', 'show'], env=env)

        assert result.exit_code == 0, result.output
        shown = parse_jsonl(result.output)[0]
        assert shown['github']['max_retries'] == 9
        assert shown['paths'] == get_default_config()['paths']

    def test_init_writes_defaults(self, env, tmp_path):
        result = CliRunner().invoke(cli, ['config', 'init'], env=env)

        assert result.exit_code == 0, result.output
        written = tmp_path / '.transferrer' / 'config.json'
        assert parse_jsonl(result.output)[0] == {'config_path': str(written), 'written': True}
        assert json.loads(written.read_text()) == get_default_config()

    def test_init_refuses_existing_file(self, env, tmp_path):
        existing = tmp_path / '.transferrer' / 'config.json'
        existing.parent.mkdir()
        existing.write_text('{"github": {"max_retries": 7}}')

        result = CliRunner().invoke(cli, ['config', 'init'], env=env)

        assert result.exit_code == CONFIG_ERROR
        assert '--force' in parse_jsonl(result.output)[0]['error']
        assert json.loads(existing.read_text()) == {'github': {'max_retries': 7}}

    def test_init_force_overwrites(self, env, tmp_path):
        existing = tmp_path / '.transferrer' / 'config.json'
        existing.parent.mkdir()
        existing.write_text('{"github": {"max_retries": 7}}')

        result = CliRunner().invoke(cli, ['config', 'init', '--force'], env=env)

        assert result.exit_code == 0, result.output
        assert json.loads(existing.read_text()) == get_default_config()

    def test_init_toml_via_config_variable(self, env, tmp_path):
        target = tmp_path / 'etc' / 'transferrer.toml'
        env = dict(env, TRANSFERRER_CONFIG=str(target))

        result = CliRunner().invoke(cli, ['config', 'init'], env=env)

        assert result.exit_code == 0, result.output
        assert '[registry]' in target.read_text()
        shown = CliRunner().invoke(cli, ['config', 'show'], env=env)
        assert parse_jsonl(shown.output)[0] == get_default_config()

class TestHelp:
    def test_lists_commands(self):
        result = CliRunner().invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'transfer' in result.output
        assert 'check-keys' in result.output
        assert 'config' in result.output
