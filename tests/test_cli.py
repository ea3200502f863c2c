"""Tests for the command line interface."""

import logging

import pytest
import yaml
from click.testing import CliRunner

from web_auditor.cli import ComponentCLI, cli
from web_auditor.core.config import ConfigManager
from web_auditor.core.logger import ROOT_LOGGER


MODULE_SOURCE = '''
from web_auditor.core.scanning.modules import AuditModule


class {name}(AuditModule):
    """{description}"""
    INFO = {{'author': ['Jane Doe '], 'version': '0.2', 'priority': {priority}}}

    def run(self):
        pass
'''


@pytest.fixture(autouse=True)
def restore_loggers():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)


@pytest.fixture
def cli_config(temp_dir, test_config):
    """Config file pointing the module registry at a directory of checks."""
    modules_dir = temp_dir / 'modules'
    modules_dir.mkdir()
    (modules_dir / 'xss.py').write_text(
        MODULE_SOURCE.format(name='Xss', description='Cross-site scripting.', priority=5)
    )
    (modules_dir / 'csrf.py').write_text(
        MODULE_SOURCE.format(name='Csrf', description='Missing anti-CSRF tokens.', priority=0)
    )

    test_config['components']['modules']['directory'] = str(modules_dir)
    config_file = temp_dir / 'config.yml'
    with open(config_file, 'w') as f:
        yaml.dump(test_config, f)
    return config_file


class TestComponentCLI:
    """Test cases for ComponentCLI."""

    def test_list_components(self, cli_config):
        component_cli = ComponentCLI(ConfigManager(str(cli_config)))

        listing = component_cli.list_components('modules')

        assert [info['mod_name'] for info in listing] == ['csrf', 'xss']
        assert listing[1]['author'] == ['Jane Doe']
        assert listing[1]['description'] == 'Cross-site scripting.'

    def test_configured_filters(self, cli_config):
        config_manager = ConfigManager(str(cli_config))
        config_manager.set('listing.lsmod', ['xss'])

        listing = ComponentCLI(config_manager).list_components('modules')

        assert [info['mod_name'] for info in listing] == ['xss']

    def test_empty_kinds(self, cli_config):
        component_cli = ComponentCLI(ConfigManager(str(cli_config)))

        assert component_cli.list_components('plugins') == []
        assert component_cli.list_components('reports') == []


class TestCommands:
    """Test cases for the click commands."""

    def test_modules_command(self, cli_config):
        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'modules'])

        assert result.exit_code == 0
        assert 'xss' in result.output
        assert 'csrf' in result.output

    def test_modules_filter(self, cli_config):
        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'modules', '-f', 'csrf'])

        assert result.exit_code == 0
        assert 'csrf' in result.output
        assert 'xss' not in result.output

    def test_plugins_command_empty(self, cli_config):
        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'plugins'])

        assert result.exit_code == 0
        assert 'No plugins found' in result.output

    def test_reports_missing_directory(self, cli_config, temp_dir):
        with open(cli_config) as f:
            config = yaml.safe_load(f)
        config['components']['reports']['directory'] = str(temp_dir / 'nowhere')
        with open(cli_config, 'w') as f:
            yaml.dump(config, f)

        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'reports'])

        assert result.exit_code == 1
        assert 'Failed to list reports' in result.output

    def test_validate_config(self, cli_config):
        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'validate-config'])

        assert result.exit_code == 0
        assert 'Configuration is valid' in result.output

    def test_validate_config_errors(self, cli_config):
        with open(cli_config) as f:
            config = yaml.safe_load(f)
        config['scan']['http_precision'] = -1
        with open(cli_config, 'w') as f:
            yaml.dump(config, f)

        result = CliRunner().invoke(cli, ['--config', str(cli_config), 'validate-config'])

        assert result.exit_code == 1
        assert 'http_precision' in result.output

    def test_missing_config_file(self, temp_dir):
        result = CliRunner().invoke(cli, ['--config', str(temp_dir / 'missing.yml'), 'modules'])

        assert result.exit_code == 2
        assert 'Configuration file not found' in result.output
