import importlib
import logging
from unittest.mock import MagicMock

import pytest

from recipe_reco import config
from recipe_reco.cli import build_parser, run
from recipe_reco.collaborators import ProfileProvider
from recipe_reco.config import Settings, load_settings
from recipe_reco.logging_utils import RUN_ID, StructuredFormatter
from recipe_reco.schema import Channel, ChannelReport, GeneratorOutcome, RefreshReport, ScoredRecipe
from tests.fakes import make_recipe


def test_refresh_command_prints_channel_report(capsys):
    service = MagicMock()
    report = RefreshReport(user_id="A")
    report.channels[Channel.TRENDING] = ChannelReport(GeneratorOutcome(Channel.TRENDING), persisted=3)
    report.channels[Channel.AI_GENERATED] = ChannelReport(GeneratorOutcome(Channel.AI_GENERATED, error="ReadTimeout: slow"))
    service.orchestrator.refresh.return_value = report

    assert run(build_parser().parse_args(["refresh", "--user-id", "A"]), service) == 0

    out = capsys.readouterr().out
    assert "refreshed A: 3 recommendations" in out
    assert "failed (ReadTimeout: slow)" in out


def test_show_command_single_channel(capsys, now):
    service = MagicMock()
    service.query.get_recommendations.return_value = [
        ScoredRecipe(make_recipe("r1", title="Tomato Salad"), 0.6, "Perfect for summer season", Channel.SEASONAL, now)
    ]

    run(build_parser().parse_args(["show", "--user-id", "A", "--channel", "seasonal"]), service)

    service.query.get_recommendations.assert_called_once_with("A", Channel.SEASONAL)
    out = capsys.readouterr().out
    assert "Tomato Salad" in out
    assert "Perfect for summer season" in out


def test_show_rejects_unknown_channel():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["show", "--user-id", "A", "--channel", "viral"])


def test_reap_command(capsys):
    service = MagicMock()
    service.store.reap_expired.return_value = 4
    run(build_parser().parse_args(["reap"]), service)
    assert "reaped 4" in capsys.readouterr().out


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SPOONACULAR_API_KEY", "abc")
    monkeypatch.setenv("RECO_HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("RECO_DETAIL_WORKERS", "3")
    settings = load_settings()
    assert settings.spoonacular_api_key == "abc"
    assert settings.http_timeout_seconds == 2.5
    assert settings.detail_fetch_workers == 3


def test_structured_formatter_line_shape():
    record = logging.LogRecord("store", logging.WARNING, "/x/store.py", 10, "read failed %s", ("u1",), None)
    record.invoking_func = "query_by_channel"
    record.next_step = "Propagate"
    line = StructuredFormatter().format(record)
    parts = line.split("|")
    assert parts[0] == RUN_ID
    assert parts[3] == "WARNING"
    assert parts[5].startswith("store.")
    assert "TTL-bounded recommendation persistence" in line
    assert "read failed u1" in line
    assert line.endswith("<END>")


@pytest.mark.parametrize(
    "module",
    [
        "recipe_reco.catalog.merger",
        "recipe_reco.collaborators",
        "recipe_reco.generators.base",
        "recipe_reco.orchestrator",
        "recipe_reco.search.spoonacular",
        "recipe_reco.store",
    ],
)
def test_module_loggers_are_named_after_their_file(module):
    mod = importlib.import_module(module)
    stem = module.rsplit(".", 1)[-1]
    assert mod.logger.name == stem
    assert stem in StructuredFormatter.MODULE_PURPOSES


def test_supabase_client_shares_search_timeout(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    fake_create = MagicMock()
    monkeypatch.setattr(config, "create_client", fake_create)

    config.get_supabase_client(Settings(http_timeout_seconds=3.5))

    url, key = fake_create.call_args.args
    assert (url, key) == ("https://project.supabase.co", "service-key")
    assert fake_create.call_args.kwargs["options"].function_client_timeout == 4


def test_missing_profile_is_logged(db, caplog):
    with caplog.at_level(logging.INFO, logger="collaborators"):
        assert ProfileProvider(db).get_profile("ghost") is None
    assert "No profile for user=ghost" in caplog.text
