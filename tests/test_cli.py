import json
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError
from typer.testing import CliRunner

from gator.cli import cli
from gator.config import read_config

runner = CliRunner()


@pytest.fixture
def gator(engine, config_path):
    """Invoke the CLI against the test database and a temporary config file."""
    with mock.patch("gator.config.CONFIG_PATH", config_path), mock.patch(
        "gator.cli.get_engine", lambda config: engine
    ):
        yield lambda *args: runner.invoke(cli, list(args))


class TestCli:
    def test_register_and_follow(self, gator, config_path):
        result = gator("register", "kahya")
        assert result.exit_code == 0, result.output
        assert read_config(config_path).current_user_name == "kahya"

        result = gator("addfeed", "Hacker News", "https://news.ycombinator.com/rss")
        assert result.exit_code == 0, result.output

        result = gator("following")
        assert result.exit_code == 0
        assert "* Hacker News" in result.output

        result = gator("unfollow", "https://news.ycombinator.com/rss")
        assert result.exit_code == 0

        result = gator("following")
        assert "does not follow any feeds" in result.output

    def test_users(self, gator):
        gator("register", "kahya")
        gator("register", "holgith")

        result = gator("users")

        assert result.exit_code == 0
        assert "* holgith (current)" in result.output
        assert "* kahya\n" in result.output

    def test_login_switches_user(self, gator, config_path):
        gator("register", "kahya")
        gator("register", "holgith")

        result = gator("login", "kahya")

        assert result.exit_code == 0
        assert read_config(config_path).current_user_name == "kahya"

    @pytest.mark.parametrize(
        "args, message",
        [
            (["follow", "https://news.ycombinator.com/rss"], "no user is logged in"),
            (["login", "ghost"], "user 'ghost' not found"),
            (["agg", "whenever"], "invalid interval"),
        ],
    )
    def test_errors_exit_non_zero(self, gator, args, message):
        result = gator(*args)

        assert result.exit_code == 1
        assert message in result.output

    def test_agg_without_feeds(self, gator):
        result = gator("agg", "1s")

        assert result.exit_code == 1
        assert "no feeds to fetch" in result.output

    def test_follow_twice(self, gator):
        gator("register", "kahya")
        gator("addfeed", "Hacker News", "https://news.ycombinator.com/rss")

        result = gator("follow", "https://news.ycombinator.com/rss")

        assert result.exit_code == 1
        assert "already follows" in result.output

    def test_missing_argument(self, gator):
        result = gator("addfeed", "only-a-name")

        assert result.exit_code != 0


class TestCliDatabaseErrors:
    def test_invalid_database_url(self, config_path):
        config_path.write_text(json.dumps({"db_url": "not a database url"}))

        with mock.patch("gator.config.CONFIG_PATH", config_path), mock.patch(
            "gator.db.DATABASE_URL", None
        ):
            result = runner.invoke(cli, ["users"])

        assert result.exit_code == 1
        assert "error opening database 'not a database url'" in result.output

    def test_query_failure(self, gator):
        failure = OperationalError("SELECT 1", {}, Exception("database is locked"))

        with mock.patch("gator.cli.run", side_effect=failure):
            result = gator("users")

        assert result.exit_code == 1
        assert "database error" in result.output
        assert "database is locked" in result.output


@pytest.mark.parametrize(
    "verb", ["register", "login", "reset", "users", "agg", "addfeed", "feeds", "follow", "following", "unfollow"]
)
def test_every_command_has_help(verb):
    command = next(c for c in cli.registered_commands if c.callback.__name__ == verb)

    assert command.callback.__doc__
    result = runner.invoke(cli, [verb, "--help"])
    assert result.exit_code == 0
    assert command.callback.__doc__.strip() in " ".join(result.output.split())
