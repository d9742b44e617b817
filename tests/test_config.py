"""Tests for ContextVar-based parse configuration.

Validates thread isolation, context manager behavior, and that an Engine
installs its own config only for the duration of a parse.
"""

from threading import Thread

import pytest

from rulewrite import (
    Engine,
    ParseConfig,
    Rule,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)


class TestParseConfigDataclass:
    """Test ParseConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Default config collects every error and passes unknown words through."""
        config = ParseConfig()
        assert config.fail_fast is False
        assert config.max_depth == 64
        assert config.passthrough_unmatched is True

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = ParseConfig()
        with pytest.raises(AttributeError):
            config.fail_fast = True  # type: ignore[misc]

    def test_negative_depth_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            ParseConfig(max_depth=-1)

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = ParseConfig.from_dict({"max_depth": 3, "theme": "dark"})
        assert config == ParseConfig(max_depth=3)


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_parse_config()

    def test_default_config(self) -> None:
        assert get_parse_config() == ParseConfig()

    def test_set_and_get(self) -> None:
        """set_parse_config() changes the current config."""
        set_parse_config(ParseConfig(fail_fast=True))
        assert get_parse_config().fail_fast is True

    def test_reset(self) -> None:
        set_parse_config(ParseConfig(max_depth=1))
        reset_parse_config()
        assert get_parse_config().max_depth == 64


class TestParseConfigContext:
    """Test the parse_config_context() context manager."""

    def test_restores_previous(self) -> None:
        with parse_config_context(ParseConfig(max_depth=2)):
            assert get_parse_config().max_depth == 2
            with parse_config_context(ParseConfig(max_depth=3)):
                assert get_parse_config().max_depth == 3
            assert get_parse_config().max_depth == 2
        assert get_parse_config().max_depth == 64

    def test_restores_on_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with parse_config_context(ParseConfig(fail_fast=True)):
                raise RuntimeError("boom")
        assert get_parse_config().fail_fast is False


class TestEngineConfig:
    """Engines install their config only while parsing."""

    def test_engine_config_not_leaked(self) -> None:
        engine = Engine(config=ParseConfig(passthrough_unmatched=False))
        assert not engine.parse("word").ok
        assert get_parse_config() == ParseConfig()

    def test_config_setter(self) -> None:
        engine = Engine()
        engine.config = ParseConfig(passthrough_unmatched=False)
        assert engine.config.passthrough_unmatched is False
        assert not engine.parse("word").ok

    def test_ambient_config_is_overridden(self) -> None:
        """The engine's own config wins over one installed by the caller."""
        with parse_config_context(ParseConfig(passthrough_unmatched=False)):
            assert Engine().parse("word").unwrap() == "word"

    def test_thread_isolation(self) -> None:
        """Each thread sees only its own config."""
        strict = Engine(
            [Rule.from_notation("   f", "   (", "   )", "  +call")],
            config=ParseConfig(fail_fast=True, passthrough_unmatched=False),
        )
        lenient = Engine([Rule.from_notation("   f", "   (", "   )", "  +call")])
        results: dict[str, object] = {}

        def run(name: str, engine: Engine) -> None:
            results[name] = [engine.parse("a b f()") for _ in range(50)]

        threads = [
            Thread(target=run, args=("strict", strict)),
            Thread(target=run, args=("lenient", lenient)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(len(r.errors) == 1 for r in results["strict"])
        assert all(r.unwrap() == "a b call" for r in results["lenient"])
