# tests/unit/test_config.py
"""Unit tests for configuration."""

import pytest

from newsdigest.core.config import Config, PromptConfig
from newsdigest.core.enums import Language, SourceType, TimeRange
from newsdigest.pipeline.classifiers.topic_classifier import DEFAULT_PROMPT as CLASSIFICATION_PROMPT
from newsdigest.pipeline.generators.analysis_generator import DEFAULT_PROMPT as ANALYSIS_PROMPT
from newsdigest.services.config_loader import ConfigLoader, check_prompt_template, template_fields
from newsdigest.utils.exceptions import ConfigurationError


@pytest.mark.unit
class TestConfig:
    """Tests for the environment-backed Config."""

    def test_defaults(self, monkeypatch):
        """Should provide working defaults without any environment."""
        monkeypatch.delenv("NEWS_KEYWORDS", raising=False)
        config = Config(_env_file=None)

        assert config.news_time_range == TimeRange.WEEK
        assert config.max_items_per_source == 20
        assert config.keywords == []
        assert config.github_language_list == ["typescript", "python", "rust"]

    def test_reads_environment(self, monkeypatch):
        """Should read and split comma-separated settings."""
        monkeypatch.setenv("NEWS_KEYWORDS", "AI, LLM ,agent")
        monkeypatch.setenv("EMAIL_TO", "a@example.com,b@example.com")
        monkeypatch.setenv("NEWS_TIME_RANGE", "1d")

        config = Config(_env_file=None)

        assert config.keywords == ["AI", "LLM", "agent"]
        assert config.x_query_keywords == ["AI", "LLM", "agent"]
        assert config.email_recipient_list == ["a@example.com", "b@example.com"]
        assert config.news_time_range.hours == 24

    def test_legacy_v2ex_alias(self, monkeypatch):
        """Should accept the misspelled V2EX variable names."""
        monkeypatch.setenv("VE2X_FEEDS", "https://www.v2ex.com/feed/tab/tech.xml")
        monkeypatch.setenv("INCLUDE_VE2X", "false")

        config = Config(_env_file=None)

        assert config.v2ex_feeds == "https://www.v2ex.com/feed/tab/tech.xml"
        assert config.include_v2ex is False

    def test_feed_configs(self, test_config):
        """Should expand each enabled group into feeds."""
        config = test_config.model_copy(
            update={"rss_feeds": "https://www.example.com/rss", "include_reddit": False, "include_linux_do": False}
        )

        feeds = config.feed_configs()

        assert [(feed.name, feed.source_type) for feed in feeds] == [
            ("example.com", SourceType.RSS),
            ("V2EX", SourceType.V2EX),
            ("Product Hunt", SourceType.PRODUCT_HUNT),
        ]
        assert feeds[0].filter_keywords is True
        assert feeds[1].language == Language.ZH
        assert feeds[2].timeout_sec == 30

    def test_validate_paths(self, test_config):
        """Should create output directories."""
        test_config.validate_paths()

        assert test_config.output_daily_dir.is_dir()
        assert test_config.output_rss_path.parent.is_dir()
        assert test_config.topic_stats_path.parent.is_dir()


@pytest.mark.unit
class TestConfigLoader:
    """Tests for YAML configuration overrides."""

    def test_missing_feeds_file(self, tmp_path):
        """Should report no feeds file."""
        assert not ConfigLoader(tmp_path).has_feeds_config()

    def test_invalid_feed(self, tmp_path):
        """Should raise ConfigurationError for bad entries."""
        (tmp_path / "feeds.yaml").write_text("feeds:\n  - name: Broken\n    url: not-a-url\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Broken"):
            ConfigLoader(tmp_path).load_feeds_config()

    def test_invalid_yaml(self, tmp_path):
        """Should raise ConfigurationError for malformed YAML."""
        (tmp_path / "feeds.yaml").write_text("feeds: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path).load_feeds_config()

    def test_prompt_override(self, tmp_path):
        """Should prefer a prompt file over the default."""
        default = PromptConfig(system_prompt="default", user_prompt_template="{articles}")
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "digest_analysis.yaml").write_text(
            "system_prompt: custom\nuser_prompt_template: 'Items: {articles}'\n", encoding="utf-8"
        )

        prompt = ConfigLoader(tmp_path).load_prompt_or_default("digest_analysis", default)

        assert prompt.system_prompt == "custom"

    def test_prompt_default(self, tmp_path):
        """Should fall back for missing or invalid prompt files."""
        default = PromptConfig(system_prompt="default", user_prompt_template="{articles}")
        loader = ConfigLoader(tmp_path)

        assert loader.load_prompt_or_default("topic_classification", default) is default

        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "topic_classification.yaml").write_text("system_prompt: only\n", encoding="utf-8")

        assert loader.load_prompt_or_default("topic_classification", default) is default

    @pytest.mark.parametrize(
        "template",
        [
            'Answer as {"title": "..."} for {articles}',
            "Focus on {region} stories: {articles}",
            "Unbalanced { brace {articles}",
        ],
    )
    def test_prompt_with_bad_placeholders_falls_back(self, tmp_path, template):
        """Should reject overrides that would not format with the known placeholders."""
        default = PromptConfig(system_prompt="default", user_prompt_template="{keywords}: {articles}")
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "digest_analysis.yaml").write_text(
            f"system_prompt: custom\nuser_prompt_template: |\n  {template}\n", encoding="utf-8"
        )

        assert ConfigLoader(tmp_path).load_prompt_or_default("digest_analysis", default) is default

    def test_prompt_with_escaped_braces_kept(self, tmp_path):
        """Should accept doubled braces and a subset of the placeholders."""
        default = PromptConfig(system_prompt="default", user_prompt_template="{keywords}: {articles}")
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "digest_analysis.yaml").write_text(
            'system_prompt: custom\nuser_prompt_template: |\n  Answer as {{"title": "..."}} for {articles}\n',
            encoding="utf-8",
        )

        prompt = ConfigLoader(tmp_path).load_prompt_or_default("digest_analysis", default)

        assert prompt.system_prompt == "custom"
        assert prompt.user_prompt_template.format(keywords="", articles="[]") == 'Answer as {"title": "..."} for []\n'

    @pytest.mark.parametrize("default", [ANALYSIS_PROMPT, CLASSIFICATION_PROMPT])
    def test_builtin_prompts_format(self, default):
        """Should format the built-in templates with their own placeholders."""
        check_prompt_template(default, template_fields(default))
        assert "articles" in template_fields(default)
