"""Configuration loading from YAML files."""

from pathlib import Path
from string import Formatter
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from newsdigest.core.config import FeedConfig, PromptConfig
from newsdigest.utils.exceptions import ConfigurationError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)


class ConfigLoader:
    """Configuration loader for optional YAML overrides."""

    def __init__(self, config_dir: Path = Path("config")):
        """Initialize config loader.

        Args:
            config_dir: Configuration directory path
        """
        self.config_dir = Path(config_dir)

    @property
    def feeds_path(self) -> Path:
        return self.config_dir / "feeds.yaml"

    def has_feeds_config(self) -> bool:
        """Check whether an explicit feed list exists."""
        return self.feeds_path.exists()

    def load_feeds_config(self) -> List[FeedConfig]:
        """Load feed configuration from YAML.

        Returns:
            List of FeedConfig objects
        """
        return load_feeds_config(self.config_dir)

    def load_prompt_config(self, prompt_name: str) -> PromptConfig:
        """Load prompt configuration from YAML.

        Args:
            prompt_name: Name of prompt file (without .yaml extension)

        Returns:
            PromptConfig object
        """
        return load_prompt_config(prompt_name, self.config_dir)

    def load_prompt_or_default(self, prompt_name: str, default: PromptConfig) -> PromptConfig:
        """Load a prompt override, falling back to the built-in prompt.

        Args:
            prompt_name: Name of prompt file (without .yaml extension)
            default: Prompt used when no valid override exists

        Returns:
            PromptConfig object
        """
        if not (self.config_dir / "prompts" / f"{prompt_name}.yaml").exists():
            return default

        try:
            prompt = self.load_prompt_config(prompt_name)
            check_prompt_template(prompt, template_fields(default))
        except ConfigurationError as e:
            logger.warning("prompt_config_invalid_using_default", prompt=prompt_name, error=str(e))
            return default

        return prompt


def template_fields(prompt: PromptConfig) -> List[str]:
    """Placeholder names used by a prompt's user template."""
    return [field for _, field, _, _ in Formatter().parse(prompt.user_prompt_template) if field]


def check_prompt_template(prompt: PromptConfig, fields: List[str]) -> None:
    """Format the user template once with the given placeholders.

    Raises:
        ConfigurationError: If the template uses other placeholders or has
            unbalanced braces.
    """
    try:
        prompt.user_prompt_template.format(**{field: "" for field in fields})
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigurationError(f"Invalid prompt template: {e!r}") from e


def load_yaml(file_path: Path) -> Dict[str, Any]:
    """Load YAML file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML data

    Raises:
        ConfigurationError: If file doesn't exist or is invalid
    """
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {file_path}")
    return data


def load_feeds_config(config_dir: Path = Path("config")) -> List[FeedConfig]:
    """Load feed configuration from YAML.

    Args:
        config_dir: Configuration directory path

    Returns:
        List of enabled FeedConfig objects
    """
    data = load_yaml(config_dir / "feeds.yaml")

    feeds = []
    for feed_data in data.get("feeds", []) or []:
        try:
            feed = FeedConfig(**feed_data)
        except (TypeError, ValidationError) as e:
            name = feed_data.get("name", "unknown") if isinstance(feed_data, dict) else "unknown"
            raise ConfigurationError(f"Invalid feed configuration: {name}: {e}") from e
        if feed.enabled:
            feeds.append(feed)

    return feeds


def load_prompt_config(prompt_name: str, config_dir: Path = Path("config")) -> PromptConfig:
    """Load prompt configuration from YAML.

    Args:
        prompt_name: Name of prompt file (without .yaml extension)
        config_dir: Configuration directory path

    Returns:
        PromptConfig object
    """
    data = load_yaml(config_dir / "prompts" / f"{prompt_name}.yaml")

    try:
        return PromptConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid prompt configuration: {prompt_name}: {e}") from e
