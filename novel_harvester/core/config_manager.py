import configparser
import os
from typing import Optional

from novel_harvester.utils.logger import get_logger
from novel_harvester.core import crawl_config

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
# Two levels up from novel_harvester/core to the project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(SCRIPT_DIR))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, 'workspace', 'config', 'settings.ini')
OUTPUT_ROOT_ENV_VAR = 'NH_OUTPUT_ROOT'
CRAWL_SECTION = 'Crawl'

logger = get_logger(__name__)

DEFAULT_CRAWL_SETTINGS = {
    'base_url': crawl_config.DEFAULT_BASE_URL,
    'output_dir': crawl_config.DEFAULT_OUTPUT_DIR,
    'max_stories': str(crawl_config.DEFAULT_MAX_STORIES),
    'collections': ','.join(crawl_config.DEFAULT_COLLECTIONS),
    'delay': f"{crawl_config.DEFAULT_DELAY_MIN}-{crawl_config.DEFAULT_DELAY_MAX}",
    'genres': ','.join(crawl_config.DEFAULT_TARGET_GENRES),
    'max_per_genre': str(crawl_config.DEFAULT_MAX_PER_GENRE),
    'min_chapters': str(crawl_config.DEFAULT_MIN_CHAPTERS),
    'max_chapters': str(crawl_config.DEFAULT_MAX_CHAPTERS),
}


class ConfigManager:
    def __init__(self, config_file_path=None):
        self.config_file_path = config_file_path or DEFAULT_CONFIG_PATH
        self.config = configparser.ConfigParser()
        self._load_config()

    def _load_config(self):
        """Loads the configuration from the INI file, creating a default one if missing."""
        if not os.path.exists(self.config_file_path):
            logger.warning(f"Config file not found at {self.config_file_path}. Creating a default config.")
            default_config = configparser.ConfigParser()
            default_config[CRAWL_SECTION] = dict(DEFAULT_CRAWL_SETTINGS)
            try:
                os.makedirs(os.path.dirname(self.config_file_path), exist_ok=True)
                with open(self.config_file_path, 'w', encoding='utf-8') as configfile:
                    default_config.write(configfile)
                logger.info(f"Created a default config file at: {self.config_file_path}")
            except OSError as e:
                logger.error(f"Error creating default config file: {e}. Using hardcoded defaults.", exc_info=True)
            self.config = default_config
            return

        self.config.read(self.config_file_path, encoding='utf-8')

        if not self.config.has_section(CRAWL_SECTION):
            self.config.add_section(CRAWL_SECTION)
            logger.info(f"Added missing [{CRAWL_SECTION}] section to the config.")

    def get_setting(self, section: str, option: str, fallback=None) -> Optional[str]:
        """Gets a specific setting from the configuration."""
        try:
            return self.config.get(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def get_crawl_setting(self, option: str) -> Optional[str]:
        """Gets an option of the [Crawl] section, falling back to the built-in default."""
        return self.get_setting(CRAWL_SECTION, option, fallback=DEFAULT_CRAWL_SETTINGS.get(option))

    def get_output_dir(self) -> str:
        """
        Returns the output root.
        Priority:
        1. NH_OUTPUT_ROOT environment variable.
        2. output_dir from the config file.
        3. Built-in default.
        """
        env_output_dir = os.getenv(OUTPUT_ROOT_ENV_VAR)
        if env_output_dir:
            logger.info(f"Using output directory from {OUTPUT_ROOT_ENV_VAR} environment variable: {env_output_dir}")
            return env_output_dir

        output_dir = self.get_crawl_setting('output_dir')
        logger.info(f"Using output directory from config: {output_dir}")
        return output_dir
