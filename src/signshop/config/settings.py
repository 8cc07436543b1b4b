"""
Centralized settings and path configuration for the sign shop back office.
"""
import json
import logging
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from typing import Optional

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ('BRL', 'USD')


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def normalize_currency(currency: Optional[str], locale: Optional[str]) -> str:
    """Return a supported currency code, derived from the locale when missing or unknown."""
    code = (currency or '').strip().upper()
    if code in SUPPORTED_CURRENCIES:
        return code
    return 'BRL' if (locale or '').lower().startswith('pt') else 'USD'


@dataclass
class ShopPreferences:
    """User-editable shop defaults, persisted in settings.json."""
    company_name: str = ""
    company_logo: str = ""
    locale: str = "pt-BR"
    currency: str = "BRL"
    default_markup: float = 40.0
    default_unit: str = "m"
    tax_percent: float = 0.0
    theme: str = "system"
    plan: str = "free"

    @classmethod
    def from_dict(cls, data: dict) -> 'ShopPreferences':
        known = {f.name for f in fields(cls)}
        prefs = cls(**{k: v for k, v in data.items() if k in known})
        prefs.currency = normalize_currency(prefs.currency, prefs.locale)
        return prefs


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Persisted files
    settings_file: Path
    preferences_file: Path

    # Shop defaults
    shop: ShopPreferences

    # Local user id used for audit entries
    user_id: str = "u1"

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and any stored overrides."""
        root = project_root or get_project_root()
        data = data_dir or root / 'data'
        settings_file = data / 'settings.json'

        shop = ShopPreferences()
        if settings_file.exists():
            try:
                with open(settings_file, 'r', encoding='utf-8') as f:
                    stored = json.load(f)
                shop = ShopPreferences.from_dict({**asdict(shop), **(stored or {})})
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Could not read %s, using defaults: %s", settings_file, e)

        return cls(
            project_root=root,
            data_dir=data,
            settings_file=settings_file,
            preferences_file=data / 'ui_preferences.json',
            shop=shop,
        )

    def save_shop(self, changes: dict) -> ShopPreferences:
        """Merge changes into the shop preferences and persist them."""
        self.shop = ShopPreferences.from_dict({**asdict(self.shop), **changes})
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self.shop), f, indent=2, ensure_ascii=False)
        logger.info("Saved shop settings to %s", self.settings_file)
        return self.shop


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
