"""
Application state shared by the API and the dashboard.

One AppState is built per process (or per test) and handed to whoever needs
it. UI preferences live here with a small subscribe/notify mechanism so views
can refresh when the locale, currency or theme changes.
"""
import json
import logging
from dataclasses import dataclass, asdict, fields
from typing import Callable, Optional

from .config.settings import Settings, get_settings, normalize_currency
from .services.audit_service import AuditService
from .services.catalog_service import CatalogService
from .services.orders_service import OrderService
from .services.reports_service import ReportsService
from .services.store import JsonStore

logger = logging.getLogger(__name__)

Listener = Callable[[set], None]


@dataclass
class UIPreferences:
    locale: str = "pt-BR"
    currency: str = "BRL"
    theme: str = "system"
    sidebar_open: bool = True
    current_page: str = "dashboard"


class AppState:
    """Injectable application state: preferences, listeners and wired services."""

    def __init__(self, settings: Settings, store: JsonStore):
        self.settings = settings
        self.store = store
        plan = settings.shop.plan
        self.audit = AuditService(store, user_id=settings.user_id)
        self.catalog = CatalogService(store, self.audit, plan=plan)
        self.orders = OrderService(store, self.audit, plan=plan)
        self.reports = ReportsService(self.orders, self.catalog, plan=plan)
        self.preferences = self._load_preferences()
        self._listeners: list[Listener] = []

    @classmethod
    def create(cls, settings: Optional[Settings] = None) -> 'AppState':
        settings = settings or get_settings()
        return cls(settings, JsonStore(settings.data_dir))

    def _load_preferences(self) -> UIPreferences:
        prefs = UIPreferences(locale=self.settings.shop.locale, currency=self.settings.shop.currency)
        path = self.settings.preferences_file
        if path.exists():
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    stored = json.load(f) or {}
                known = {f.name for f in fields(UIPreferences)}
                prefs = UIPreferences(**{**asdict(prefs), **{k: v for k, v in stored.items() if k in known}})
            except (OSError, json.JSONDecodeError, TypeError) as e:
                logger.warning("Failed to load UI preferences: %s", e)
        prefs.currency = normalize_currency(prefs.currency, prefs.locale)
        return prefs

    def _save_preferences(self):
        path = self.settings.preferences_file
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self.preferences), f, indent=2)
        except OSError as e:
            logger.warning("Failed to save UI preferences: %s", e)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with the set of changed keys. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes):
        """Change preferences, persist them, and notify listeners of what changed."""
        known = {f.name for f in fields(UIPreferences)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown preference(s): {', '.join(sorted(unknown))}")

        changed = {k for k, v in changes.items() if getattr(self.preferences, k) != v}
        if not changed:
            return
        for key in changed:
            setattr(self.preferences, key, changes[key])
        self._save_preferences()

        for listener in list(self._listeners):
            listener(changed)

    def set_locale(self, locale: str):
        """Switch locale and the currency that goes with it."""
        self.update(locale=locale, currency=normalize_currency(None, locale))

    def set_plan(self, plan: str):
        """Persist the plan and apply it to every service."""
        self.settings.save_shop({'plan': plan})
        for service in (self.catalog, self.orders, self.reports):
            service.plan = plan
