"""
Service container for dependency injection.

This module defines a container that manages the creation and lifecycle of
service objects, repository objects, and other application components.
"""

import logging
from typing import TypeVar, cast

from portfolio_tracker.config import AppConfig
from portfolio_tracker.db import Database
from portfolio_tracker.repositories.history_repository import HistoryRepository
from portfolio_tracker.repositories.investment_repository import InvestmentRepository
from portfolio_tracker.repositories.settings_repository import SettingsRepository
from portfolio_tracker.services.investment_service import InvestmentService
from portfolio_tracker.services.portfolio_service import PortfolioService
from portfolio_tracker.services.price_service import PriceService
from portfolio_tracker.services.scenario_service import ScenarioService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceContainer:
    """
    Container for application services and repositories.

    This class is responsible for creating and providing access to various
    application components, ensuring proper dependency injection and lifecycle
    management.
    """

    def __init__(self, config: AppConfig, db: Database):
        """
        Initialise the service container.

        Args:
            config: Application configuration
            db: Database connection
        """
        self.config = config
        self.db = db
        self._repositories: dict[type, object] = {}
        self._services: dict[type, object] = {}

        # Initialise repositories
        self._init_repositories()

        # Initialise services
        self._init_services()

    def _init_repositories(self) -> None:
        """Initialise all repositories."""
        self._repositories[InvestmentRepository] = InvestmentRepository(self.db)
        self._repositories[HistoryRepository] = HistoryRepository(
            self.db, max_points=self.config.history_max_points
        )
        self._repositories[SettingsRepository] = SettingsRepository(self.db)

    def _init_services(self) -> None:
        """Initialise all services."""
        investment_repo: InvestmentRepository = self.get_repository(InvestmentRepository)
        self._services[InvestmentService] = InvestmentService(investment_repo)

        # Portfolio service records value history alongside the lots
        history_repo: HistoryRepository = self.get_repository(HistoryRepository)
        self._services[PortfolioService] = PortfolioService(investment_repo, history_repo)

        self._services[ScenarioService] = ScenarioService()
        self._services[PriceService] = PriceService(
            max_retries=self.config.yf_max_retries,
            max_backoff_seconds=self.config.yf_max_backoff_seconds,
        )
        logger.debug(
            f"Registered {len(self._repositories)} repositories and {len(self._services)} services"
        )

    def get_repository(self, repo_type: type[T]) -> T:
        """
        Get a repository instance by type.

        Args:
            repo_type: Repository class

        Returns:
            Instance of the requested repository

        Raises:
            KeyError: If repository type is not registered
        """
        if repo_type not in self._repositories:
            raise KeyError(f"Repository {repo_type.__name__} not registered")

        return cast(T, self._repositories[repo_type])

    def get_service(self, service_type: type[T]) -> T:
        """
        Get a service instance by type.

        Args:
            service_type: Service class

        Returns:
            Instance of the requested service

        Raises:
            KeyError: If service type is not registered
        """
        if service_type not in self._services:
            raise KeyError(f"Service {service_type.__name__} not registered")

        return cast(T, self._services[service_type])
