"""
NL2SQL-backed option source.

Produces selection-list options for guided parameter collection by
describing the list in natural language, generating and executing the
SQL, and caching the resulting options.
"""

import hashlib
import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from .option_cache import OptionsCache
from .schema_model import OptionItem
from .sql_generator import NL2SQLGenerator

logger = logging.getLogger(__name__)

SOURCE_TYPE = "NL2SQL"


@dataclass(frozen=True)
class Nl2SqlSourceConfig:
    """Describes an option list to be produced through NL2SQL."""

    description: str
    label_column: str
    value_column: str

    def config_hash(self) -> str:
        """Stable hash of the configuration for cache keys."""
        canonical = json.dumps(asdict(self), sort_keys=True, ensure_ascii=False)
        return hashlib.md5(canonical.encode("utf-8")).hexdigest()


class Nl2SqlOptionsSource:
    """Fetches option lists through the NL2SQL generator, with caching."""

    def __init__(
        self,
        generator: NL2SQLGenerator,
        cache: Optional[OptionsCache] = None,
    ):
        """
        Initialize the option source.

        Args:
            generator: The NL2SQL generator used to produce options
            cache: Optional options cache; when omitted one is created from
                the generator's cache configuration (if enabled)
        """
        self.generator = generator
        cache_config = generator.config.cache
        if cache is None and cache_config.enabled:
            cache = OptionsCache(ttl_minutes=cache_config.ttl_minutes)
        self.cache = cache

    def fetch_options(
        self,
        system_id: str,
        config: Nl2SqlSourceConfig,
    ) -> list[OptionItem]:
        """
        Fetch options for a system, degrading to an empty list on failure.

        Args:
            system_id: Identifier of the tenant system
            config: Description and label/value columns of the option list

        Returns:
            The option list, or [] if NL2SQL is disabled or generation
            or execution failed
        """
        if not self.generator.config.enabled:
            logger.warning(f"NL2SQL is disabled, no options for systemId={system_id}")
            return []

        key = (SOURCE_TYPE, system_id, config.config_hash())

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Options cache hit: key={key}")
                return cached

        try:
            options = self.generator.generate_and_execute(
                system_id,
                config.description,
                config.label_column,
                config.value_column,
            )
        except Exception as e:
            logger.error(
                f"NL2SQL options failed: systemId={system_id}, "
                f"description={config.description}, error={e}"
            )
            return []

        if self.cache is not None:
            self.cache.put(key, options)

        logger.info(f"Fetched {len(options)} options for systemId={system_id}")
        return options
