"""Application context - built once at startup, passed to whoever needs it."""

from dataclasses import dataclass
from typing import Optional

from config.settings import Settings, settings as default_settings
from offer_engine.engine import AnalysisClient
from offer_engine.memory.offer_store import OfferStore
from offer_engine.ranking.comparison import ComparisonEngine
from offer_engine.transport import EngineTransport, build_transport


@dataclass
class AppContext:
    """The analysis client, the offer archive and the comparison engine."""

    settings: Settings
    client: AnalysisClient
    store: OfferStore
    comparison: ComparisonEngine

    @classmethod
    def create(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[EngineTransport] = None,
    ) -> "AppContext":
        config = config or default_settings
        transport = transport or build_transport(config)
        return cls(
            settings=config,
            client=AnalysisClient(transport, enable_search=config.enable_search),
            store=OfferStore(config.offer_store_path),
            comparison=ComparisonEngine(max_selection=config.max_comparison),
        )

    async def close(self):
        """Cleanup resources."""
        await self.client.close()
