"""Venue abstractions (asset ledger, paper lending venue, HTTP venue client)."""

from yield_adapter.venue.http_venue import HttpAssetLedger, HttpVenueClient, HttpVenueConfig
from yield_adapter.venue.ledger import AssetLedger
from yield_adapter.venue.paper_venue import PaperLendingVenue
from yield_adapter.venue.venue_base import YieldVenue

__all__ = [
    "AssetLedger",
    "HttpAssetLedger",
    "HttpVenueClient",
    "HttpVenueConfig",
    "PaperLendingVenue",
    "YieldVenue",
]
